from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from listing_lens.session.models import Asset, Category, SessionMetadata


@dataclass(slots=True)
class PipelineContext:
    job_id: str
    session_id: str
    payment_reference: str | None = None
    session: SessionMetadata | None = None
    category: Category | None = None
    assets: list[Asset] = field(default_factory=list)
    system_prompt: str = ""
    report_id: str = ""
    html: str = ""
    error_message: str = ""


class PipelineStep(ABC):
    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
