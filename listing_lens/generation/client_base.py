from abc import ABC, abstractmethod
from collections.abc import Sequence

from listing_lens.session.models import Asset


class BaseGenerationClient(ABC):
    """Contract for provider-specific vision model clients."""

    @abstractmethod
    def create_report(
        self,
        *,
        model: str,
        system_prompt: str,
        images: Sequence[Asset],
        instruction: str,
        max_tokens: int,
    ) -> str:
        """Return the provider's text output for the screenshots and instruction."""
