"""Example generation client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseGenerationClient and register the provider in GeneratorFactory.
"""

from collections.abc import Sequence
from typing import ClassVar

from listing_lens.generation.client_base import BaseGenerationClient
from listing_lens.session.models import Asset


class ExampleClientAdapter(BaseGenerationClient):
    """Example adapter that returns a fixed HTML report.

    No network calls. Useful for local development and tests.
    """

    DEFAULT_RESPONSE: ClassVar[str] = (
        "<!DOCTYPE html>\n"
        "<html lang=\"en\">\n"
        "<head><meta charset=\"utf-8\"><title>Listing Lens Report</title></head>\n"
        "<body>\n"
        "<h1>Buyer Intelligence Report</h1>\n"
        "<p>This is an example report generated without calling an AI provider.</p>\n"
        "</body>\n"
        "</html>"
    )

    def create_report(
        self,
        *,
        model: str,
        system_prompt: str,
        images: Sequence[Asset],
        instruction: str,
        max_tokens: int,
    ) -> str:
        _ = model, system_prompt, images, instruction, max_tokens
        return self.DEFAULT_RESPONSE
