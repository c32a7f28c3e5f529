"""AI-powered listing report generator."""

from collections.abc import Sequence
from datetime import date

from listing_lens.generation.base import BaseReportGenerator
from listing_lens.generation.client_base import BaseGenerationClient
from listing_lens.generation.exceptions import GenerationError
from listing_lens.generation.output import extract_html_document
from listing_lens.logging.logger import Log
from listing_lens.session.models import Asset, Category

INSTRUCTION_TEMPLATE = (
    "Analyse this {category} listing and generate the complete Listing Lens "
    "buyer intelligence report as standalone HTML."
)

REPORT_CONTEXT_TEMPLATE = """

---
Report ID: {report_id}
Date: {report_date}
Screenshots: {screenshot_count}
Category: {category}

Identify country/jurisdiction from screenshots and adapt all costs, laws, and buyer rights accordingly.

Output ONLY valid HTML starting with <!DOCTYPE html>. No markdown, no code fences."""


def format_report_date(value: date) -> str:
    """Format as day, short month, year, e.g. '7 Mar 2026'."""
    return f"{value.day} {value:%b %Y}"


class ReportGenerator(BaseReportGenerator):
    """Generates buyer intelligence reports from screenshots using an AI provider."""

    def __init__(
        self,
        *,
        client: BaseGenerationClient,
        model: str,
        max_tokens: int = 8000,
    ) -> None:
        self._client = client
        self._model = model
        self._max_tokens = max_tokens

    def generate(
        self,
        *,
        system_prompt: str,
        category: Category,
        images: Sequence[Asset],
        report_id: str,
        report_date: date,
    ) -> str:
        if not images:
            raise GenerationError("No screenshots to analyse")

        prompt = self._build_system_prompt(system_prompt, category, len(images), report_id, report_date)
        instruction = INSTRUCTION_TEMPLATE.format(category=category.value)

        raw_response = self._client.create_report(
            model=self._model,
            system_prompt=prompt,
            images=images,
            instruction=instruction,
            max_tokens=self._max_tokens,
        )
        Log.debug(f"AI raw response for {report_id}: {len(raw_response)} chars")

        html = extract_html_document(raw_response)
        if not html:
            raise GenerationError("AI returned an empty report")

        Log.info(f"Generated report {report_id}: {len(html)} chars from {len(images)} screenshots")
        return html

    @staticmethod
    def _build_system_prompt(
        system_prompt: str,
        category: Category,
        screenshot_count: int,
        report_id: str,
        report_date: date,
    ) -> str:
        return system_prompt + REPORT_CONTEXT_TEMPLATE.format(
            report_id=report_id,
            report_date=format_report_date(report_date),
            screenshot_count=screenshot_count,
            category=category.value,
        )
