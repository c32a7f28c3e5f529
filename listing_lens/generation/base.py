from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import date

from listing_lens.session.models import Asset, Category


class BaseReportGenerator(ABC):
    """Contract for all report generators."""

    @abstractmethod
    def generate(
        self,
        *,
        system_prompt: str,
        category: Category,
        images: Sequence[Asset],
        report_id: str,
        report_date: date,
    ) -> str:
        """Produce a standalone HTML report for the listing screenshots.

        Args:
            system_prompt: Category prompt text from the prompt loader.
            category: Listing category.
            images: Screenshots still available for the session (at least one).
            report_id: Short shareable identifier printed in the report.
            report_date: Date printed in the report.

        Returns:
            The HTML document, with code fences and surrounding commentary removed.

        Raises:
            GenerationError: on any failure.
        """
