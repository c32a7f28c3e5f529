from pathlib import Path

from listing_lens.generation.exceptions import PromptNotFoundError
from listing_lens.logging.logger import Log
from listing_lens.session.models import Category

_DEFAULT_PROMPT_DIR = Path(__file__).parent / "prompts"

PROMPT_FILES: dict[Category, str] = {
    Category.VEHICLE: "vehicle.md",
    Category.PROPERTY: "property.md",
    Category.ELECTRONICS: "electronics.md",
    Category.OTHER: "general.md",
}
FALLBACK_PROMPT_FILE = "universal.md"


class PromptLoader:
    """Reads the system prompt for a listing category.

    Falls back to the universal prompt when the category prompt is missing.
    """

    def __init__(self, prompts_dir: Path | None = None) -> None:
        self._prompts_dir = prompts_dir if prompts_dir is not None else _DEFAULT_PROMPT_DIR

    def load(self, category: Category) -> str:
        """Return prompt text for category.

        Raises:
            PromptNotFoundError: if neither the category nor the fallback prompt is readable.
        """
        filename = PROMPT_FILES.get(category)
        if filename is not None:
            text = self._read(filename)
            if text is not None:
                return text
            Log.warning(f"Prompt {filename} not found, using {FALLBACK_PROMPT_FILE}")

        text = self._read(FALLBACK_PROMPT_FILE)
        if text is None:
            raise PromptNotFoundError(
                f"No prompt for category '{category.value}' and no {FALLBACK_PROMPT_FILE}"
            )
        return text

    def _read(self, filename: str) -> str | None:
        try:
            return (self._prompts_dir / filename).read_text(encoding="utf-8")
        except OSError:
            return None
