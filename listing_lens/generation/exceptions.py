class GenerationError(Exception):
    """Raised when report generation fails."""


class GenerationNetworkError(GenerationError):
    """Raised when the AI provider call fails due to network/infrastructure issues."""


class PromptNotFoundError(GenerationError):
    """Raised when neither the category prompt nor the fallback prompt can be read."""
