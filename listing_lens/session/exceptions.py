class SessionError(Exception):
    """Base exception for upload session errors."""


class SessionValidationError(SessionError):
    """Raised when an upload is rejected before a session is created."""


class InvalidCategoryError(SessionValidationError):
    """Raised when the listing category is not one of the known categories."""


class NoValidAssetsError(SessionValidationError):
    """Raised when no uploaded file survives type and size filtering."""


class SessionExpiredError(SessionError):
    """Raised when a session or all of its screenshots are gone."""
