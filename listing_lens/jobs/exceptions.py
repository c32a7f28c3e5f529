class JobError(Exception):
    """Base exception for job tracking errors."""


class InvalidJobTransitionError(JobError):
    """Raised when a status change would move a job backwards or skip a state."""
