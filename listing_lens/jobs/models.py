import json
from dataclasses import dataclass
from enum import Enum
from typing import Any


class JobStatus(str, Enum):
    QUEUED = "queued"
    PROCESSING = "processing"
    COMPLETE = "complete"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETE, JobStatus.ERROR)


@dataclass(frozen=True)
class JobRecord:
    """What the polling client sees for one report-generation attempt."""

    job_id: str
    status: JobStatus
    queued_at: str | None = None
    started_at: str | None = None
    completed_at: str | None = None
    report_id: str | None = None
    html: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Stored and public shape; unset fields are omitted."""
        payload: dict[str, Any] = {
            "status": self.status.value,
            "queuedAt": self.queued_at,
            "startedAt": self.started_at,
            "completedAt": self.completed_at,
            "reportId": self.report_id,
            "html": self.html,
            "error": self.error,
        }
        return {key: value for key, value in payload.items() if value is not None}

    @staticmethod
    def from_dict(job_id: str, payload: dict[str, Any]) -> "JobRecord":
        """Raises ValueError if status is missing or unknown."""
        try:
            status = JobStatus(payload.get("status"))
        except ValueError as exc:
            raise ValueError(f"job {job_id} has invalid status {payload.get('status')!r}") from exc
        return JobRecord(
            job_id=job_id,
            status=status,
            queued_at=_optional_str(payload, "queuedAt"),
            started_at=_optional_str(payload, "startedAt"),
            completed_at=_optional_str(payload, "completedAt"),
            report_id=_optional_str(payload, "reportId"),
            html=_optional_str(payload, "html"),
            error=_optional_str(payload, "error"),
        )


@dataclass(frozen=True)
class JobTicket:
    """Queue message handing one job from the dispatcher to a worker."""

    job_id: str
    session_id: str
    payment_reference: str | None = None

    def to_json(self) -> str:
        return json.dumps(
            {
                "jobId": self.job_id,
                "sessionId": self.session_id,
                "paymentReference": self.payment_reference,
            }
        )

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> "JobTicket":
        """Raises ValueError if jobId or sessionId is missing."""
        job_id = payload.get("jobId")
        session_id = payload.get("sessionId")
        if not isinstance(job_id, str) or not job_id:
            raise ValueError("ticket 'jobId' must be a non-empty string")
        if not isinstance(session_id, str) or not session_id:
            raise ValueError("ticket 'sessionId' must be a non-empty string")
        reference = payload.get("paymentReference")
        if reference is not None and not isinstance(reference, str):
            raise ValueError("ticket 'paymentReference' must be a string or null")
        return JobTicket(job_id=job_id, session_id=session_id, payment_reference=reference or None)


def _optional_str(payload: dict[str, Any], key: str) -> str | None:
    value = payload.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string or null")
    return value
