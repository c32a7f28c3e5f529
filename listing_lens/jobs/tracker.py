"""Job status records: the only state the polling client ever reads."""

import json
import secrets
import string
import uuid
from collections.abc import Callable
from dataclasses import replace
from datetime import datetime

from listing_lens.config.settings import Settings
from listing_lens.jobs.exceptions import InvalidJobTransitionError
from listing_lens.jobs.models import JobRecord, JobStatus
from listing_lens.logging.logger import Log
from listing_lens.store.base import BaseEphemeralStore
from listing_lens.timeutil import from_iso, to_iso, utc_now

ALLOWED_TRANSITIONS: dict[JobStatus | None, frozenset[JobStatus]] = {
    None: frozenset({JobStatus.QUEUED, JobStatus.PROCESSING}),
    JobStatus.QUEUED: frozenset({JobStatus.PROCESSING}),
    JobStatus.PROCESSING: frozenset({JobStatus.COMPLETE, JobStatus.ERROR}),
    JobStatus.COMPLETE: frozenset(),
    JobStatus.ERROR: frozenset(),
}


def job_key(job_id: str) -> str:
    return f"job:{job_id}"


def new_job_id() -> str:
    return uuid.uuid4().hex[:16]


REPORT_ID_ALPHABET = string.ascii_uppercase + string.digits


def new_report_id() -> str:
    """Short shareable code such as LL-7QK2M."""
    return "LL-" + "".join(secrets.choice(REPORT_ID_ALPHABET) for _ in range(5))


class JobTracker:
    """Drives a job through queued -> processing -> complete | error.

    The worker writes, the status endpoint reads. Terminal records are deleted
    by poll() once delivered; the worker never deletes its own record.
    """

    def __init__(
        self,
        store: BaseEphemeralStore,
        settings: Settings,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._ttl = settings.job_ttl_seconds
        self._clock = clock

    def create(self, job_id: str) -> JobRecord:
        record = JobRecord(job_id=job_id, status=JobStatus.QUEUED, queued_at=to_iso(self._clock()))
        self._write(record)
        return record

    def get(self, job_id: str) -> JobRecord | None:
        raw = self._store.get(job_key(job_id))
        if raw is None:
            return None
        try:
            payload = json.loads(raw)
            if not isinstance(payload, dict):
                raise ValueError("job record must be an object")
            return JobRecord.from_dict(job_id, payload)
        except ValueError as exc:
            Log.warning(f"Unreadable record for job {job_id}: {exc}")
            return None

    def mark_processing(self, job_id: str) -> JobRecord:
        current = self.get(job_id)
        self._check_transition(job_id, current, JobStatus.PROCESSING)
        base = current or JobRecord(job_id=job_id, status=JobStatus.PROCESSING)
        record = replace(base, status=JobStatus.PROCESSING, started_at=self._stamp(base))
        self._write(record)
        return record

    def mark_complete(self, job_id: str, report_id: str, html: str) -> JobRecord:
        current = self._existing(job_id, JobStatus.COMPLETE)
        record = replace(
            current,
            status=JobStatus.COMPLETE,
            report_id=report_id,
            html=html,
            completed_at=self._stamp(current),
        )
        self._write(record)
        return record

    def mark_error(self, job_id: str, message: str) -> JobRecord:
        current = self._existing(job_id, JobStatus.ERROR)
        record = replace(
            current,
            status=JobStatus.ERROR,
            error=message,
            completed_at=self._stamp(current),
        )
        self._write(record)
        return record

    def fail(self, job_id: str, message: str) -> JobRecord | None:
        """End a job in error from whatever non-terminal state it is in.

        A queued or missing job passes through processing first so the
        sequence a poller can observe stays forward-only. Terminal jobs are
        left untouched.
        """
        current = self.get(job_id)
        if current is not None and current.status.is_terminal:
            Log.warning(f"Job {job_id} already {current.status.value}, not overwriting")
            return None
        if current is None or current.status is JobStatus.QUEUED:
            self.mark_processing(job_id)
        return self.mark_error(job_id, message)

    def poll(self, job_id: str) -> JobRecord:
        """Return the job as the client should see it.

        A missing record means the worker has not written yet and is reported
        as processing. Terminal records are deleted after being read.
        """
        record = self.get(job_id)
        if record is None:
            return JobRecord(job_id=job_id, status=JobStatus.PROCESSING)
        if record.status.is_terminal:
            try:
                self._store.delete(job_key(job_id))
            except Exception as exc:
                Log.warning(f"Could not delete delivered job {job_id}: {exc}")
        return record

    def _existing(self, job_id: str, target: JobStatus) -> JobRecord:
        current = self.get(job_id)
        self._check_transition(job_id, current, target)
        if current is None:
            raise InvalidJobTransitionError(f"Job {job_id} has no record to move to {target.value}")
        return current

    def _check_transition(
        self, job_id: str, current: JobRecord | None, target: JobStatus
    ) -> None:
        source = current.status if current is not None else None
        if target not in ALLOWED_TRANSITIONS[source]:
            name = source.value if source is not None else "missing"
            raise InvalidJobTransitionError(
                f"Job {job_id} cannot move from {name} to {target.value}"
            )

    def _stamp(self, previous: JobRecord) -> str:
        """Current time, never earlier than any timestamp already on the record."""
        now = self._clock()
        for value in (previous.queued_at, previous.started_at, previous.completed_at):
            if value is not None:
                now = max(now, from_iso(value))
        return to_iso(now)

    def _write(self, record: JobRecord) -> None:
        self._store.put(job_key(record.job_id), json.dumps(record.to_dict()), self._ttl)
        Log.debug(f"Job {record.job_id} is now {record.status.value}")
