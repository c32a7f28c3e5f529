from listing_lens.jobs.models import JobRecord, JobTicket
from listing_lens.jobs.queue import BaseJobQueue
from listing_lens.jobs.tracker import JobTracker, new_job_id
from listing_lens.logging.logger import Log
from listing_lens.session.exceptions import SessionExpiredError
from listing_lens.session.manager import SessionManager

SESSION_GONE_MESSAGE = (
    "Your screenshots have been automatically deleted (15-minute limit). "
    "Please upload again."
)


class Dispatcher:
    """Accepts a report request and hands it to the worker queue.

    Only the session is checked here; payment and everything else is the
    worker's job so the request returns immediately.
    """

    def __init__(
        self,
        session_manager: SessionManager,
        tracker: JobTracker,
        queue: BaseJobQueue,
    ) -> None:
        self._session_manager = session_manager
        self._tracker = tracker
        self._queue = queue

    def dispatch(self, session_id: str, payment_reference: str | None) -> JobRecord:
        """Create a queued job for a live session.

        Raises:
            SessionExpiredError: if the session is missing or past its expiry.
            StoreError: if the job record or ticket cannot be written.
        """
        if self._session_manager.get_session(session_id) is None:
            raise SessionExpiredError(SESSION_GONE_MESSAGE)

        job_id = new_job_id()
        record = self._tracker.create(job_id)
        ticket = JobTicket(job_id=job_id, session_id=session_id, payment_reference=payment_reference)
        try:
            self._queue.enqueue(ticket)
        except Exception:
            self._tracker.fail(job_id, "Could not start report generation")
            raise

        Log.info("Job queued", job_id=job_id, session_id=session_id)
        return record
