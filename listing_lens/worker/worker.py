import time

from listing_lens.config.settings import Settings
from listing_lens.jobs.models import JobTicket
from listing_lens.jobs.queue import BaseJobQueue
from listing_lens.logging.logger import Log
from listing_lens.worker.job_runner import JobRunner


class Worker:
    """Queue consumer: take a ticket, run it, idle for one poll interval when empty.

    Several workers may consume the same queue; each ticket is popped by
    exactly one of them.
    """

    def __init__(
        self,
        queue: BaseJobQueue,
        job_runner: JobRunner,
        settings: Settings,
    ) -> None:
        self._queue = queue
        self._job_runner = job_runner
        self._poll_interval = settings.job_poll_interval_seconds

    def run(self, max_jobs: int | None = None) -> None:
        """Consume tickets until interrupted, or until max_jobs have run."""
        Log.info("Worker started, waiting for tickets")
        handled = 0
        try:
            while max_jobs is None or handled < max_jobs:
                ticket = self._try_claim_job()
                if ticket is None:
                    Log.debug("Queue empty, sleeping")
                    time.sleep(self._poll_interval)
                    continue
                self._job_runner.run(ticket)
                handled += 1
        except KeyboardInterrupt:
            Log.info("Worker shutting down gracefully")
        Log.info(f"Worker stopped after {handled} jobs")

    def _try_claim_job(self) -> JobTicket | None:
        """Pop the next ticket. Store errors are logged and count as an empty queue."""
        try:
            return self._queue.dequeue()
        except Exception as exc:
            Log.warning(f"Could not read job queue, will retry: {exc}")
            return None
