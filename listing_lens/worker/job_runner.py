from listing_lens.jobs.models import JobTicket
from listing_lens.logging.logger import Log
from listing_lens.processor.processor import Processor


class JobRunner:
    """Run one ticket and make sure no exception escapes to the poll loop.

    Failures are terminal: the processor has already written the error status
    and nothing is put back on the queue.
    """

    def __init__(self, processor: Processor) -> None:
        self._processor = processor

    def run(self, ticket: JobTicket) -> None:
        Log.info("Job picked up", job_id=ticket.job_id, session_id=ticket.session_id)
        try:
            context = self._processor.process(ticket)
        except Exception as exc:
            Log.error(f"Job failed: {exc}", job_id=ticket.job_id)
            return
        Log.info("Job finished", job_id=ticket.job_id, report_id=context.report_id)
