from pathlib import Path

from listing_lens.config.settings import Settings
from listing_lens.generation.exceptions import PromptNotFoundError
from listing_lens.generation.factory import GeneratorFactory
from listing_lens.generation.prompt_loader import PromptLoader
from listing_lens.jobs.models import JobTicket
from listing_lens.jobs.tracker import JobTracker
from listing_lens.logging.logger import Log
from listing_lens.payment.exceptions import PaymentRejectedError
from listing_lens.payment.verifier import build_payment_verifier
from listing_lens.processor.pipeline import PipelineContext, PipelineStep
from listing_lens.processor.steps import (
    CleanupSessionStep,
    FetchAssetsStep,
    GenerateReportStep,
    LoadPromptStep,
    LoadSessionStep,
    MarkCompleteStep,
    MarkFailedStep,
    MarkProcessingStep,
    ValidateCategoryStep,
    VerifyPaymentStep,
)
from listing_lens.session.manager import SessionManager
from listing_lens.store.base import BaseEphemeralStore


def describe_failure(exc: Exception) -> str:
    """Message shown to the polling client for a failed job."""
    if isinstance(exc, PaymentRejectedError):
        return f"Payment failed: {exc}"
    if isinstance(exc, PromptNotFoundError):
        return "Prompt configuration error"
    return str(exc) or "Unknown error"


class Processor:
    """Runs one report job through its steps.

    Pipeline: mark processing -> verify payment -> load session -> validate
    category -> fetch screenshots -> load prompt -> generate -> mark complete,
    then clean up the session whether the job succeeded or not.
    """

    def __init__(
        self,
        steps: list[PipelineStep],
        failed_step: PipelineStep,
        cleanup_step: PipelineStep,
    ) -> None:
        self._steps = steps
        self._failed_step = failed_step
        self._cleanup_step = cleanup_step

    def process(self, ticket: JobTicket) -> PipelineContext:
        """Run the pipeline for a ticket.

        On failure the job is marked as error and the original exception is
        re-raised after cleanup.
        """
        Log.info(f"Processing job {ticket.job_id} for session {ticket.session_id}")
        context = PipelineContext(
            job_id=ticket.job_id,
            session_id=ticket.session_id,
            payment_reference=ticket.payment_reference,
        )
        try:
            for step in self._steps:
                context = step.run(context)
        except Exception as exc:
            context.error_message = describe_failure(exc)
            self._mark_failed(context)
            raise
        finally:
            self._cleanup(context)
        return context

    def _mark_failed(self, context: PipelineContext) -> None:
        try:
            self._failed_step.run(context)
        except Exception as exc:
            Log.error(f"Could not record failure of job {context.job_id}: {exc}")

    def _cleanup(self, context: PipelineContext) -> None:
        try:
            self._cleanup_step.run(context)
        except Exception as exc:
            Log.warning(f"Cleanup after job {context.job_id} failed: {exc}")


def build_processor(
    settings: Settings,
    store: BaseEphemeralStore,
    prompts_dir: Path | None = None,
) -> Processor:
    """Build a Processor with all required adapters."""
    if prompts_dir is None and settings.prompts_dir:
        prompts_dir = Path(settings.prompts_dir)
    tracker = JobTracker(store, settings)
    session_manager = SessionManager(store, settings)
    steps: list[PipelineStep] = [
        MarkProcessingStep(tracker),
        VerifyPaymentStep(build_payment_verifier(settings, store)),
        LoadSessionStep(session_manager),
        ValidateCategoryStep(),
        FetchAssetsStep(session_manager),
        LoadPromptStep(PromptLoader(prompts_dir)),
        GenerateReportStep(GeneratorFactory.create(settings)),
        MarkCompleteStep(tracker),
    ]
    return Processor(
        steps=steps,
        failed_step=MarkFailedStep(tracker),
        cleanup_step=CleanupSessionStep(session_manager),
    )
