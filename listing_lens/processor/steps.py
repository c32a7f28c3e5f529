from collections.abc import Callable
from datetime import datetime

from listing_lens.generation.base import BaseReportGenerator
from listing_lens.generation.prompt_loader import PromptLoader
from listing_lens.jobs.tracker import JobTracker, new_report_id
from listing_lens.logging.logger import Log
from listing_lens.payment.verifier import PaymentVerifier
from listing_lens.processor.pipeline import PipelineContext, PipelineStep
from listing_lens.session.exceptions import InvalidCategoryError, SessionExpiredError
from listing_lens.session.manager import SessionManager
from listing_lens.session.models import Category
from listing_lens.timeutil import utc_now


class MarkProcessingStep(PipelineStep):
    def __init__(self, tracker: JobTracker) -> None:
        self._tracker = tracker

    def run(self, context: PipelineContext) -> PipelineContext:
        self._tracker.mark_processing(context.job_id)
        Log.info(f"Job {context.job_id} marked as processing")
        return context


class MarkFailedStep(PipelineStep):
    def __init__(self, tracker: JobTracker) -> None:
        self._tracker = tracker

    def run(self, context: PipelineContext) -> PipelineContext:
        self._tracker.fail(context.job_id, context.error_message)
        Log.error(f"Job {context.job_id} marked as error: {context.error_message}")
        return context


class VerifyPaymentStep(PipelineStep):
    def __init__(self, verifier: PaymentVerifier) -> None:
        self._verifier = verifier

    def run(self, context: PipelineContext) -> PipelineContext:
        self._verifier.verify(context.payment_reference)
        return context


class LoadSessionStep(PipelineStep):
    def __init__(self, session_manager: SessionManager) -> None:
        self._session_manager = session_manager

    def run(self, context: PipelineContext) -> PipelineContext:
        session = self._session_manager.get_session(context.session_id)
        if session is None:
            raise SessionExpiredError("Session expired - please re-upload.")
        context.session = session
        Log.info(
            f"Loaded session {context.session_id} for job {context.job_id}: "
            f"{session.asset_count} screenshots"
        )
        return context


class ValidateCategoryStep(PipelineStep):
    def run(self, context: PipelineContext) -> PipelineContext:
        if context.session is None:
            raise ValueError("PipelineContext.session must be set before category validation")
        category = Category.parse(context.session.category)
        if category is None:
            raise InvalidCategoryError("Invalid category")
        context.category = category
        return context


class FetchAssetsStep(PipelineStep):
    def __init__(self, session_manager: SessionManager) -> None:
        self._session_manager = session_manager

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.session is None:
            raise ValueError("PipelineContext.session must be set before fetching screenshots")
        assets = self._session_manager.fetch_assets(
            context.session_id, context.session.asset_count
        )
        if not assets:
            raise SessionExpiredError("Screenshots expired - please re-upload.")
        context.assets = assets
        Log.info(
            f"Fetched {len(assets)} of {context.session.asset_count} screenshots "
            f"for job {context.job_id}"
        )
        return context


class LoadPromptStep(PipelineStep):
    def __init__(self, prompt_loader: PromptLoader) -> None:
        self._prompt_loader = prompt_loader

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.category is None:
            raise ValueError("PipelineContext.category must be set before loading the prompt")
        context.system_prompt = self._prompt_loader.load(context.category)
        return context


class GenerateReportStep(PipelineStep):
    def __init__(
        self,
        generator: BaseReportGenerator,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._generator = generator
        self._clock = clock

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.category is None:
            raise ValueError("PipelineContext.category must be set before generation")
        context.report_id = new_report_id()
        context.html = self._generator.generate(
            system_prompt=context.system_prompt,
            category=context.category,
            images=context.assets,
            report_id=context.report_id,
            report_date=self._clock().date(),
        )
        return context


class MarkCompleteStep(PipelineStep):
    def __init__(self, tracker: JobTracker) -> None:
        self._tracker = tracker

    def run(self, context: PipelineContext) -> PipelineContext:
        self._tracker.mark_complete(context.job_id, context.report_id, context.html)
        Log.info(f"Job {context.job_id} complete: report {context.report_id}")
        return context


class CleanupSessionStep(PipelineStep):
    """Best-effort removal of the session; a no-op if it was never loaded."""

    def __init__(self, session_manager: SessionManager) -> None:
        self._session_manager = session_manager

    def run(self, context: PipelineContext) -> PipelineContext:
        if context.session is not None:
            self._session_manager.delete_session(
                context.session_id, context.session.asset_count
            )
        return context
