from fastapi import APIRouter, Query, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from starlette.datastructures import FormData, UploadFile

from listing_lens.api.schemas import (
    DispatchResponse,
    GenerateReportRequest,
    HealthResponse,
    SessionStatusResponse,
    UploadResponse,
)
from listing_lens.config.settings import Settings
from listing_lens.logging.logger import Log
from listing_lens.session.exceptions import SessionExpiredError
from listing_lens.session.models import Asset
from listing_lens.store.exceptions import StoreError

router = APIRouter()

UNKNOWN_CLIENT = "unknown"


def client_identity(request: Request) -> str:
    """First X-Forwarded-For entry, then the socket peer."""
    forwarded = request.headers.get("x-forwarded-for", "")
    first = forwarded.split(",")[0].strip()
    if first:
        return first
    if request.client is not None and request.client.host:
        return request.client.host
    return UNKNOWN_CLIENT


async def _read_assets(form: FormData, settings: Settings) -> list[Asset]:
    """Read accepted file parts, leaving disallowed ones unread.

    Reading stops once the asset limit is reached. Empty and oversized files
    are dropped without counting towards it.
    """
    allowed = set(settings.allowed_mime_types)
    assets: list[Asset] = []
    for _, value in form.multi_items():
        if not isinstance(value, UploadFile):
            continue
        try:
            if len(assets) >= settings.max_assets:
                continue
            if value.content_type not in allowed:
                continue
            # One byte past the limit is enough to know the file is oversized.
            data = await value.read(settings.max_asset_bytes + 1)
            if data and len(data) <= settings.max_asset_bytes:
                assets.append(Asset(data=data, content_type=value.content_type))
        finally:
            await value.close()
    return assets


@router.post("/upload-screenshots", response_model=UploadResponse)
async def upload_screenshots(request: Request):
    services = request.app.state.services
    settings = services.settings

    rate = await run_in_threadpool(services.rate_limiter.check, client_identity(request))
    if not rate.allowed:
        return JSONResponse(
            status_code=429,
            content={
                "error": "Too many requests. Please wait an hour before trying again.",
                "remaining": 0,
            },
        )

    form = await request.form(max_files=settings.max_upload_parts)
    category = form.get("category")
    assets = await _read_assets(form, settings)

    metadata = await run_in_threadpool(
        services.session_manager.create_session,
        category if isinstance(category, str) else "",
        assets,
    )
    minutes = settings.session_ttl_seconds // 60
    return UploadResponse(
        session_id=metadata.session_id,
        screenshot_count=metadata.asset_count,
        category=metadata.category,
        expires_in_seconds=settings.session_ttl_seconds,
        message=f"Screenshots stored securely. Session expires in {minutes} minutes.",
    )


@router.post("/generate-report", status_code=202, response_model=DispatchResponse)
async def generate_report(body: GenerateReportRequest, request: Request):
    if not body.session_id:
        return JSONResponse(status_code=400, content={"error": "sessionId required"})
    services = request.app.state.services
    record = await run_in_threadpool(
        services.dispatcher.dispatch, body.session_id, body.payment_reference
    )
    return DispatchResponse(job_id=record.job_id)


@router.get("/report-status")
def report_status(request: Request, job_id: str | None = Query(default=None, alias="jobId")):
    if not job_id:
        return JSONResponse(status_code=400, content={"error": "jobId required"})
    try:
        return request.app.state.services.tracker.poll(job_id).to_dict()
    except StoreError as exc:
        Log.error(f"Status check failed for job {job_id}: {exc}")
        return JSONResponse(status_code=500, content={"status": "error", "error": str(exc)})


@router.get("/session-status", response_model=SessionStatusResponse)
def session_status(
    request: Request, session_id: str | None = Query(default=None, alias="sessionId")
):
    if not session_id:
        return JSONResponse(status_code=400, content={"error": "sessionId required"})
    session_manager = request.app.state.services.session_manager
    metadata = session_manager.get_session(session_id)
    if metadata is None:
        raise SessionExpiredError("Session not found or expired. Please upload again.")
    remaining = session_manager.remaining_seconds(session_id)
    return SessionStatusResponse(
        session_id=session_id,
        category=metadata.category,
        screenshot_count=metadata.asset_count,
        expires_in_seconds=remaining if remaining is not None and remaining > 0 else 0,
    )


@router.get("/health", response_model=HealthResponse)
def health() -> HealthResponse:
    return HealthResponse()
