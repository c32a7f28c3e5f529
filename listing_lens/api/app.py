from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from listing_lens.api.dispatcher import Dispatcher
from listing_lens.api.routes import router
from listing_lens.config.settings import Settings
from listing_lens.jobs.queue import BaseJobQueue, RedisJobQueue
from listing_lens.jobs.tracker import JobTracker
from listing_lens.logging.logger import Log
from listing_lens.ratelimit.limiter import RateLimiter
from listing_lens.session.exceptions import SessionExpiredError, SessionValidationError
from listing_lens.session.manager import SessionManager
from listing_lens.store.base import BaseEphemeralStore
from listing_lens.store.connection import close_client, init_client
from listing_lens.store.exceptions import StoreError
from listing_lens.store.redis_store import RedisStore


@dataclass(frozen=True)
class Services:
    """Everything a request handler needs, built once per application."""

    settings: Settings
    session_manager: SessionManager
    tracker: JobTracker
    dispatcher: Dispatcher
    rate_limiter: RateLimiter


def build_services(
    settings: Settings,
    store: BaseEphemeralStore,
    queue: BaseJobQueue,
) -> Services:
    session_manager = SessionManager(store, settings)
    tracker = JobTracker(store, settings)
    return Services(
        settings=settings,
        session_manager=session_manager,
        tracker=tracker,
        dispatcher=Dispatcher(session_manager, tracker, queue),
        rate_limiter=RateLimiter(store, settings),
    )


def create_app(
    settings: Settings | None = None,
    store: BaseEphemeralStore | None = None,
    queue: BaseJobQueue | None = None,
) -> FastAPI:
    """Build the HTTP application.

    With an injected store and queue the app is ready immediately. Otherwise
    the Redis client is opened on startup and closed on shutdown.
    """
    settings = settings or Settings()
    Log.configure(settings.log_level)
    injected = store is not None and queue is not None

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        if injected:
            yield
            return
        client = init_client(settings)
        app.state.services = build_services(
            settings, RedisStore(client), RedisJobQueue(client, settings.job_queue_name)
        )
        Log.info(f"API started (env={settings.app_env})")
        try:
            yield
        finally:
            close_client()

    app = FastAPI(
        title="Listing Lens API",
        description="Screenshot staging and report job lifecycle",
        version="0.1.0",
        lifespan=lifespan,
    )
    if injected:
        app.state.services = build_services(settings, store, queue)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    _register_exception_handlers(app)
    app.include_router(router, prefix="/api")
    return app


def _register_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(SessionValidationError)
    async def _validation_failed(request: Request, exc: SessionValidationError) -> JSONResponse:
        return JSONResponse(status_code=400, content={"error": str(exc)})

    @app.exception_handler(SessionExpiredError)
    async def _session_expired(request: Request, exc: SessionExpiredError) -> JSONResponse:
        return JSONResponse(
            status_code=410,
            content={"error": "Session expired", "message": str(exc)},
        )

    @app.exception_handler(StoreError)
    async def _store_failed(request: Request, exc: StoreError) -> JSONResponse:
        Log.error(f"Store failure on {request.url.path}: {exc}")
        return JSONResponse(
            status_code=500,
            content={"error": "Service temporarily unavailable", "message": str(exc)},
        )

    @app.exception_handler(RequestValidationError)
    async def _bad_request(request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=400,
            content={"error": "Invalid request", "details": exc.errors()},
        )
