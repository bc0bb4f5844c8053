import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from clipsplice.app.api import routes_clips, routes_jobs
from clipsplice.config import Settings, load_settings
from clipsplice.domain.services.job_service import JobService, MetadataStore
from clipsplice.infrastructure.downloaders import check_ytdlp
from clipsplice.infrastructure.ffmpeg_adapter import check_ffmpeg
from clipsplice.infrastructure.persistence.in_memory_repo import InMemoryMetadataStore
from clipsplice.infrastructure.persistence.json_file_store import JsonFileMetadataStore
from clipsplice.infrastructure.storage import ClipStorage
from clipsplice.infrastructure.subprocess_runner import CommandRunner, run_command

access_logger = logging.getLogger("uvicorn.access")
logger = logging.getLogger(__name__)

BANNER = "YouTube Video Splicing API"


class LogRequestsMiddleware(BaseHTTPMiddleware):
    """Log when a request is received, so long-running jobs show up immediately."""

    async def dispatch(self, request, call_next):
        method = request.method
        path = request.url.path
        access_logger.info("Request started: %s %s", method, path)
        response = await call_next(request)
        return response


@asynccontextmanager
async def lifespan(app: FastAPI):
    if not check_ytdlp():
        logger.warning("yt_dlp is not installed; downloads will fail")
    if not check_ffmpeg():
        logger.warning("ffmpeg not found on PATH; clip extraction will fail")
    yield


def build_metadata_store(settings: Settings, storage: ClipStorage) -> MetadataStore:
    """METADATA_STORE=memory keeps records in this process only; the default writes JSON files."""
    if settings.metadata_store == "memory":
        return InMemoryMetadataStore()
    return JsonFileMetadataStore(storage)


def create_app(
    settings: Optional[Settings] = None,
    *,
    runner: CommandRunner = run_command,
    metadata_store: Optional[MetadataStore] = None,
) -> FastAPI:
    settings = settings or load_settings()

    storage = ClipStorage(settings.downloads_dir, settings.clips_dir)
    storage.ensure_directories()

    app = FastAPI(title="ClipSplice API", version="0.1.0", lifespan=lifespan)
    app.state.settings = settings
    app.state.storage = storage
    app.state.job_service = JobService(
        storage,
        metadata_store or build_metadata_store(settings, storage),
        runner=runner,
        cookies_file=settings.cookies_file,
        job_timeout=settings.job_timeout_seconds,
    )

    app.add_middleware(LogRequestsMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request, exc):
        # {"error": ...} at the top level; 500s also carry "details"
        body = exc.detail if isinstance(exc.detail, dict) else {"error": exc.detail}
        return JSONResponse(body, status_code=exc.status_code, headers=getattr(exc, "headers", None))

    app.include_router(routes_jobs.router)
    app.include_router(routes_clips.router)

    @app.get("/", response_class=PlainTextResponse)
    async def index():
        return BANNER

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    return app
