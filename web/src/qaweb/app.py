from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from logging.handlers import RotatingFileHandler

import httpx
from fastapi import FastAPI, Request
from fastapi.responses import HTMLResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from qaweb import __version__
from qaweb.api.client import ApiClient
from qaweb.config import WebConfig, load_web_config
from qaweb.errors import PageLoadError, Unauthorized, UpstreamUnavailable
from qaweb.home import QAWebPaths, ensure_qaweb_layout, resolve_qaweb_home
from qaweb.session import get_session
from qaweb.ui.router import render
from qaweb.ui.router import router as ui_router

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_file_logging(paths: QAWebPaths, config: WebConfig) -> None:
    file_handler = RotatingFileHandler(
        paths.log_path,
        maxBytes=config.logging.max_size_mb * 1024 * 1024,
        backupCount=config.logging.backup_count,
        encoding="utf-8",
    )
    file_handler.setFormatter(logging.Formatter(LOG_FORMAT))

    root = logging.getLogger()
    root.setLevel(config.logging.level)
    # Avoid adding duplicate handlers if reloaded
    if not any(isinstance(h, RotatingFileHandler) for h in root.handlers):
        root.addHandler(file_handler)


def create_app(*, transport: httpx.AsyncBaseTransport | None = None) -> FastAPI:
    """Build the web app.

    ``transport`` replaces the network layer of the outbound API client;
    tests pass an ``httpx.MockTransport``.
    """

    @asynccontextmanager
    async def _lifespan(app: FastAPI):
        home = resolve_qaweb_home()
        paths = ensure_qaweb_layout(home)
        config = load_web_config(paths)

        configure_file_logging(paths, config)

        logger.info("QA web starting up")
        logger.info(f"Logs directory: {paths.logs_dir}")
        logger.info(f"API base URL: {config.api.base_url}")

        app.state.qaweb_home = home
        app.state.qaweb_paths = paths
        app.state.qaweb_config = config
        app.state.api_client = ApiClient.from_config(config.api, transport=transport)

        try:
            yield
        finally:
            await app.state.api_client.aclose()

    app = FastAPI(title="QA Web", version=__version__, lifespan=_lifespan)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        response = await call_next(request)
        logger.info(f"{request.method} {request.url.path} - {response.status_code}")
        return response

    def _error_page(request: Request, status_code: int, message: str) -> HTMLResponse:
        return render(
            request,
            "error.html",
            get_session(request),
            {"title": "Error", "status_code": status_code, "message": message},
            status_code=status_code,
        )

    @app.exception_handler(Unauthorized)
    async def _unauthorized_handler(request: Request, exc: Unauthorized) -> HTMLResponse:
        return _error_page(request, exc.status_code, exc.message)

    @app.exception_handler(PageLoadError)
    async def _page_load_handler(request: Request, exc: PageLoadError) -> HTMLResponse:
        return _error_page(request, exc.status_code, exc.message)

    @app.exception_handler(UpstreamUnavailable)
    async def _upstream_handler(request: Request, exc: UpstreamUnavailable) -> HTMLResponse:
        return _error_page(request, exc.status_code, exc.message)

    @app.exception_handler(StarletteHTTPException)
    async def _http_exception_handler(
        request: Request, exc: StarletteHTTPException
    ) -> HTMLResponse:
        message = exc.detail if isinstance(exc.detail, str) else "HTTP error"
        return _error_page(request, exc.status_code, message)

    @app.exception_handler(Exception)
    async def _unhandled_error_handler(request: Request, exc: Exception) -> HTMLResponse:
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return _error_page(request, 500, "Internal server error")

    app.include_router(ui_router)

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    return app
