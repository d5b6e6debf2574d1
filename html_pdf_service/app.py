"""
HTML to PDF Service - FastAPI application.

Serves the static upload form and POST /upload, which converts pasted or
uploaded HTML to a single-page PDF using Playwright/Chromium. The app is
built by ``create_app`` from an explicit settings object; run it locally
with ``python -m html_pdf_service`` or in production with
``uvicorn --factory html_pdf_service.app:create_app``.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import PlainTextResponse, RedirectResponse, Response
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import ServiceSettings, get_settings
from .errors import BrowserUnavailableError
from .inputs import read_html_input
from .renderer import render_html_to_pdf
from .sanitizer import sanitize_html

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

logger = logging.getLogger(__name__)

PDF_FILENAME = "generated.pdf"


def configure_logging(level: str = "INFO") -> None:
    """Configure root logging once for local and container execution."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        datefmt=LOG_DATE_FORMAT,
    )


class HealthResponse(BaseModel):
    """Health check response."""
    status: str = "healthy"
    timestamp: datetime
    environment: str
    active_renders: int
    max_concurrent: Optional[int] = None


class RenderSlots:
    """
    Tracks in-flight render sessions and, when a limit is configured,
    caps them with a semaphore. Without a limit every request renders
    immediately.
    """

    def __init__(self, limit: Optional[int] = None):
        self.limit = limit
        self.active = 0
        self._semaphore = asyncio.Semaphore(limit) if limit else None

    def available(self) -> bool:
        return self._semaphore is None or not self._semaphore.locked()

    @asynccontextmanager
    async def hold(self):
        if self._semaphore is not None:
            await self._semaphore.acquire()
        self.active += 1
        try:
            yield
        finally:
            self.active -= 1
            if self._semaphore is not None:
                self._semaphore.release()


def create_app(settings: Optional[ServiceSettings] = None) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        settings: Service configuration; resolved from the environment when omitted

    Returns:
        Configured FastAPI app
    """
    settings = settings or get_settings()
    slots = RenderSlots(settings.max_concurrent_renders)

    app = FastAPI(
        title="HTML to PDF Service",
        version=__version__,
        description="Converts pasted or uploaded HTML to PDF using Playwright/Chromium"
    )
    app.state.settings = settings
    app.state.render_slots = slots

    @app.exception_handler(StarletteHTTPException)
    async def plain_text_http_exception(request: Request, exc: StarletteHTTPException):
        return PlainTextResponse(
            str(exc.detail),
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    if settings.is_production:
        @app.middleware("http")
        async def redirect_to_https(request: Request, call_next):
            forwarded_proto = request.headers.get("x-forwarded-proto")
            if forwarded_proto is not None and forwarded_proto.lower() != "https":
                host = request.headers.get("host", request.url.netloc)
                target = f"https://{host}{request.url.path}"
                if request.url.query:
                    target = f"{target}?{request.url.query}"
                return RedirectResponse(target, status_code=302)
            return await call_next(request)

    @app.get("/health", response_model=HealthResponse)
    async def health_check() -> HealthResponse:
        """Health check endpoint for container orchestration."""
        return HealthResponse(
            timestamp=datetime.utcnow(),
            environment=settings.environment,
            active_renders=slots.active,
            max_concurrent=slots.limit,
        )

    @app.post("/upload")
    async def upload(request: Request):
        """
        Convert pasted or uploaded HTML to a downloadable PDF.

        Returns:
            Response with PDF binary data

        Raises:
            HTTPException: 400 for missing input, 413 for oversize input,
                503 when the render cap is exhausted, 500 for rendering failures
        """
        logger.info("Upload request received")
        raw = await read_html_input(request, settings.max_upload_bytes)
        logger.info(f"Received HTML from {raw.source} ({raw.size} bytes)")

        if not slots.available():
            logger.warning("PDF service overloaded, rejecting request")
            raise HTTPException(
                status_code=503,
                detail="Service overloaded. Too many concurrent PDF operations."
            )

        html_content = sanitize_html(raw.html)

        try:
            async with slots.hold():
                pdf_bytes = await render_html_to_pdf(html_content, settings)
        except BrowserUnavailableError as e:
            logger.error(str(e))
            raise HTTPException(status_code=500, detail="Chromium executable not found.")
        except Exception:
            logger.exception("Error processing HTML to PDF")
            raise HTTPException(status_code=500, detail="Error processing HTML to PDF.")

        return Response(
            content=pdf_bytes,
            media_type="application/pdf",
            headers={
                "Content-Disposition": f'attachment; filename="{PDF_FILENAME}"'
            }
        )

    # Mounted last so the API routes above take precedence over "/"
    if settings.static_dir.is_dir():
        app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")
    else:
        logger.warning(f"Static directory {settings.static_dir} not found; upload form disabled")

    return app


def main() -> None:
    """Start a local listener unless running in production."""
    settings = get_settings()
    configure_logging(settings.log_level)

    if settings.is_production:
        logger.info(
            "Production mode: not starting a local listener. "
            "Serve with `uvicorn --factory html_pdf_service.app:create_app`."
        )
        return

    import uvicorn

    logger.info(f"Server running on port {settings.port}")
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)
