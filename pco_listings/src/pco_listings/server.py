"""
FastAPI server for embedding Planning Center listings.

Provides:
- Health check endpoint
- Rendered listing fragments
- Shortcode expansion for page content
- Supported type listing
"""

import uuid
from datetime import datetime, timezone
from typing import Optional
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import HTMLResponse
from pydantic import BaseModel

from .config import get_settings
from .endpoints import ENDPOINTS
from .logging_conf import bind_context, clear_context, get_logger, setup_logging
from .service import ListingService, get_listing_service
from .shortcodes import expand_shortcodes

logger = get_logger(__name__)


# Pydantic models for API
class HealthResponse(BaseModel):
    status: str
    timestamp: str
    version: str = "0.1.0"


class EmbedRequest(BaseModel):
    content: str


class TypeInfo(BaseModel):
    type: str
    endpoint: str


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager."""
    settings = get_settings()

    setup_logging(
        level=settings.log_level,
        json_output=settings.log_json,
    )

    logger.info("server_starting", credentials_configured=settings.has_credentials)

    # Build the service (and its cache store) before the first request
    get_listing_service()

    yield

    logger.info("server_stopped")


app = FastAPI(
    title="Planning Center Listings",
    description="Embeddable HTML listings of Planning Center events, sermons and groups",
    version="0.1.0",
    lifespan=lifespan,
)


@app.middleware("http")
async def request_context(request: Request, call_next):
    """Tag every log line emitted while handling a request."""
    clear_context()
    bind_context(request_id=uuid.uuid4().hex[:12], path=request.url.path)
    try:
        return await call_next(request)
    finally:
        clear_context()


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="ok",
        timestamp=datetime.now(timezone.utc).isoformat(),
    )


@app.get("/types", response_model=list[TypeInfo])
async def list_types():
    """List supported listing types and their upstream endpoints."""
    return [
        TypeInfo(type=name, endpoint=url)
        for name, url in sorted(ENDPOINTS.items())
    ]


@app.get("/listings/{content_type}", response_class=HTMLResponse)
async def get_listing(
    content_type: str,
    limit: Optional[str] = Query(None, description="Number of items (defaults to DEFAULT_LIMIT)"),
    service: ListingService = Depends(get_listing_service),
):
    """Get the rendered HTML fragment for a listing type."""
    if limit is None:
        limit = str(get_settings().default_limit)
    return HTMLResponse(await service.render_listing(content_type, limit))


@app.post("/embed", response_class=HTMLResponse)
async def embed(
    request: EmbedRequest,
    service: ListingService = Depends(get_listing_service),
):
    """Expand Planning Center shortcodes in page content."""
    html = await expand_shortcodes(
        request.content,
        service,
        default_limit=get_settings().default_limit,
    )
    return HTMLResponse(html)


def run_server(
    host: str = "0.0.0.0",
    port: Optional[int] = None,
):
    """
    Run the FastAPI server.

    Args:
        host: Host to bind to
        port: Port to bind to (defaults to settings.port)
    """
    import uvicorn

    settings = get_settings()
    port = port or settings.port

    logger.info("starting_server", host=host, port=port)

    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level=settings.log_level.lower(),
    )
