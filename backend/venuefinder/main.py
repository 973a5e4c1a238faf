# backend/venuefinder/main.py
"""
FastAPI application for the venue discovery API.

Mounts the versioned routers under /api/v1 plus operational endpoints
(/health, /metrics).
"""

import logging

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.responses import JSONResponse

from .core.config import settings
from .core.exceptions import DomainException
from .core.request_context import attach_request_id_filter
from .database import get_db_pool_status
from .middleware.request_tracking import RequestTrackingMiddleware
from .monitoring.prometheus_metrics import render_latest
from .routes.v1 import events as events_v1, venues as venues_v1

# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
attach_request_id_filter()

logger = logging.getLogger(__name__)


app = FastAPI(
    title="Venue Finder API",
    description="Venue search, trending events and pairings",
    version="1.0.0",
    docs_url=None if settings.is_production else "/docs",
    redoc_url=None if settings.is_production else "/redoc",
)

app.add_middleware(RequestTrackingMiddleware)


@app.exception_handler(DomainException)
async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    """Domain errors that escaped a route are rendered like the route would have."""
    http_exc = exc.to_http_exception()
    logger.warning(f"{exc.code} on {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=http_exc.status_code,
        content={"detail": http_exc.detail},
        headers=http_exc.headers,
    )


# API v1 router
api_v1 = APIRouter(prefix="/api/v1")
api_v1.include_router(venues_v1.router, prefix="/venues")
api_v1.include_router(events_v1.router, prefix="/events")
app.include_router(api_v1)


@app.get("/health", include_in_schema=False)
def health_check() -> dict:
    return {
        "status": "healthy",
        "environment": settings.environment,
        "db_pool": get_db_pool_status(),
    }


@app.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    payload, content_type = render_latest()
    return Response(content=payload, media_type=content_type)


logger.info(f"Venue Finder API started (environment={settings.environment})")
