# backend/app/main.py
from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator

from fastapi import APIRouter, FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from .core.config import assert_env, settings
from .core.constants import API_DESCRIPTION, API_TITLE, API_VERSION, BRAND_NAME
from .core.exceptions import DomainException, RepositoryException, ServiceException
from .core.request_context import attach_request_id_filter
from .middleware.performance import PerformanceMiddleware
from .middleware.prometheus_middleware import PrometheusMiddleware
from .monitoring.prometheus_metrics import prometheus_metrics
from .routes.v1 import (
    admin as admin_v1,
    auth as auth_v1,
    dashboard as dashboard_v1,
    health as health_v1,
    instructors as instructors_v1,
    lessons as lessons_v1,
    locations as locations_v1,
    payments as payments_v1,
    reviews as reviews_v1,
    uploads as uploads_v1,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s",
)
attach_request_id_filter()

logger = logging.getLogger(__name__)


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown without deprecated events."""
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {settings.environment}")
    assert_env(settings)

    if not settings.stripe_configured:
        logger.warning("Stripe is not configured; payment intents run in mock mode")
    if not settings.uploadthing_token:
        logger.warning("Uploadthing token missing; photo uploads are disabled")

    yield

    logger.info(f"{BRAND_NAME} API shutting down...")


def _unique_operation_id(route: APIRoute) -> str:
    methods = "_".join(sorted(m.lower() for m in route.methods or []))
    path = route.path_format.replace("/", "_").replace("{", "").replace("}", "").strip("_")
    name = (route.name or "operation").lower().replace(" ", "_")
    return f"{methods}__{path}__{name}".strip("_")


app = FastAPI(
    title=API_TITLE,
    description=API_DESCRIPTION,
    version=API_VERSION,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=app_lifespan,
    generate_unique_id_function=_unique_operation_id,
)


# Error envelope: {"detail": {"message", "code", "details"}}


@app.exception_handler(DomainException)
async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    if isinstance(exc, ServiceException):
        logger.error(f"Service error on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder({"detail": exc.to_detail()}),
    )


@app.exception_handler(RepositoryException)
async def repository_exception_handler(
    request: Request, exc: RepositoryException
) -> JSONResponse:
    logger.error(f"Repository error on {request.method} {request.url.path}: {str(exc)}")
    return JSONResponse(
        status_code=HTTP_503_SERVICE_UNAVAILABLE,
        content={
            "detail": {
                "message": "Database temporarily unavailable",
                "code": "DATABASE_UNAVAILABLE",
                "details": {},
            }
        },
    )


app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "HEAD", "OPTIONS", "POST", "PUT", "PATCH", "DELETE"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)
logger.info("CORS allow_origins=%s", settings.cors_origin_list)

app.add_middleware(PerformanceMiddleware)  # Request ID and timing
app.add_middleware(PrometheusMiddleware)  # HTTP request metrics

# Create API v1 router
api_v1 = APIRouter(prefix="/api/v1")

# Mount v1 routes
api_v1.include_router(health_v1.router, prefix="/health")
api_v1.include_router(auth_v1.router, prefix="/auth")
api_v1.include_router(instructors_v1.router, prefix="/instructors")
api_v1.include_router(locations_v1.router, prefix="/locations")
api_v1.include_router(lessons_v1.router, prefix="/lessons")
api_v1.include_router(payments_v1.router, prefix="/payments")
api_v1.include_router(reviews_v1.router, prefix="/reviews")
api_v1.include_router(dashboard_v1.router, prefix="/dashboard")
api_v1.include_router(uploads_v1.router, prefix="/uploads")
api_v1.include_router(admin_v1.router, prefix="/admin")

app.include_router(api_v1)


@app.get("/", include_in_schema=False)
def read_root() -> dict:
    """Root endpoint - API information"""
    return {
        "message": f"Welcome to the {BRAND_NAME} API!",
        "version": API_VERSION,
        "docs": "/docs",
    }


@app.get("/metrics", include_in_schema=False)
def metrics_endpoint() -> Response:
    return Response(
        content=prometheus_metrics.get_metrics(),
        media_type=prometheus_metrics.get_content_type(),
        headers={"Cache-Control": "no-store"},
    )


# Keep the original FastAPI app for tools/tests that need access to routes
fastapi_app = app

# Export what's needed
__all__ = ["app", "fastapi_app"]
