"""Top-level router and middleware wiring for the FastAPI app."""

from fastapi import APIRouter, FastAPI

from content_api.api.middleware import SecurityHeadersMiddleware, setup_cors
from content_api.core.config import Settings


def create_router(settings: Settings) -> APIRouter:
    """Mount the resources router under ``settings.api_v1_prefix``."""
    from content_api.api.v1.resources import resources_router

    router = APIRouter(prefix=settings.api_v1_prefix)
    router.include_router(resources_router)
    return router


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Add CORS, then security headers (outermost)."""
    setup_cors(app, settings)
    app.add_middleware(SecurityHeadersMiddleware)
