"""FastAPI application factory.

Creates the FastAPI app with lifespan management, the local upload mount,
and OpenAPI metadata.
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from urllib.parse import urlparse

from fastapi import FastAPI
from fastapi.staticfiles import StaticFiles

from content_api.core.config import Settings, get_settings
from content_api.core.database import dispose_engine, init_engine
from content_api.core.logging import setup_logging


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
    """Manage application lifecycle: init engine on startup, dispose on shutdown."""
    settings = get_settings()
    setup_logging(settings.log_level, log_dir=settings.log_dir, json_logs=settings.log_json)
    init_engine(settings.database_url, echo=False, schema=settings.database_schema)

    yield

    await dispose_engine()


def _mount_uploads(app: FastAPI, settings: Settings) -> None:
    """Serve the local upload directory under the path of ``resource_public_url``."""
    if settings.resource_storage_backend != "local":
        return
    mount_path = urlparse(settings.resource_public_url).path.rstrip("/")
    if not mount_path:
        return
    app.mount(mount_path, StaticFiles(directory=settings.resource_upload_dir, check_dir=False), name="uploads")


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        Configured FastAPI application instance.
    """
    settings = get_settings()

    app = FastAPI(
        title="Content Dashboard API",
        description="Admin content dashboard: resource ingestion, storage, and lifecycle management",
        version="0.1.0",
        lifespan=lifespan,
    )

    from content_api.api.router import create_router, setup_middleware

    setup_middleware(app, settings)
    app.include_router(create_router(settings))
    _mount_uploads(app, settings)

    return app
