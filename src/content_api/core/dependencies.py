"""FastAPI dependency injection for gateways and the resource service.

Gateways are built explicitly from settings and passed into the
``ResourceService``; nothing is cached in module-level state here.
"""

from typing import Annotated

from fastapi import Depends

from content_api.core.config import Settings, get_settings
from content_api.core.database import get_session_factory
from content_api.lib.resources.storage import BlobStore, LocalBlobStore, S3BlobStore, create_r2_client
from content_api.services.resource_service import ResourceService
from content_api.services.resource_store import SqlResourceStore


def build_blob_store(settings: Settings) -> BlobStore:
    """Create the blob store selected by ``resource_storage_backend``.

    Args:
        settings: Application settings.

    Returns:
        A LocalBlobStore or an R2-backed S3BlobStore.

    Raises:
        ValueError: If the R2 backend is selected without full credentials.
    """
    if settings.resource_storage_backend == "r2":
        required = {
            "R2_ACCOUNT_ID": settings.r2_account_id,
            "R2_ACCESS_KEY_ID": settings.r2_access_key_id,
            "R2_SECRET_ACCESS_KEY": settings.r2_secret_access_key,
            "R2_BUCKET": settings.r2_bucket,
            "R2_PUBLIC_URL": settings.r2_public_url,
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            msg = f"R2 storage backend requires: {', '.join(missing)}"
            raise ValueError(msg)
        client = create_r2_client(
            settings.r2_account_id,  # type: ignore[arg-type]
            settings.r2_access_key_id,  # type: ignore[arg-type]
            settings.r2_secret_access_key,  # type: ignore[arg-type]
        )
        return S3BlobStore(client, settings.r2_bucket, settings.r2_public_url)  # type: ignore[arg-type]

    return LocalBlobStore(settings.resource_upload_dir, settings.resource_public_url)


def build_resource_service(settings: Settings) -> ResourceService:
    """Wire a ResourceService to the SQL metadata store and configured blob store."""
    return ResourceService(
        SqlResourceStore(get_session_factory()),
        build_blob_store(settings),
        max_featured=settings.resource_max_featured,
    )


async def get_resource_service(
    settings: Annotated[Settings, Depends(get_settings)],
) -> ResourceService:
    """Per-request ResourceService dependency."""
    return build_resource_service(settings)
