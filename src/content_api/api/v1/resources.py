"""Resources API endpoints — list, detail, stats, create, update, delete, and download counting."""

from typing import Annotated, NoReturn, TypeVar

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from loguru import logger
from pydantic import BaseModel, ValidationError

from content_api.core.dependencies import get_resource_service
from content_api.lib.resources.errors import ErrorKind, ResourceError, ValidationReason
from content_api.lib.resources.types import ResourceCategory, ResourceType, UploadedFile
from content_api.schemas.resource import (
    ResourceCreatedResponse,
    ResourceCreateRequest,
    ResourceFilters,
    ResourceListResponse,
    ResourceResponse,
    ResourceStatsResponse,
    ResourceUpdateRequest,
)
from content_api.services.resource_service import ResourceService

resources_router = APIRouter(prefix="/resources", tags=["resources"])

ServiceDep = Annotated[ResourceService, Depends(get_resource_service)]

M = TypeVar("M", bound=BaseModel)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _raise_for_error(error: ResourceError) -> NoReturn:
    if error.kind == ErrorKind.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    if error.kind == ErrorKind.VALIDATION:
        code = (
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE
            if error.reason == ValidationReason.FILE_TOO_LARGE
            else status.HTTP_422_UNPROCESSABLE_ENTITY
        )
        raise HTTPException(status_code=code, detail=error.message)
    raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=error.message)


def _parse_metadata(schema: type[M], raw: str) -> M:
    try:
        return schema.model_validate_json(raw)
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=e.errors(include_url=False, include_context=False, include_input=False),
        ) from e


async def _read_upload(file: UploadFile | None) -> UploadedFile | None:
    if file is None or not file.filename:
        return None
    content = await file.read()
    return UploadedFile(
        filename=file.filename,
        content=content,
        content_type=file.content_type or "application/octet-stream",
    )


# ---------------------------------------------------------------------------
# Read endpoints
# ---------------------------------------------------------------------------


@resources_router.get(
    "",
    response_model=ResourceListResponse,
    response_model_exclude_unset=True,
)
async def list_resources_endpoint(
    service: ServiceDep,
    category: ResourceCategory | None = Query(None),
    resource_type: ResourceType | None = Query(None, alias="type"),
    is_public: bool | None = Query(None),
    limit: int | None = Query(None, ge=1, le=1000),
    search: str | None = Query(None),
) -> ResourceListResponse:
    """List resources, newest first. ``search`` filters title/description after retrieval."""
    filters = ResourceFilters(category=category, type=resource_type, is_public=is_public, limit=limit, search=search)
    result = await service.list_resources(filters)
    if result.error is not None:
        _raise_for_error(result.error)
    items = result.value or []
    return ResourceListResponse(items=items, total=len(items))


@resources_router.get("/stats", response_model=ResourceStatsResponse)
async def resource_stats_endpoint(service: ServiceDep) -> ResourceStatsResponse:
    """Aggregate resource totals and per-category counts."""
    result = await service.get_stats()
    if result.error is not None:
        _raise_for_error(result.error)
    assert result.value is not None  # Guaranteed by the error check
    return result.value


@resources_router.get(
    "/{resource_id}",
    response_model=ResourceResponse,
    response_model_exclude_unset=True,
)
async def get_resource_endpoint(resource_id: str, service: ServiceDep) -> ResourceResponse:
    """Get a single resource."""
    result = await service.get_resource(resource_id)
    if result.error is not None:
        _raise_for_error(result.error)
    assert result.value is not None  # Guaranteed by the error check
    return result.value


# ---------------------------------------------------------------------------
# Write endpoints
# ---------------------------------------------------------------------------


@resources_router.post(
    "",
    response_model=ResourceCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_resource_endpoint(
    service: ServiceDep,
    metadata: Annotated[str, Form(description="ResourceCreateRequest as JSON")],
    file: Annotated[UploadFile | None, File()] = None,
) -> ResourceCreatedResponse:
    """Create a resource from JSON metadata and an optional uploaded file."""
    data = _parse_metadata(ResourceCreateRequest, metadata)
    upload = await _read_upload(file)
    result = await service.create_resource(data, upload)
    if result.error is not None:
        _raise_for_error(result.error)
    assert result.value is not None  # Guaranteed by the error check
    return ResourceCreatedResponse(id=result.value)


@resources_router.patch(
    "/{resource_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def update_resource_endpoint(
    resource_id: str,
    service: ServiceDep,
    metadata: Annotated[str, Form(description="ResourceUpdateRequest as JSON")] = "{}",
    file: Annotated[UploadFile | None, File()] = None,
) -> None:
    """Partially update a resource; fields not supplied are left unchanged."""
    updates = _parse_metadata(ResourceUpdateRequest, metadata)
    upload = await _read_upload(file)
    result = await service.update_resource(resource_id, updates, upload)
    if result.error is not None:
        _raise_for_error(result.error)


@resources_router.delete(
    "/{resource_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_resource_endpoint(resource_id: str, service: ServiceDep) -> None:
    """Delete a resource and, best-effort, its stored file."""
    result = await service.delete_resource(resource_id)
    if result.error is not None:
        _raise_for_error(result.error)
    logger.info(f"Deleted resource {resource_id} via API")


@resources_router.post(
    "/{resource_id}/download",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def increment_download_endpoint(resource_id: str, service: ServiceDep) -> None:
    """Record a download of the resource."""
    result = await service.increment_download(resource_id)
    if result.error is not None:
        _raise_for_error(result.error)
