"""Resource lifecycle service — create, update, delete, list, stats, and download counting.

Orchestrates upload validation, storage path resolution, link thumbnails,
the blob store, and the metadata store. Each public method is a
self-contained unit of work that returns a ``ServiceResult``; gateway
exceptions are converted to typed errors here and never propagate.
"""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from loguru import logger

from content_api.lib.resources.errors import (
    BlobStorageError,
    DocumentNotFoundError,
    MetadataStoreError,
    ResourceError,
    ServiceResult,
    ValidationReason,
)
from content_api.lib.resources.links import is_external_video_link, resolve_thumbnail
from content_api.lib.resources.paths import resolve_storage_path
from content_api.lib.resources.storage import BlobStore
from content_api.lib.resources.types import ResourceType, UploadedFile
from content_api.lib.resources.validators import validate_related_resources, validate_upload
from content_api.schemas.resource import (
    ResourceCreateRequest,
    ResourceFilters,
    ResourceResponse,
    ResourceStatsResponse,
    ResourceUpdateRequest,
)
from content_api.services.resource_store import Document, MetadataStore

_UPDATABLE_FIELDS: frozenset[str] = frozenset(
    {
        "title",
        "description",
        "type",
        "category",
        "is_public",
        "featured",
        "tags",
        "related_resources",
    }
)

_DOWNLOAD_COUNTER = "download_count"


@dataclass(frozen=True)
class _FileFields:
    """File attributes derived from an upload or an external link."""

    file_url: str | None = None
    thumbnail_url: str | None = None
    file_size: int | None = None
    uploaded: bool = False

    def present(self) -> Document:
        fields: Document = {}
        _set_if_present(fields, "file_url", self.file_url)
        _set_if_present(fields, "thumbnail_url", self.thumbnail_url)
        _set_if_present(fields, "file_size", self.file_size)
        return fields


def _set_if_present(document: Document, key: str, value: Any) -> None:
    """Add ``key`` only when ``value`` is neither None nor an empty string."""
    if value is None or value == "":
        return
    document[key] = value


def build_resource_document(data: ResourceCreateRequest, file_fields: _FileFields) -> Document:
    """Build the sparse document for a new resource.

    Required and defaulted fields are always present; optional file
    fields are added only when they carry a value.
    """
    document: Document = {
        "title": data.title,
        "description": data.description,
        "type": str(data.type),
        "category": str(data.category),
        "is_public": data.is_public,
        "featured": data.featured,
        "tags": list(data.tags),
        "related_resources": list(data.related_resources),
        "created_by": data.created_by,
        "download_count": 0,
    }
    document.update(file_fields.present())
    return document


def _matches_search(document: Document, needle: str) -> bool:
    return needle in document.get("title", "").lower() or needle in document.get("description", "").lower()


class ResourceService:
    """Resource lifecycle manager.

    Args:
        store: Metadata store gateway.
        blobs: Blob store gateway.
        max_featured: Maximum number of featured resources; 0 disables the cap.
        clock_ms: Epoch-milliseconds clock used for storage paths.
    """

    def __init__(
        self,
        store: MetadataStore,
        blobs: BlobStore,
        *,
        max_featured: int = 0,
        clock_ms: Callable[[], int] | None = None,
    ) -> None:
        self._store = store
        self._blobs = blobs
        self._max_featured = max_featured
        self._clock_ms = clock_ms

    # -----------------------------------------------------------------------
    # Read operations
    # -----------------------------------------------------------------------

    async def list_resources(self, filters: ResourceFilters | None = None) -> ServiceResult[list[ResourceResponse]]:
        """List resources matching equality filters, newest first.

        ``search`` is applied after retrieval as a case-insensitive substring
        match over title and description, so it never reduces the number of
        documents fetched from the store.
        """
        filters = filters or ResourceFilters()
        query_filters: dict[str, Any] = {}
        if filters.category is not None:
            query_filters["category"] = str(filters.category)
        if filters.type is not None:
            query_filters["type"] = str(filters.type)
        if filters.is_public is not None:
            query_filters["is_public"] = filters.is_public
        try:
            documents = await self._store.query(query_filters, limit=filters.limit)
        except MetadataStoreError as exc:
            logger.error(f"Failed to list resources: {exc}")
            return ServiceResult.failure(ResourceError.storage("Failed to fetch resources"))

        if filters.search:
            needle = filters.search.lower()
            documents = [doc for doc in documents if _matches_search(doc, needle)]

        logger.info(f"Listed {len(documents)} resources")
        return ServiceResult.success([ResourceResponse.model_validate(doc) for doc in documents])

    async def get_public_resources(self, limit: int | None = None) -> ServiceResult[list[ResourceResponse]]:
        """List public resources for display."""
        return await self.list_resources(ResourceFilters(is_public=True, limit=limit))

    async def get_resource(self, resource_id: str) -> ServiceResult[ResourceResponse]:
        """Get a single resource by id."""
        try:
            document = await self._store.get(resource_id)
        except MetadataStoreError as exc:
            logger.error(f"Failed to fetch resource {resource_id}: {exc}")
            return ServiceResult.failure(ResourceError.storage("Failed to fetch resource"))
        if document is None:
            return ServiceResult.failure(ResourceError.not_found(resource_id))
        return ServiceResult.success(ResourceResponse.model_validate(document))

    async def get_stats(self) -> ServiceResult[ResourceStatsResponse]:
        """Scan the whole collection and aggregate totals and a category histogram."""
        try:
            documents = await self._store.query({})
        except MetadataStoreError as exc:
            logger.error(f"Failed to compute resource stats: {exc}")
            return ServiceResult.failure(ResourceError.storage("Failed to fetch resource statistics"))

        total_downloads = 0
        by_category: dict[str, int] = {}
        for document in documents:
            total_downloads += document.get("download_count", 0)
            category = document.get("category") or "other"
            by_category[category] = by_category.get(category, 0) + 1

        return ServiceResult.success(
            ResourceStatsResponse(total=len(documents), total_downloads=total_downloads, by_category=by_category)
        )

    # -----------------------------------------------------------------------
    # Write operations
    # -----------------------------------------------------------------------

    async def create_resource(
        self,
        data: ResourceCreateRequest,
        file: UploadedFile | None = None,
    ) -> ServiceResult[str]:
        """Create a resource, uploading ``file`` first when one is given.

        Validation failures are reported before any network call. If the
        metadata write fails after a successful upload the blob is left
        orphaned; no compensating delete is attempted.

        Returns:
            Result carrying the new resource id.
        """
        error = validate_related_resources(data.related_resources)
        if error is None and data.featured:
            error = await self._check_featured_cap()
        if error is not None:
            return ServiceResult.failure(error)

        file_fields = await self._ingest(data.type, file, data.file_url)
        if isinstance(file_fields, ResourceError):
            return ServiceResult.failure(file_fields)

        document = build_resource_document(data, file_fields)
        try:
            resource_id = await self._store.insert(document)
        except MetadataStoreError as exc:
            logger.error(f"Failed to create resource '{data.title}': {exc}")
            if file_fields.uploaded:
                logger.warning(f"Uploaded blob orphaned after failed create: {file_fields.file_url}")
            return ServiceResult.failure(ResourceError.storage("Failed to create resource"))

        logger.info(f"Created resource {resource_id} ({data.type}/{data.category}): {data.title}")
        return ServiceResult.success(resource_id)

    async def update_resource(
        self,
        resource_id: str,
        updates: ResourceUpdateRequest,
        file: UploadedFile | None = None,
    ) -> ServiceResult[None]:
        """Apply a non-destructive partial update.

        Only fields set on ``updates`` (plus any file fields derived from a new
        upload or link) are written; everything else is preserved. The stored
        type is used for validation when ``updates`` does not change it. When
        the file URL changes, the previously stored blob is removed on a
        best-effort basis after the metadata write succeeds.
        """
        try:
            current = await self._store.get(resource_id)
        except MetadataStoreError as exc:
            logger.error(f"Failed to fetch resource {resource_id}: {exc}")
            return ServiceResult.failure(ResourceError.storage("Failed to update resource"))
        if current is None:
            return ServiceResult.failure(ResourceError.not_found(resource_id))

        provided = updates.model_dump(exclude_none=True, mode="json")
        fields: Document = {name: value for name, value in provided.items() if name in _UPDATABLE_FIELDS}

        error = None
        if "related_resources" in fields:
            error = validate_related_resources(fields["related_resources"])
        if error is None and fields.get("featured") and not current.get("featured", False):
            error = await self._check_featured_cap(exclude_id=resource_id)
        if error is not None:
            return ServiceResult.failure(error)

        new_link = provided.get("file_url")
        if new_link == current.get("file_url"):
            new_link = None
        file_fields: _FileFields | None = None
        if file is not None or new_link:
            effective_type = ResourceType(fields.get("type", current["type"]))
            ingested = await self._ingest(effective_type, file, new_link)
            if isinstance(ingested, ResourceError):
                return ServiceResult.failure(ingested)
            file_fields = ingested
            fields.update(file_fields.present())
            if file is None:
                # A replacement link invalidates upload-only and derived fields.
                fields.setdefault("file_size", None)
                fields.setdefault("thumbnail_url", None)

        try:
            await self._store.update(resource_id, fields)
        except MetadataStoreError as exc:
            if file_fields is not None and file_fields.uploaded:
                logger.warning(f"Uploaded blob orphaned after failed update: {file_fields.file_url}")
            if isinstance(exc, DocumentNotFoundError):
                return ServiceResult.failure(ResourceError.not_found(resource_id))
            logger.error(f"Failed to update resource {resource_id}: {exc}")
            return ServiceResult.failure(ResourceError.storage("Failed to update resource"))

        old_url = current.get("file_url")
        if file_fields is not None and old_url and old_url != file_fields.file_url:
            await self._discard_blob(old_url)

        logger.info(f"Updated resource {resource_id}: {sorted(fields)}")
        return ServiceResult.success()

    async def delete_resource(self, resource_id: str) -> ServiceResult[None]:
        """Delete a resource and, best-effort, its stored blob.

        Blob removal failures are logged and never block removal of the
        metadata document.
        """
        try:
            current = await self._store.get(resource_id)
        except MetadataStoreError as exc:
            logger.error(f"Failed to fetch resource {resource_id}: {exc}")
            return ServiceResult.failure(ResourceError.storage("Failed to delete resource"))
        if current is None:
            return ServiceResult.failure(ResourceError.not_found(resource_id))

        file_url = current.get("file_url")
        if file_url:
            await self._discard_blob(file_url)

        try:
            await self._store.delete(resource_id)
        except DocumentNotFoundError:
            return ServiceResult.failure(ResourceError.not_found(resource_id))
        except MetadataStoreError as exc:
            logger.error(f"Failed to delete resource {resource_id}: {exc}")
            return ServiceResult.failure(ResourceError.storage("Failed to delete resource"))

        logger.info(f"Deleted resource {resource_id}")
        return ServiceResult.success()

    async def increment_download(self, resource_id: str) -> ServiceResult[None]:
        """Atomically add one to the resource's download count."""
        try:
            await self._store.atomic_increment(resource_id, _DOWNLOAD_COUNTER, 1)
        except DocumentNotFoundError:
            return ServiceResult.failure(ResourceError.not_found(resource_id))
        except MetadataStoreError as exc:
            logger.error(f"Failed to increment download count for {resource_id}: {exc}")
            return ServiceResult.failure(ResourceError.storage("Failed to update download count"))
        return ServiceResult.success()

    # -----------------------------------------------------------------------
    # Helpers
    # -----------------------------------------------------------------------

    async def _ingest(
        self,
        resource_type: ResourceType,
        file: UploadedFile | None,
        link: str | None,
    ) -> _FileFields | ResourceError:
        """Validate and upload a file, or resolve a link's thumbnail."""
        if file is not None:
            error = validate_upload(file, resource_type)
            if error is not None:
                logger.info(f"Rejected upload {file.filename}: {error.message}")
                return error

            now_ms = self._clock_ms() if self._clock_ms is not None else None
            path = resolve_storage_path(file.filename, resource_type, now_ms=now_ms)
            try:
                url = await self._blobs.put(path, file.content, file.content_type)
            except BlobStorageError as exc:
                logger.error(f"Failed to upload {file.filename}: {exc}")
                return ResourceError.storage("Failed to upload file")
            return _FileFields(file_url=url, file_size=file.size, uploaded=True)

        return _FileFields(file_url=link or None, thumbnail_url=resolve_thumbnail(resource_type, link))

    async def _discard_blob(self, url: str) -> None:
        """Best-effort blob removal; external video links are never touched."""
        if is_external_video_link(url):
            return
        try:
            await self._blobs.delete(url)
        except BlobStorageError as exc:
            logger.warning(f"Could not delete file from storage: {exc}")

    async def _check_featured_cap(self, exclude_id: str | None = None) -> ResourceError | None:
        """Check the featured cap; a read followed by a later write, so not atomic."""
        if self._max_featured <= 0:
            return None
        try:
            featured = await self._store.query({"featured": True})
        except MetadataStoreError as exc:
            logger.error(f"Failed to count featured resources: {exc}")
            return ResourceError.storage("Failed to check featured resources")
        count = sum(1 for doc in featured if doc.get("id") != exclude_id)
        if count >= self._max_featured:
            return ResourceError.validation(
                ValidationReason.FEATURED_LIMIT_REACHED,
                f"At most {self._max_featured} resources can be featured",
            )
        return None
