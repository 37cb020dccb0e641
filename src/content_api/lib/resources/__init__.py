"""Resource ingestion library — validation, path, link, and blob storage primitives.

Public API:
    - ``validate_upload``: Check an uploaded file against the per-type policy
    - ``resolve_storage_path``: Build the blob path for an upload
    - ``safe_filename``: Reduce a client filename to its last path component
    - ``extract_video_id`` / ``derive_thumbnail`` / ``resolve_thumbnail``: YouTube link handling
    - ``is_external_video_link``: Distinguish hosted video links from stored blobs
    - ``BlobStore``: Protocol for blob storage backends
    - ``LocalBlobStore`` / ``S3BlobStore``: Blob storage implementations
    - ``ServiceResult`` / ``ResourceError``: Typed operation results
"""

from content_api.lib.resources.errors import (
    BlobStorageError,
    DocumentNotFoundError,
    ErrorKind,
    MetadataStoreError,
    ResourceError,
    ServiceResult,
    ValidationReason,
)
from content_api.lib.resources.links import (
    derive_thumbnail,
    detect_video_platform,
    extract_video_id,
    is_external_video_link,
    resolve_thumbnail,
)
from content_api.lib.resources.paths import bucket_for, resolve_storage_path, safe_filename
from content_api.lib.resources.storage import BlobStore, LocalBlobStore, S3BlobStore, create_r2_client
from content_api.lib.resources.types import ResourceCategory, ResourceType, UploadedFile
from content_api.lib.resources.validators import (
    ACCEPTED_EXTENSIONS,
    MAX_FILE_SIZES,
    MAX_RELATED_RESOURCES,
    format_file_size,
    validate_related_resources,
    validate_upload,
)

__all__ = [
    "ACCEPTED_EXTENSIONS",
    "MAX_FILE_SIZES",
    "MAX_RELATED_RESOURCES",
    "BlobStorageError",
    "BlobStore",
    "DocumentNotFoundError",
    "ErrorKind",
    "LocalBlobStore",
    "MetadataStoreError",
    "ResourceCategory",
    "ResourceError",
    "ResourceType",
    "S3BlobStore",
    "ServiceResult",
    "UploadedFile",
    "ValidationReason",
    "bucket_for",
    "create_r2_client",
    "derive_thumbnail",
    "detect_video_platform",
    "extract_video_id",
    "format_file_size",
    "is_external_video_link",
    "resolve_storage_path",
    "resolve_thumbnail",
    "safe_filename",
    "validate_related_resources",
    "validate_upload",
]
