"""Storage path resolution for uploaded resource files.

Paths have the shape ``resources/<bucket>/<epoch-millis>_<name>``, where
``<name>`` is the final component of the client-side filename. Two
identically named uploads in the same millisecond resolve to the same
path; the later upload overwrites the earlier one.
"""

import time

from content_api.lib.resources.types import ResourceType

STORAGE_ROOT = "resources"

_BUCKETS: dict[ResourceType, str] = {
    ResourceType.PDF: "documents",
    ResourceType.DOCX: "documents",
    ResourceType.IMAGE: "images",
    ResourceType.VIDEO: "videos",
    ResourceType.AUDIO: "audio",
}


def bucket_for(resource_type: ResourceType | str) -> str:
    """Return the storage bucket for a resource type (``other`` if unmapped)."""
    try:
        return _BUCKETS.get(ResourceType(resource_type), "other")
    except ValueError:
        return "other"


def safe_filename(filename: str) -> str:
    """Return the last path component of a client-side filename.

    Both ``/`` and ``\\`` count as separators. Returns an empty string when
    nothing usable is left (``""``, ``.``, ``..`` or a trailing separator).
    """
    name = filename.replace("\\", "/").rsplit("/", 1)[-1]
    if name in ("", ".", ".."):
        return ""
    return name


def resolve_storage_path(filename: str, resource_type: ResourceType | str, *, now_ms: int | None = None) -> str:
    """Build the blob path for an uploaded file.

    Args:
        filename: Client-side filename; any directory part is dropped.
        resource_type: Resource type selecting the bucket.
        now_ms: Epoch milliseconds; defaults to the current time.

    Returns:
        The relative blob path.

    Raises:
        ValueError: If ``filename`` has no usable final component.
    """
    name = safe_filename(filename)
    if not name:
        raise ValueError(f"Filename has no usable name component: {filename!r}")
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"{STORAGE_ROOT}/{bucket_for(resource_type)}/{now_ms}_{name}"
