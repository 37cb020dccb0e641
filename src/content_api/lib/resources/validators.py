"""Upload validation policy for resource files.

The accepted-extension and maximum-size tables are part of the public
contract consumed by existing callers and must not drift.
"""

from content_api.lib.resources.errors import ResourceError, ValidationReason
from content_api.lib.resources.paths import safe_filename
from content_api.lib.resources.types import ResourceType, UploadedFile

_MB = 1024 * 1024

ACCEPTED_EXTENSIONS: dict[ResourceType, tuple[str, ...]] = {
    ResourceType.PDF: (".pdf",),
    ResourceType.DOCX: (".docx", ".doc"),
    ResourceType.IMAGE: (".jpg", ".jpeg", ".png", ".gif", ".webp", ".svg"),
    ResourceType.VIDEO: (".mp4", ".mov", ".avi", ".webm", ".mkv"),
    ResourceType.AUDIO: (".mp3", ".wav", ".ogg", ".m4a", ".aac"),
}

MAX_FILE_SIZES: dict[ResourceType, int] = {
    ResourceType.PDF: 10 * _MB,
    ResourceType.DOCX: 10 * _MB,
    ResourceType.IMAGE: 5 * _MB,
    ResourceType.VIDEO: 100 * _MB,
    ResourceType.AUDIO: 20 * _MB,
}

MAX_RELATED_RESOURCES = 3

_SIZE_UNITS = ("Bytes", "KB", "MB", "GB")


def format_file_size(num_bytes: int) -> str:
    """Format a byte count for display (e.g. ``10 MB``, ``1.5 KB``).

    Args:
        num_bytes: Size in bytes.

    Returns:
        The size scaled to the largest unit that keeps the value >= 1.
    """
    if num_bytes <= 0:
        return "0 Bytes"
    exponent = 0
    while num_bytes >= 1024 ** (exponent + 1) and exponent < len(_SIZE_UNITS) - 1:
        exponent += 1
    value = round(num_bytes / 1024**exponent, 2)
    return f"{value:g} {_SIZE_UNITS[exponent]}"


def has_upload_policy(resource_type: ResourceType) -> bool:
    """Return True if files may be uploaded for this resource type."""
    return resource_type in ACCEPTED_EXTENSIONS


def validate_upload(file: UploadedFile, expected_type: ResourceType) -> ResourceError | None:
    """Validate an uploaded file against the policy for ``expected_type``.

    Size is checked before extension. The size limit is inclusive and the
    extension match is a case-insensitive suffix test on the last path
    component of the filename; a filename with no such component is
    rejected as an unsupported extension.

    Args:
        file: The uploaded file.
        expected_type: The resource type the file is being attached to.

    Returns:
        None if the file is acceptable, otherwise a validation ResourceError.
    """
    if not has_upload_policy(expected_type):
        return ResourceError.validation(
            ValidationReason.UNSUPPORTED_EXTENSION,
            f"File uploads are not supported for {expected_type} resources",
        )

    max_size = MAX_FILE_SIZES[expected_type]
    if file.size > max_size:
        return ResourceError.validation(
            ValidationReason.FILE_TOO_LARGE,
            f"File size must be less than {format_file_size(max_size)}",
        )

    name = safe_filename(file.filename)
    if not name:
        return ResourceError.validation(
            ValidationReason.UNSUPPORTED_EXTENSION,
            "File name is missing or not a plain file name",
        )

    accepted = ACCEPTED_EXTENSIONS[expected_type]
    if not name.lower().endswith(accepted):
        return ResourceError.validation(
            ValidationReason.UNSUPPORTED_EXTENSION,
            f"File type not supported for {expected_type}. Accepted extensions: {', '.join(accepted)}",
        )

    return None


def validate_related_resources(related: list[str]) -> ResourceError | None:
    """Check the related-resources cap."""
    if len(related) > MAX_RELATED_RESOURCES:
        return ResourceError.validation(
            ValidationReason.TOO_MANY_RELATED,
            f"At most {MAX_RELATED_RESOURCES} related resources are allowed",
        )
    return None
