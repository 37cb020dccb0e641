"""Error taxonomy and result type for the resource engine.

Gateways raise ``BlobStorageError`` / ``MetadataStoreError``. The lifecycle
manager converts every failure into a ``ResourceError`` carried by a
``ServiceResult`` so nothing is raised across the public boundary.
"""

import enum
from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


class BlobStorageError(Exception):
    """A blob store put or delete failed."""


class MetadataStoreError(Exception):
    """A metadata store operation failed."""


class DocumentNotFoundError(MetadataStoreError):
    """The targeted document does not exist."""


class ErrorKind(enum.StrEnum):
    VALIDATION = "validation"
    STORAGE = "storage"
    NOT_FOUND = "not_found"


class ValidationReason(enum.StrEnum):
    FILE_TOO_LARGE = "file_too_large"
    UNSUPPORTED_EXTENSION = "unsupported_extension"
    TOO_MANY_RELATED = "too_many_related"
    FEATURED_LIMIT_REACHED = "featured_limit_reached"


@dataclass(frozen=True)
class ResourceError:
    """A typed failure returned by a lifecycle operation.

    Attributes:
        kind: Closed error category.
        message: Human-readable description.
        reason: Sub-kind for validation failures, None otherwise.
    """

    kind: ErrorKind
    message: str
    reason: ValidationReason | None = None

    @classmethod
    def validation(cls, reason: ValidationReason, message: str) -> "ResourceError":
        return cls(kind=ErrorKind.VALIDATION, message=message, reason=reason)

    @classmethod
    def storage(cls, message: str) -> "ResourceError":
        return cls(kind=ErrorKind.STORAGE, message=message)

    @classmethod
    def not_found(cls, resource_id: str) -> "ResourceError":
        return cls(kind=ErrorKind.NOT_FOUND, message=f"Resource {resource_id} not found")


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """Either a value or an error; callers check ``ok`` before reading ``value``."""

    value: T | None = None
    error: ResourceError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None) -> "ServiceResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: ResourceError) -> "ServiceResult[T]":
        return cls(error=error)
