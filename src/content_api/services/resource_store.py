"""Metadata store gateway — resource documents over SQLAlchemy.

Exposes the document-collection contract the lifecycle manager depends on
(insert, get, filtered query, partial update, delete, atomic increment) and
a SQL implementation that opens one session per call, so the store holds
no cross-call state and concurrent callers never share a session.
"""

import uuid
from typing import Any, Protocol

from loguru import logger
from sqlalchemy import delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from content_api.lib.resources.errors import DocumentNotFoundError, MetadataStoreError
from content_api.models.base import utcnow
from content_api.models.resource import Resource

Document = dict[str, Any]

_FILTERABLE_FIELDS: frozenset[str] = frozenset({"category", "type", "is_public", "featured"})

_WRITABLE_FIELDS: frozenset[str] = frozenset(
    {
        "title",
        "description",
        "type",
        "category",
        "file_url",
        "thumbnail_url",
        "file_size",
        "is_public",
        "featured",
        "tags",
        "related_resources",
        "download_count",
        "created_by",
    }
)

_COUNTER_FIELDS: frozenset[str] = frozenset({"download_count"})


class MetadataStore(Protocol):
    """Document collection keyed by opaque string ids.

    Implementations raise ``MetadataStoreError`` on failure and
    ``DocumentNotFoundError`` when a write targets a missing id.
    """

    async def insert(self, document: Document) -> str: ...

    async def get(self, resource_id: str) -> Document | None: ...

    async def query(self, filters: dict[str, Any], *, limit: int | None = None) -> list[Document]:
        """Return documents matching all equality filters, newest first."""
        ...

    async def update(self, resource_id: str, fields: Document) -> None:
        """Merge ``fields`` into the document and refresh ``updated_at``.

        Fields not named are left untouched; a None value removes the field.
        """
        ...

    async def delete(self, resource_id: str) -> None: ...

    async def atomic_increment(self, resource_id: str, field: str, delta: int = 1) -> None:
        """Add ``delta`` to a numeric field without a client-side read."""
        ...


def _parse_id(resource_id: str) -> uuid.UUID | None:
    try:
        return uuid.UUID(str(resource_id))
    except ValueError:
        return None


def _to_document(resource: Resource) -> Document:
    """Convert a row to a sparse document: NULL columns are omitted."""
    document: Document = {}
    for column in Resource.__table__.columns:
        value = getattr(resource, column.key)
        if value is None:
            continue
        document[column.key] = value
    document["id"] = str(resource.id)
    return document


def _check_fields(fields: Document, allowed: frozenset[str]) -> None:
    unknown = set(fields) - allowed
    if unknown:
        msg = f"Unknown resource fields: {', '.join(sorted(unknown))}"
        raise MetadataStoreError(msg)


class SqlResourceStore:
    """SQLAlchemy implementation of MetadataStore.

    Args:
        session_factory: Async session factory bound to the database engine.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def insert(self, document: Document) -> str:
        _check_fields(document, _WRITABLE_FIELDS)
        now = utcnow()
        resource = Resource(id=uuid.uuid4(), created_at=now, updated_at=now, **document)
        try:
            async with self._session_factory() as session:
                session.add(resource)
                await session.commit()
        except SQLAlchemyError as exc:
            raise MetadataStoreError(f"Failed to insert resource: {exc}") from exc
        return str(resource.id)

    async def get(self, resource_id: str) -> Document | None:
        uid = _parse_id(resource_id)
        if uid is None:
            return None
        try:
            async with self._session_factory() as session:
                resource = await session.get(Resource, uid)
        except SQLAlchemyError as exc:
            raise MetadataStoreError(f"Failed to fetch resource {resource_id}: {exc}") from exc
        return _to_document(resource) if resource is not None else None

    async def query(self, filters: dict[str, Any], *, limit: int | None = None) -> list[Document]:
        _check_fields(filters, _FILTERABLE_FIELDS)
        stmt = select(Resource)
        for field_name, value in filters.items():
            stmt = stmt.where(getattr(Resource, field_name) == value)
        stmt = stmt.order_by(Resource.created_at.desc())
        if limit is not None:
            stmt = stmt.limit(limit)

        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                rows = list(result.scalars().all())
        except SQLAlchemyError as exc:
            raise MetadataStoreError(f"Failed to query resources: {exc}") from exc
        logger.debug(f"Queried {len(rows)} resources with filters {filters}")
        return [_to_document(row) for row in rows]

    async def update(self, resource_id: str, fields: Document) -> None:
        _check_fields(fields, _WRITABLE_FIELDS)
        uid = _parse_id(resource_id)
        if uid is None:
            raise DocumentNotFoundError(resource_id)
        stmt = update(Resource).where(Resource.id == uid).values(**fields, updated_at=utcnow())
        await self._execute_write(stmt, resource_id, "update")

    async def delete(self, resource_id: str) -> None:
        uid = _parse_id(resource_id)
        if uid is None:
            raise DocumentNotFoundError(resource_id)
        await self._execute_write(delete(Resource).where(Resource.id == uid), resource_id, "delete")

    async def atomic_increment(self, resource_id: str, field: str, delta: int = 1) -> None:
        if field not in _COUNTER_FIELDS:
            msg = f"Field {field} is not an incrementable counter"
            raise MetadataStoreError(msg)
        uid = _parse_id(resource_id)
        if uid is None:
            raise DocumentNotFoundError(resource_id)
        column = getattr(Resource, field)
        stmt = update(Resource).where(Resource.id == uid).values({column: column + delta})
        await self._execute_write(stmt, resource_id, "increment")

    async def _execute_write(self, stmt: Any, resource_id: str, action: str) -> None:
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as exc:
            raise MetadataStoreError(f"Failed to {action} resource {resource_id}: {exc}") from exc
        if result.rowcount == 0:
            raise DocumentNotFoundError(resource_id)
