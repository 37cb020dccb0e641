"""Shared test fixtures: settings, in-memory SQLite engine, and fake gateways."""

import asyncio
import copy
import itertools
import uuid
from collections.abc import AsyncGenerator
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from content_api.core.config import Settings
from content_api.lib.resources.errors import BlobStorageError, DocumentNotFoundError, MetadataStoreError
from content_api.models.base import Base
from content_api.services.resource_service import ResourceService

FIXED_CLOCK_MS = 1_760_000_000_000
BLOB_BASE_URL = "https://blobs.test"


class InMemoryMetadataStore:
    """Dict-backed MetadataStore with failure injection and call recording."""

    def __init__(self) -> None:
        self.documents: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, Any]] = []
        self.fail_on: set[str] = set()
        self._ticks = itertools.count(1)
        self._epoch = datetime(2026, 1, 1, tzinfo=UTC)

    def _now(self) -> datetime:
        return self._epoch + timedelta(milliseconds=next(self._ticks))

    def _maybe_fail(self, op: str) -> None:
        if op in self.fail_on:
            raise MetadataStoreError(f"{op} failed")

    async def insert(self, document: dict[str, Any]) -> str:
        self.calls.append(("insert", document))
        self._maybe_fail("insert")
        resource_id = str(uuid.uuid4())
        now = self._now()
        self.documents[resource_id] = {
            **copy.deepcopy(document),
            "id": resource_id,
            "created_at": now,
            "updated_at": now,
        }
        return resource_id

    async def get(self, resource_id: str) -> dict[str, Any] | None:
        self.calls.append(("get", resource_id))
        self._maybe_fail("get")
        document = self.documents.get(resource_id)
        return copy.deepcopy(document) if document is not None else None

    async def query(self, filters: dict[str, Any], *, limit: int | None = None) -> list[dict[str, Any]]:
        self.calls.append(("query", {"filters": filters, "limit": limit}))
        self._maybe_fail("query")
        matches = [
            doc for doc in self.documents.values() if all(doc.get(name) == value for name, value in filters.items())
        ]
        matches.sort(key=lambda doc: doc["created_at"], reverse=True)
        if limit is not None:
            matches = matches[:limit]
        return copy.deepcopy(matches)

    async def update(self, resource_id: str, fields: dict[str, Any]) -> None:
        self.calls.append(("update", fields))
        self._maybe_fail("update")
        document = self.documents.get(resource_id)
        if document is None:
            raise DocumentNotFoundError(resource_id)
        for name, value in fields.items():
            if value is None:
                document.pop(name, None)
            else:
                document[name] = copy.deepcopy(value)
        document["updated_at"] = self._now()

    async def delete(self, resource_id: str) -> None:
        self.calls.append(("delete", resource_id))
        self._maybe_fail("delete")
        if self.documents.pop(resource_id, None) is None:
            raise DocumentNotFoundError(resource_id)

    async def atomic_increment(self, resource_id: str, field: str, delta: int = 1) -> None:
        self.calls.append(("atomic_increment", (resource_id, field, delta)))
        # Yield first so concurrent callers interleave around the increment.
        await asyncio.sleep(0)
        self._maybe_fail("atomic_increment")
        document = self.documents.get(resource_id)
        if document is None:
            raise DocumentNotFoundError(resource_id)
        document[field] = document.get(field, 0) + delta

    def call_names(self) -> list[str]:
        return [name for name, _ in self.calls]


class InMemoryBlobStore:
    """Dict-backed BlobStore serving URLs under ``BLOB_BASE_URL``."""

    def __init__(self) -> None:
        self.blobs: dict[str, bytes] = {}
        self.content_types: dict[str, str] = {}
        self.deleted: list[str] = []
        self.fail_put = False
        self.fail_delete = False

    async def put(self, path: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        if self.fail_put:
            raise BlobStorageError(f"put {path} failed")
        self.blobs[path] = content
        self.content_types[path] = content_type
        return f"{BLOB_BASE_URL}/{path}"

    async def delete(self, url_or_path: str) -> None:
        self.deleted.append(url_or_path)
        if self.fail_delete:
            raise BlobStorageError(f"delete {url_or_path} failed")
        path = url_or_path.removeprefix(f"{BLOB_BASE_URL}/")
        if self.blobs.pop(path, None) is None:
            raise BlobStorageError(f"Blob not found: {path}")


@pytest.fixture
def settings() -> Settings:
    """Test application settings."""
    return Settings(
        database_url="sqlite+aiosqlite:///:memory:",
        _env_file=None,  # type: ignore[call-arg]
    )


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine]:
    """Create an in-memory async SQLite engine for testing."""
    engine = create_async_engine("sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Session factory bound to the in-memory engine."""
    return async_sessionmaker(async_engine, expire_on_commit=False)


@pytest.fixture
def memory_store() -> InMemoryMetadataStore:
    return InMemoryMetadataStore()


@pytest.fixture
def memory_blobs() -> InMemoryBlobStore:
    return InMemoryBlobStore()


@pytest.fixture
def resource_service(memory_store: InMemoryMetadataStore, memory_blobs: InMemoryBlobStore) -> ResourceService:
    """ResourceService wired to in-memory gateways with a fixed clock."""
    return ResourceService(memory_store, memory_blobs, max_featured=3, clock_ms=lambda: FIXED_CLOCK_MS)
