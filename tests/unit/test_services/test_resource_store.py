"""Unit tests for the SQLAlchemy resource metadata store."""

import itertools
import uuid
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest

from content_api.lib.resources.errors import DocumentNotFoundError, MetadataStoreError
from content_api.services import resource_store
from content_api.services.resource_store import SqlResourceStore


def _document(**overrides: Any) -> dict[str, Any]:
    document: dict[str, Any] = {
        "title": "Quarterly Strategy Deck",
        "description": "Slides from the planning offsite",
        "type": "pdf",
        "category": "strategy",
        "is_public": True,
        "featured": False,
        "tags": ["planning"],
        "related_resources": [],
        "created_by": "admin-1",
        "download_count": 0,
    }
    document.update(overrides)
    return document


@pytest.fixture
def store(session_factory) -> SqlResourceStore:
    return SqlResourceStore(session_factory)


@pytest.fixture
def ticking_clock(monkeypatch):
    """Replace the store's clock with one that advances a second per call."""
    start = datetime(2026, 3, 1, tzinfo=UTC)
    ticks = itertools.count()
    monkeypatch.setattr(resource_store, "utcnow", lambda: start + timedelta(seconds=next(ticks)))


class TestInsertAndGet:
    @pytest.mark.asyncio
    async def test_round_trip_is_sparse(self, store: SqlResourceStore) -> None:
        resource_id = await store.insert(_document())

        document = await store.get(resource_id)

        assert document is not None
        assert document["id"] == resource_id
        assert document["title"] == "Quarterly Strategy Deck"
        assert document["tags"] == ["planning"]
        assert document["download_count"] == 0
        assert "file_url" not in document
        assert "file_size" not in document
        assert "thumbnail_url" not in document
        assert document["created_at"] == document["updated_at"]

    @pytest.mark.asyncio
    async def test_file_fields_persisted(self, store: SqlResourceStore) -> None:
        resource_id = await store.insert(
            _document(file_url="https://cdn.example.com/resources/documents/1_a.pdf", file_size=2_097_152)
        )

        document = await store.get(resource_id)

        assert document is not None
        assert document["file_url"] == "https://cdn.example.com/resources/documents/1_a.pdf"
        assert document["file_size"] == 2_097_152

    @pytest.mark.asyncio
    async def test_get_unknown_id(self, store: SqlResourceStore) -> None:
        assert await store.get(str(uuid.uuid4())) is None

    @pytest.mark.asyncio
    async def test_get_malformed_id(self, store: SqlResourceStore) -> None:
        assert await store.get("not-a-uuid") is None

    @pytest.mark.asyncio
    async def test_insert_unknown_field_rejected(self, store: SqlResourceStore) -> None:
        with pytest.raises(MetadataStoreError, match="Unknown resource fields: color"):
            await store.insert(_document(color="blue"))


class TestQuery:
    @pytest.mark.asyncio
    async def test_newest_first_with_limit(self, store: SqlResourceStore, ticking_clock) -> None:
        for title in ("one", "two", "three"):
            await store.insert(_document(title=title))

        documents = await store.query({}, limit=2)

        assert [d["title"] for d in documents] == ["three", "two"]

    @pytest.mark.asyncio
    async def test_equality_filters(self, store: SqlResourceStore) -> None:
        await store.insert(_document(title="public pdf"))
        await store.insert(_document(title="private pdf", is_public=False))
        await store.insert(_document(title="public video", type="video", category="videos"))

        documents = await store.query({"type": "pdf", "is_public": True})

        assert [d["title"] for d in documents] == ["public pdf"]

    @pytest.mark.asyncio
    async def test_featured_filter(self, store: SqlResourceStore) -> None:
        await store.insert(_document(featured=True))
        await store.insert(_document())

        assert len(await store.query({"featured": True})) == 1

    @pytest.mark.asyncio
    async def test_unknown_filter_rejected(self, store: SqlResourceStore) -> None:
        with pytest.raises(MetadataStoreError):
            await store.query({"title": "x"})


class TestUpdate:
    @pytest.mark.asyncio
    async def test_partial_update_preserves_other_fields(self, store: SqlResourceStore, ticking_clock) -> None:
        resource_id = await store.insert(_document(file_url="https://cdn.example.com/a.pdf", file_size=10))

        await store.update(resource_id, {"title": "Renamed"})

        document = await store.get(resource_id)
        assert document is not None
        assert document["title"] == "Renamed"
        assert document["description"] == "Slides from the planning offsite"
        assert document["file_url"] == "https://cdn.example.com/a.pdf"
        assert document["file_size"] == 10
        assert document["updated_at"] > document["created_at"]

    @pytest.mark.asyncio
    async def test_none_removes_field(self, store: SqlResourceStore) -> None:
        resource_id = await store.insert(_document(file_url="https://cdn.example.com/a.pdf", file_size=10))

        await store.update(resource_id, {"file_url": "https://www.youtube.com/watch?v=dQw4w9WgXcQ", "file_size": None})

        document = await store.get(resource_id)
        assert document is not None
        assert document["file_url"] == "https://www.youtube.com/watch?v=dQw4w9WgXcQ"
        assert "file_size" not in document

    @pytest.mark.asyncio
    async def test_missing_document(self, store: SqlResourceStore) -> None:
        with pytest.raises(DocumentNotFoundError):
            await store.update(str(uuid.uuid4()), {"title": "x"})

    @pytest.mark.asyncio
    async def test_malformed_id(self, store: SqlResourceStore) -> None:
        with pytest.raises(DocumentNotFoundError):
            await store.update("nope", {"title": "x"})


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete(self, store: SqlResourceStore) -> None:
        resource_id = await store.insert(_document())

        await store.delete(resource_id)

        assert await store.get(resource_id) is None

    @pytest.mark.asyncio
    async def test_delete_missing(self, store: SqlResourceStore) -> None:
        with pytest.raises(DocumentNotFoundError):
            await store.delete(str(uuid.uuid4()))


class TestAtomicIncrement:
    @pytest.mark.asyncio
    async def test_increments_without_touching_updated_at(self, store: SqlResourceStore, ticking_clock) -> None:
        resource_id = await store.insert(_document())
        before = await store.get(resource_id)

        for _ in range(3):
            await store.atomic_increment(resource_id, "download_count")
        await store.atomic_increment(resource_id, "download_count", delta=2)

        after = await store.get(resource_id)
        assert before is not None and after is not None
        assert after["download_count"] == 5
        assert after["updated_at"] == before["updated_at"]

    @pytest.mark.asyncio
    async def test_non_counter_field_rejected(self, store: SqlResourceStore) -> None:
        resource_id = await store.insert(_document())

        with pytest.raises(MetadataStoreError, match="not an incrementable counter"):
            await store.atomic_increment(resource_id, "file_size")

    @pytest.mark.asyncio
    async def test_missing_document(self, store: SqlResourceStore) -> None:
        with pytest.raises(DocumentNotFoundError):
            await store.atomic_increment(str(uuid.uuid4()), "download_count")
