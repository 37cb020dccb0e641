"""Unit tests for resource blob stores."""

from pathlib import Path

import boto3
import pytest
from moto import mock_aws

from content_api.lib.resources.errors import BlobStorageError
from content_api.lib.resources.storage import LocalBlobStore, S3BlobStore, create_r2_client

_BUCKET = "resources-bucket"
_PUBLIC_URL = "https://cdn.example.com"


@pytest.fixture
def local_store(tmp_path: Path) -> LocalBlobStore:
    """Create a LocalBlobStore rooted at a temporary directory."""
    return LocalBlobStore(tmp_path, "http://localhost:8000/uploads/")


@pytest.fixture
def s3_client():
    """Create a moto-mocked S3 client and bucket."""
    with mock_aws():
        client = boto3.client("s3", region_name="us-east-1")
        client.create_bucket(Bucket=_BUCKET)
        yield client


class TestLocalBlobStore:
    """Tests for the filesystem blob store."""

    @pytest.mark.asyncio
    async def test_put_writes_file_and_returns_url(self, local_store: LocalBlobStore, tmp_path: Path) -> None:
        url = await local_store.put("resources/documents/1_guide.pdf", b"%PDF-1.7", "application/pdf")

        assert url == "http://localhost:8000/uploads/resources/documents/1_guide.pdf"
        assert (tmp_path / "resources" / "documents" / "1_guide.pdf").read_bytes() == b"%PDF-1.7"

    @pytest.mark.asyncio
    async def test_put_overwrites_same_path(self, local_store: LocalBlobStore, tmp_path: Path) -> None:
        await local_store.put("resources/audio/1_a.mp3", b"first")
        await local_store.put("resources/audio/1_a.mp3", b"second")

        assert (tmp_path / "resources" / "audio" / "1_a.mp3").read_bytes() == b"second"

    @pytest.mark.asyncio
    async def test_delete_by_url(self, local_store: LocalBlobStore, tmp_path: Path) -> None:
        url = await local_store.put("resources/images/1_a.png", b"png")

        await local_store.delete(url)

        assert not (tmp_path / "resources" / "images" / "1_a.png").exists()

    @pytest.mark.asyncio
    async def test_delete_by_relative_path(self, local_store: LocalBlobStore, tmp_path: Path) -> None:
        await local_store.put("resources/images/1_b.png", b"png")

        await local_store.delete("resources/images/1_b.png")

        assert not (tmp_path / "resources" / "images" / "1_b.png").exists()

    @pytest.mark.asyncio
    async def test_delete_missing_raises(self, local_store: LocalBlobStore) -> None:
        with pytest.raises(BlobStorageError, match="not found"):
            await local_store.delete("resources/images/missing.png")

    @pytest.mark.asyncio
    async def test_delete_foreign_url_raises(self, local_store: LocalBlobStore) -> None:
        with pytest.raises(BlobStorageError, match="Not a locally stored blob"):
            await local_store.delete("https://elsewhere.example.com/resources/images/1_a.png")

    @pytest.mark.asyncio
    async def test_path_traversal_rejected(self, local_store: LocalBlobStore) -> None:
        with pytest.raises(BlobStorageError, match="escapes storage root"):
            await local_store.put("../outside.txt", b"nope")


class TestCreateR2Client:
    def test_returns_configured_client(self) -> None:
        client = create_r2_client("test-account", "test-key", "test-secret")
        assert hasattr(client, "put_object")
        assert client.meta.endpoint_url == "https://test-account.r2.cloudflarestorage.com"


class TestS3BlobStore:
    """Tests for the S3/R2 blob store against moto."""

    @pytest.mark.asyncio
    async def test_put_uploads_with_content_type(self, s3_client) -> None:
        store = S3BlobStore(s3_client, _BUCKET, _PUBLIC_URL + "/")

        url = await store.put("resources/videos/5_clip.mp4", b"video-bytes", "video/mp4")

        assert url == "https://cdn.example.com/resources/videos/5_clip.mp4"
        obj = s3_client.get_object(Bucket=_BUCKET, Key="resources/videos/5_clip.mp4")
        assert obj["Body"].read() == b"video-bytes"
        assert obj["ContentType"] == "video/mp4"

    @pytest.mark.asyncio
    async def test_delete_by_public_url(self, s3_client) -> None:
        store = S3BlobStore(s3_client, _BUCKET, _PUBLIC_URL)
        url = await store.put("resources/documents/1_a.pdf", b"pdf")

        await store.delete(url)

        listing = s3_client.list_objects_v2(Bucket=_BUCKET)
        assert listing.get("KeyCount", 0) == 0

    @pytest.mark.asyncio
    async def test_delete_foreign_url_raises(self, s3_client) -> None:
        store = S3BlobStore(s3_client, _BUCKET, _PUBLIC_URL)

        with pytest.raises(BlobStorageError, match="Not an object"):
            await store.delete("https://www.youtube.com/watch?v=dQw4w9WgXcQ")

    @pytest.mark.asyncio
    async def test_put_to_missing_bucket_raises(self, s3_client) -> None:
        store = S3BlobStore(s3_client, "no-such-bucket", _PUBLIC_URL)

        with pytest.raises(BlobStorageError, match="Failed to upload"):
            await store.put("resources/other/1_x.bin", b"data")
