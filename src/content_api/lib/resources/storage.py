"""Blob store gateways for uploaded resource files.

Provides a ``BlobStore`` Protocol plus two implementations: a local
filesystem store written with async I/O, and an S3-compatible store
(Cloudflare R2) backed by boto3. Both return a fetchable URL from
``put`` and accept either that URL or the relative path in ``delete``.
"""

import asyncio
from pathlib import Path
from typing import Any, Protocol

import aiofiles
import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError
from loguru import logger

from content_api.lib.resources.errors import BlobStorageError


class BlobStore(Protocol):
    """Abstract blob storage interface for resource files."""

    async def put(self, path: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        """Store bytes at ``path`` and return a fetchable URL.

        Raises:
            BlobStorageError: If the write fails.
        """
        ...

    async def delete(self, url_or_path: str) -> None:
        """Delete a blob by its URL or relative path.

        Raises:
            BlobStorageError: If the blob is not managed by this store or
                the delete fails.
        """
        ...


def _strip_public_prefix(url_or_path: str, public_url: str) -> str | None:
    """Map a public URL or relative path to a relative key.

    Returns None for absolute URLs that do not live under ``public_url``.
    """
    prefix = public_url.rstrip("/") + "/"
    if url_or_path.startswith(prefix):
        return url_or_path[len(prefix) :]
    if "://" in url_or_path:
        return None
    return url_or_path.lstrip("/")


class LocalBlobStore:
    """Local filesystem implementation of BlobStore.

    Args:
        base_dir: Root directory for stored files.
        public_url: URL prefix under which ``base_dir`` is served.
    """

    def __init__(self, base_dir: str | Path, public_url: str) -> None:
        self._base_dir = Path(base_dir)
        self._public_url = public_url.rstrip("/")

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    async def put(self, path: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        full_path = self._resolve(path)
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(full_path, "wb") as f:
                await f.write(content)
        except OSError as exc:
            raise BlobStorageError(f"Failed to write {path}: {exc}") from exc

        logger.debug("Stored {} ({} bytes, {})", path, len(content), content_type)
        return f"{self._public_url}/{path}"

    async def delete(self, url_or_path: str) -> None:
        relative = _strip_public_prefix(url_or_path, self._public_url)
        if relative is None:
            raise BlobStorageError(f"Not a locally stored blob: {url_or_path}")

        full_path = self._resolve(relative)
        if not full_path.exists():
            raise BlobStorageError(f"Blob not found: {relative}")
        try:
            full_path.unlink()
        except OSError as exc:
            raise BlobStorageError(f"Failed to delete {relative}: {exc}") from exc
        logger.debug("Deleted {}", relative)

    def _resolve(self, relative: str) -> Path:
        base = self._base_dir.resolve()
        full_path = (base / relative).resolve()
        if not full_path.is_relative_to(base):
            raise BlobStorageError(f"Path escapes storage root: {relative}")
        return full_path


def create_r2_client(
    account_id: str,
    access_key_id: str,
    secret_access_key: str,
) -> Any:
    """Create a boto3 S3 client configured for Cloudflare R2.

    Args:
        account_id: Cloudflare R2 account ID.
        access_key_id: R2 API token access key.
        secret_access_key: R2 API token secret key.

    Returns:
        Configured boto3 S3 client.
    """
    config = Config(
        request_checksum_calculation="when_required",
        response_checksum_validation="when_required",
    )

    return boto3.client(
        "s3",
        endpoint_url=f"https://{account_id}.r2.cloudflarestorage.com",
        aws_access_key_id=access_key_id,
        aws_secret_access_key=secret_access_key,
        region_name="auto",
        config=config,
    )


class S3BlobStore:
    """S3/R2 implementation of BlobStore.

    boto3 is synchronous, so each call runs in a worker thread.

    Args:
        client: boto3 S3 client.
        bucket: Bucket name.
        public_url: Public URL prefix for objects in the bucket.
    """

    def __init__(self, client: Any, bucket: str, public_url: str) -> None:
        self._client = client
        self._bucket = bucket
        self._public_url = public_url.rstrip("/")

    async def put(self, path: str, content: bytes, content_type: str = "application/octet-stream") -> str:
        try:
            await asyncio.to_thread(
                self._client.put_object,
                Bucket=self._bucket,
                Key=path,
                Body=content,
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as exc:
            raise BlobStorageError(f"Failed to upload s3://{self._bucket}/{path}: {exc}") from exc

        logger.info("Uploaded {} bytes to s3://{}/{}", len(content), self._bucket, path)
        return f"{self._public_url}/{path}"

    async def delete(self, url_or_path: str) -> None:
        key = _strip_public_prefix(url_or_path, self._public_url)
        if key is None:
            raise BlobStorageError(f"Not an object in bucket {self._bucket}: {url_or_path}")
        try:
            await asyncio.to_thread(self._client.delete_object, Bucket=self._bucket, Key=key)
        except (BotoCoreError, ClientError) as exc:
            raise BlobStorageError(f"Failed to delete s3://{self._bucket}/{key}: {exc}") from exc
        logger.info("Deleted s3://{}/{}", self._bucket, key)
