"""Tests for gateway and service wiring."""

from unittest.mock import patch

import pytest

from content_api.core.config import Settings
from content_api.core.dependencies import build_blob_store, build_resource_service, get_resource_service
from content_api.lib.resources.storage import LocalBlobStore, S3BlobStore
from content_api.services.resource_service import ResourceService


def _settings(**overrides) -> Settings:
    return Settings(database_url="sqlite+aiosqlite:///:memory:", _env_file=None, **overrides)  # type: ignore[call-arg]


class TestBuildBlobStore:
    """Tests for build_blob_store."""

    def test_local_backend(self, tmp_path) -> None:
        store = build_blob_store(_settings(resource_upload_dir=str(tmp_path)))

        assert isinstance(store, LocalBlobStore)
        assert store.base_dir == tmp_path

    def test_r2_backend(self) -> None:
        settings = _settings(
            resource_storage_backend="r2",
            r2_account_id="acct",
            r2_access_key_id="key",
            r2_secret_access_key="secret",
            r2_bucket="resources",
            r2_public_url="https://cdn.example.com",
        )

        assert isinstance(build_blob_store(settings), S3BlobStore)

    def test_r2_backend_requires_credentials(self) -> None:
        settings = _settings(resource_storage_backend="r2", r2_account_id="acct")

        with pytest.raises(ValueError, match="R2_ACCESS_KEY_ID"):
            build_blob_store(settings)


class TestResourceServiceDependency:
    @pytest.mark.asyncio
    async def test_builds_service_from_settings(self, tmp_path) -> None:
        settings = _settings(resource_upload_dir=str(tmp_path))

        with patch("content_api.core.dependencies.get_session_factory") as mock_factory:
            service = await get_resource_service(settings)

        assert isinstance(service, ResourceService)
        mock_factory.assert_called_once()

    def test_build_resource_service_uses_featured_cap(self, tmp_path) -> None:
        settings = _settings(resource_upload_dir=str(tmp_path), resource_max_featured=7)

        with patch("content_api.core.dependencies.get_session_factory"):
            service = build_resource_service(settings)

        assert service._max_featured == 7
