"""Settings for the content dashboard API, read from the environment (and ``.env``).

Variable names are the upper-cased field names, e.g. ``DATABASE_URL`` or
``RESOURCE_STORAGE_BACKEND``.
"""

import re

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_SCHEMA_NAME = re.compile(r"^[a-z_][a-z0-9_]{0,62}$")
_STORAGE_BACKENDS = ("local", "r2")


class Settings(BaseSettings):
    """Runtime configuration.

    Only ``database_url`` is required; everything else has a development
    default that serves uploads from a local directory.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Metadata store
    database_url: str = Field(description="Async SQLAlchemy URL (postgresql+asyncpg:// or sqlite+aiosqlite://)")
    database_schema: str | None = Field(
        default=None,
        description="PostgreSQL schema holding the resources table, for per-branch databases",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Minimum Loguru level")
    log_dir: str | None = Field(default=None, description="Write a rotating content-api.log here when set")
    log_json: bool = Field(default=False, description="Emit log records as JSON lines instead of the text format")

    # HTTP
    api_v1_prefix: str = Field(default="/api/v1", description="Mount point for the resources router")
    cors_origins: str = Field(default="", description="Comma-separated dashboard origins allowed by CORS")
    cors_origin_regex: str = Field(default="", description="Regex for additional allowed origins (preview deploys)")

    # Resource engine
    resource_storage_backend: str = Field(default="local", description="Blob backend for uploads: 'local' or 'r2'")
    resource_upload_dir: str = Field(default="./uploads", description="Root directory for the local blob backend")
    resource_public_url: str = Field(
        default="http://localhost:8000/uploads",
        description="URL prefix under which the local blob backend is served",
    )
    resource_max_featured: int = Field(
        default=3,
        ge=0,
        description="How many resources may be featured at once; 0 removes the limit",
    )

    # Cloudflare R2 (used when resource_storage_backend is 'r2')
    r2_account_id: str | None = None
    r2_access_key_id: str | None = None
    r2_secret_access_key: str | None = None
    r2_bucket: str | None = None
    r2_public_url: str | None = Field(default=None, description="Public bucket URL (custom domain or r2.dev)")

    @field_validator("database_schema")
    @classmethod
    def validate_database_schema(cls, v: str | None) -> str | None:
        if v is not None and not _SCHEMA_NAME.match(v):
            msg = f"Invalid database_schema: must match {_SCHEMA_NAME.pattern}"
            raise ValueError(msg)
        return v

    @field_validator("resource_storage_backend")
    @classmethod
    def validate_storage_backend(cls, v: str) -> str:
        backend = v.strip().lower()
        if backend not in _STORAGE_BACKENDS:
            msg = "resource_storage_backend must be 'local' or 'r2'"
            raise ValueError(msg)
        return backend

    @property
    def cors_origin_list(self) -> list[str]:
        """Configured CORS origins as a list, blanks dropped."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def get_settings() -> Settings:
    """Load settings from the current environment."""
    return Settings()  # type: ignore[call-arg]
