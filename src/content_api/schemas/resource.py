"""Pydantic v2 schemas for resource operations."""

from datetime import datetime

from pydantic import BaseModel, Field

from content_api.lib.resources.types import ResourceCategory, ResourceType
from content_api.lib.resources.validators import MAX_RELATED_RESOURCES

# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------


class ResourceResponse(BaseModel):
    """A stored resource.

    Built from sparse metadata documents: optional fields missing from the
    document stay unset, so ``model_fields_set`` (and responses rendered with
    ``exclude_unset``) distinguish "absent" from falsy values.
    """

    id: str
    title: str
    description: str
    type: ResourceType
    category: ResourceCategory
    file_url: str | None = None
    thumbnail_url: str | None = None
    file_size: int | None = None
    is_public: bool = True
    featured: bool = False
    tags: list[str] = Field(default_factory=list)
    related_resources: list[str] = Field(default_factory=list)
    download_count: int = 0
    created_by: str
    created_at: datetime
    updated_at: datetime


class ResourceListResponse(BaseModel):
    """List of resources."""

    items: list[ResourceResponse]
    total: int


class ResourceCreatedResponse(BaseModel):
    """Identifier of a newly created resource."""

    id: str


class ResourceStatsResponse(BaseModel):
    """Aggregate resource statistics."""

    total: int = Field(description="Number of resources")
    total_downloads: int = Field(description="Sum of download counts")
    by_category: dict[str, int] = Field(description="Resource count per category")


# ---------------------------------------------------------------------------
# Write schemas
# ---------------------------------------------------------------------------


class ResourceCreateRequest(BaseModel):
    """Metadata for a new resource."""

    title: str = Field(min_length=1, max_length=500)
    description: str = Field(min_length=1)
    type: ResourceType
    category: ResourceCategory
    file_url: str | None = Field(default=None, max_length=2000)
    is_public: bool = True
    featured: bool = False
    tags: list[str] = Field(default_factory=list)
    related_resources: list[str] = Field(default_factory=list, max_length=MAX_RELATED_RESOURCES)
    created_by: str = Field(min_length=1, max_length=255)


class ResourceUpdateRequest(BaseModel):
    """Partial update for a resource. All fields optional; None means unchanged."""

    title: str | None = Field(default=None, min_length=1, max_length=500)
    description: str | None = Field(default=None, min_length=1)
    type: ResourceType | None = None
    category: ResourceCategory | None = None
    file_url: str | None = Field(default=None, max_length=2000)
    is_public: bool | None = None
    featured: bool | None = None
    tags: list[str] | None = None
    related_resources: list[str] | None = Field(default=None, max_length=MAX_RELATED_RESOURCES)


class ResourceFilters(BaseModel):
    """Filters for listing resources."""

    category: ResourceCategory | None = None
    type: ResourceType | None = None
    is_public: bool | None = None
    limit: int | None = Field(default=None, ge=1, le=1000)
    search: str | None = None
