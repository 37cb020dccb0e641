"""Resource model — a downloadable file or linkable asset plus its metadata.

Optional attributes (``file_url``, ``thumbnail_url``, ``file_size``) are
nullable columns; the metadata store omits NULL columns from the documents
it returns so stored records stay sparse.
"""

from sqlalchemy import JSON, BigInteger, Boolean, CheckConstraint, Index, Integer, String, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from content_api.models.base import Base, TimestampMixin, UUIDMixin

_JSONType = JSON().with_variant(JSONB(), "postgresql")


class Resource(Base, UUIDMixin, TimestampMixin):
    """A downloadable or linkable content asset.

    Attributes:
        title: Display title.
        description: Display description.
        type: Resource type (pdf, docx, image, video, ...).
        category: Editorial category.
        file_url: Blob URL or external link (nullable).
        thumbnail_url: Derived video thumbnail (nullable).
        file_size: Uploaded file size in bytes (nullable).
        is_public: Visible on public pages.
        featured: Highlighted on public pages.
        tags: Ordered list of tag strings.
        related_resources: Up to three related resource ids.
        download_count: Monotonic download counter.
        created_by: Identifier of the creating user.
    """

    __tablename__ = "resources"

    title: Mapped[str] = mapped_column(String(500), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    category: Mapped[str] = mapped_column(String(50), nullable=False)
    file_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    thumbnail_url: Mapped[str | None] = mapped_column(String(2000), nullable=True)
    file_size: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    is_public: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    featured: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    tags: Mapped[list] = mapped_column(_JSONType, nullable=False, default=list)
    related_resources: Mapped[list] = mapped_column(_JSONType, nullable=False, default=list)
    download_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_by: Mapped[str] = mapped_column(String(255), nullable=False)

    __table_args__ = (
        CheckConstraint("download_count >= 0", name="ck_resource_download_count"),
        Index("ix_resources_category", "category"),
        Index("ix_resources_type", "type"),
        Index("ix_resources_is_public", "is_public"),
        Index("ix_resources_created_at", "created_at"),
    )
