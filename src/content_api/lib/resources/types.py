"""Resource enumerations and upload value types."""

import enum
from dataclasses import dataclass


class ResourceType(enum.StrEnum):
    """Kind of asset a resource represents; selects validation rule and bucket."""

    PDF = "pdf"
    DOCX = "docx"
    IMAGE = "image"
    VIDEO = "video"
    AUDIO = "audio"
    ARTICLE = "article"
    WHITEPAPER = "whitepaper"
    TEMPLATE = "template"
    TOOLKIT = "toolkit"
    OTHER = "other"


class ResourceCategory(enum.StrEnum):
    """Editorial category shown on the public content pages."""

    LEADERSHIP = "leadership"
    TEAM_BUILDING = "team-building"
    COMMUNICATION = "communication"
    STRATEGY = "strategy"
    MANAGEMENT = "management"
    PRODUCTIVITY = "productivity"
    INNOVATION = "innovation"
    CULTURE = "culture"
    VIDEOS = "videos"
    ARTICLES = "articles"
    PDFS = "pdfs"
    WHITEPAPERS = "whitepapers"
    OTHER = "other"


@dataclass(frozen=True)
class UploadedFile:
    """An uploaded file as received from the caller.

    Attributes:
        filename: Original client-side filename.
        content: Raw file bytes.
        content_type: MIME type reported by the client.
    """

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @property
    def size(self) -> int:
        return len(self.content)
