"""External link helpers: YouTube id extraction, thumbnails, platform detection."""

import re
from urllib.parse import urlparse

from content_api.lib.resources.types import ResourceType

_YOUTUBE_ID_PATTERN = re.compile(r"^.*(youtu\.be/|v/|u/\w/|embed/|watch\?v=|&v=)([^#&?]*).*")
_YOUTUBE_ID_LENGTH = 11
_THUMBNAIL_TEMPLATE = "https://img.youtube.com/vi/{video_id}/maxresdefault.jpg"

# Only full youtube.com links trigger thumbnail derivation; youtu.be short links do not.
_THUMBNAIL_TRIGGER = "youtube.com"

_YOUTUBE_DOMAINS = {"youtube.com", "www.youtube.com", "youtu.be", "m.youtube.com"}
_VIMEO_DOMAINS = {"vimeo.com", "www.vimeo.com", "player.vimeo.com"}


def extract_video_id(url: str) -> str | None:
    """Extract the 11-character YouTube video id from a link.

    Recognizes ``watch?v=``, ``youtu.be/``, ``embed/``, ``v/``, ``u/<w>/``
    and trailing ``&v=`` shapes.

    Args:
        url: The link to inspect.

    Returns:
        The video id, or None if the link is not a recognized shape.
    """
    match = _YOUTUBE_ID_PATTERN.match(url)
    if match is None:
        return None
    video_id = match.group(2)
    return video_id if len(video_id) == _YOUTUBE_ID_LENGTH else None


def derive_thumbnail(video_id: str) -> str:
    """Return the max-resolution YouTube thumbnail URL for a video id."""
    return _THUMBNAIL_TEMPLATE.format(video_id=video_id)


def should_derive_thumbnail(resource_type: ResourceType | str, url: str | None) -> bool:
    """Whether a link qualifies for thumbnail derivation."""
    if resource_type != ResourceType.VIDEO or not url:
        return False
    return _THUMBNAIL_TRIGGER in url


def resolve_thumbnail(resource_type: ResourceType | str, url: str | None) -> str | None:
    """Derive a thumbnail URL for a video link, or None if not applicable."""
    if url is None or not should_derive_thumbnail(resource_type, url):
        return None
    video_id = extract_video_id(url)
    if video_id is None:
        return None
    return derive_thumbnail(video_id)


def detect_video_platform(url: str) -> str | None:
    """Detect the video platform from a URL.

    Args:
        url: The video URL to check.

    Returns:
        "youtube" or "vimeo" if recognized, None otherwise.
    """
    try:
        hostname = (urlparse(url).hostname or "").lower()
    except ValueError:
        return None

    if hostname in _YOUTUBE_DOMAINS:
        return "youtube"
    if hostname in _VIMEO_DOMAINS:
        return "vimeo"
    return None


def is_external_video_link(url: str) -> bool:
    """Return True if the URL points at a hosted video platform rather than a stored blob."""
    return detect_video_platform(url) is not None
