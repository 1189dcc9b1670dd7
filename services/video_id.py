import logging
from typing import Optional
from urllib.parse import urlparse, parse_qs

logger = logging.getLogger(__name__)

YOUTUBE_HOSTS = ("youtube.com", "www.youtube.com")


def extract_video_id(url_or_id: Optional[str]) -> Optional[str]:
    """
    Extract the YouTube video ID from a bare ID or a URL.

    Supported shapes:
        dQw4w9WgXcQ
        https://youtu.be/<id>
        https://www.youtube.com/watch?v=<id>
        https://www.youtube.com/embed/<id>
        https://www.youtube.com/shorts/<id>

    Returns None when no ID can be found.
    """
    if not url_or_id:
        return None

    if len(url_or_id) == 11 and "/" not in url_or_id and "?" not in url_or_id:
        return url_or_id

    try:
        parsed = urlparse(url_or_id)
        hostname = parsed.hostname
    except ValueError as e:
        logger.warning(f"Invalid URL or ID format: {url_or_id!r} ({e})")
        return None

    if not parsed.scheme or not hostname:
        logger.warning(f"Invalid URL or ID format: {url_or_id!r}")
        return None

    video_id = None
    path = parsed.path
    if hostname == "youtu.be":
        video_id = path[1:]
    elif hostname in YOUTUBE_HOSTS:
        if path == "/watch":
            video_id = parse_qs(parsed.query).get("v", [None])[0]
        elif path.startswith("/embed/"):
            video_id = path[len("/embed/"):]
        elif path.startswith("/shorts/"):
            video_id = path[len("/shorts/"):]

    return video_id or None
