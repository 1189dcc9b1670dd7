# services/youtube_client.py
"""
YouTube client built on yt-dlp.

Mirrors the small surface the transcript route needs:

    client = await YouTubeClient.create(settings)
    info = await client.get_info(video_id)
    info.basic_info.title
    data = await info.get_transcript()

get_transcript() returns the caption events wrapped in the container shape
{"transcript": {"content": {"body": {"initial_segments": [...]}}}}, with each
event turned into a generic raw segment ({runs, start_ms, duration_ms}).
"""
import base64
import logging
import os
import tempfile
from typing import Any, Callable, Dict, List, Optional

import httpx
import yt_dlp
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from config import Settings

logger = logging.getLogger(__name__)

# Cookie jar files already written, keyed by their base64 source
_cookie_files: Dict[str, str] = {}


class YouTubeClientError(Exception):
    """Raised when yt-dlp cannot resolve a video."""


class TranscriptsUnavailableError(YouTubeClientError):
    """Raised when a video has no caption track in the configured language."""


class BasicInfo(BaseModel):
    id: str
    title: Optional[str] = None


def get_cookie_file_path(cookies_b64: str) -> Optional[str]:
    """
    Materialize a base64 Netscape cookie jar as a file yt-dlp can read.

    One file is written per distinct value and reused afterwards. An empty
    value means no cookies; an undecodable one is logged and ignored.
    """
    if not cookies_b64:
        return None

    cached = _cookie_files.get(cookies_b64)
    if cached and os.path.exists(cached):
        return cached

    try:
        jar = base64.b64decode(cookies_b64).decode("utf-8")
    except (ValueError, UnicodeDecodeError) as e:
        logger.error(f"YOUTUBE_COOKIES_BASE64 is not a valid base64 cookie jar: {e}")
        return None

    fd, path = tempfile.mkstemp(suffix=".txt", prefix="yt_cookies_")
    with os.fdopen(fd, "w") as f:
        f.write(jar)

    _cookie_files[cookies_b64] = path
    logger.info(f"Wrote YouTube cookie jar to {path}")
    return path


def _translate_download_error(video_id: str, error: Exception) -> YouTubeClientError:
    cause = getattr(error, "exc_info", None)
    cause = cause[1] if cause else error
    message = str(error)

    if isinstance(cause, yt_dlp.utils.GeoRestrictedError):
        return YouTubeClientError(f"Video {video_id} is region-locked: {message}")
    if "Private video" in message:
        return YouTubeClientError(f"Video {video_id} is private: {message}")
    return YouTubeClientError(message)


def events_to_segments(events: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Convert json3 caption events into generic raw segments."""
    segments = []
    for event in events:
        segs = event.get("segs")
        if not segs:
            continue
        runs = [{"text": seg.get("utf8", "")} for seg in segs]
        # Auto-generated tracks interleave newline-only "append" events
        if not "".join(run["text"] for run in runs).strip():
            continue
        segment: Dict[str, Any] = {
            "runs": runs,
            "start_ms": str(event.get("tStartMs", 0)),
        }
        if "dDurationMs" in event:
            segment["duration_ms"] = str(event["dDurationMs"])
        segments.append(segment)
    return segments


class VideoInfo:
    """Metadata for one video, plus lazy access to its caption track."""

    def __init__(self, client: "YouTubeClient", info: Dict[str, Any]):
        self._client = client
        self._info = info
        self.basic_info = BasicInfo(id=info.get("id", ""), title=info.get("title"))

    def find_caption_track(self) -> Optional[Dict[str, Any]]:
        language = self._client.language

        # First try uploaded subtitles, then auto-generated captions
        tracks = None
        if language in (self._info.get("subtitles") or {}):
            tracks = self._info["subtitles"][language]
            logger.info("Found regular subtitles")
        elif language in (self._info.get("automatic_captions") or {}):
            tracks = self._info["automatic_captions"][language]
            logger.info("Found auto-generated captions")

        if not tracks:
            return None

        for track in tracks:
            if track.get("ext") == self._client.caption_format:
                return track
        return tracks[0]

    async def get_transcript(self) -> Dict[str, Any]:
        track = self.find_caption_track()
        if track is None or not track.get("url"):
            raise TranscriptsUnavailableError("Transcripts are not available for this video")

        payload = await self._client.download_json(track["url"])
        events = payload.get("events") if isinstance(payload, dict) else None

        return {
            "transcript": {
                "content": {
                    "body": {
                        "initial_segments": events_to_segments(events or []),
                    }
                }
            }
        }


class YouTubeClient:
    def __init__(
        self,
        ydl_opts: Dict[str, Any],
        language: str = "en",
        caption_format: str = "json3",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        ydl_factory: Callable[..., Any] = yt_dlp.YoutubeDL,
    ):
        self.ydl_opts = ydl_opts
        self.language = language
        self.caption_format = caption_format
        self.timeout = timeout
        self._transport = transport
        self._ydl_factory = ydl_factory

    @classmethod
    async def create(cls, config: Settings, **kwargs: Any) -> "YouTubeClient":
        ydl_opts: Dict[str, Any] = {
            "quiet": True,
            "no_warnings": True,
            "skip_download": True,
        }

        cookie_file = get_cookie_file_path(config.YOUTUBE_COOKIES_BASE64)
        if cookie_file:
            ydl_opts["cookiefile"] = cookie_file

        return cls(
            ydl_opts,
            language=config.CAPTION_LANGUAGE,
            caption_format=config.CAPTION_FORMAT,
            timeout=config.HTTP_TIMEOUT_SECONDS,
            **kwargs,
        )

    def _extract_info(self, video_id: str) -> Dict[str, Any]:
        url = f"https://www.youtube.com/watch?v={video_id}"
        with self._ydl_factory(self.ydl_opts) as ydl:
            try:
                return ydl.extract_info(url, download=False)
            except yt_dlp.utils.DownloadError as e:
                raise _translate_download_error(video_id, e) from e

    async def get_info(self, video_id: str) -> VideoInfo:
        # yt-dlp is blocking; keep it off the event loop
        info = await run_in_threadpool(self._extract_info, video_id)
        logger.info(f"Video title: {info.get('title', 'Unknown')}")
        return VideoInfo(self, info)

    async def download_json(self, url: str) -> Any:
        """Fetch a caption payload. A malformed body raises json.JSONDecodeError."""
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as http:
            response = await http.get(url)
            response.raise_for_status()
            return response.json()
