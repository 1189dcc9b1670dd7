import json
import logging
from typing import Any, Optional, Tuple

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from api.errors import TranscriptAPIError
from config import Settings
from schemas.transcript import TranscriptRequest, TranscriptResponse
from services.segment_normalizer import normalize_segments
from services.text_utils import decode_html_entities
from services.video_id import extract_video_id

router = APIRouter()
logger = logging.getLogger(__name__)

UNKNOWN_IP = "unknown-ip"
UNTITLED_VIDEO = "Untitled Video"

RATE_LIMITED_MESSAGE = "Rate limit exceeded. Please try again in a minute."
MISSING_ID_MESSAGE = "Video ID or URL is required (query param: 'id')"
INVALID_ID_MESSAGE = "Invalid YouTube Video ID or URL format"
NO_TRANSCRIPT_MESSAGE = "No transcript available for this video."

MALFORMED_MESSAGE = "Failed to process data from YouTube. The API response may be malformed or incomplete."
ACCESS_DENIED_MESSAGE = "Video is private, unavailable, a live stream, or a premiere without a processed transcript."
REGION_LOCKED_MESSAGE = "The video is region-locked and unavailable."
TRANSCRIPTS_UNAVAILABLE_MESSAGE = "Transcripts are not available for this video."
GENERIC_FAILURE_MESSAGE = "Failed to fetch transcript."


def classify_fetch_error(error: BaseException) -> Tuple[int, str]:
    """
    Map a failure raised while talking to YouTube onto (status code, message).
    Matching is done on the error text; anything unrecognised is a 500.
    """
    if isinstance(error, json.JSONDecodeError):
        return 500, MALFORMED_MESSAGE

    message = str(error)
    if any(phrase in message for phrase in ("private", "unavailable", "premiere", "live")):
        return 403, ACCESS_DENIED_MESSAGE
    if "region-locked" in message:
        return 451, REGION_LOCKED_MESSAGE
    if "Transcripts are not available for this video" in message:
        return 404, TRANSCRIPTS_UNAVAILABLE_MESSAGE
    return 500, GENERIC_FAILURE_MESSAGE


def get_initial_segments(data: Any) -> Optional[list]:
    """
    Dig transcript.content.body.initial_segments out of the client's payload.
    Returns None when any level is missing; an empty segment list is still a transcript.
    """
    node = data
    for key in ("transcript", "content", "body", "initial_segments"):
        if not isinstance(node, dict):
            return None
        node = node.get(key)
        if node is None or (not node and not isinstance(node, (dict, list))):
            return None
    return node if isinstance(node, list) else None


@router.get("/", response_model=TranscriptResponse)
async def get_transcript(request: Request, id: Optional[str] = None) -> JSONResponse:
    """
    Fetch the caption track of a YouTube video.

    Args:
        id: a YouTube video ID or a youtube.com / youtu.be URL

    Returns:
        TranscriptResponse with the video title and timed caption segments
    """
    settings: Settings = request.app.state.settings
    transcript_request = TranscriptRequest(
        id=id,
        clientIp=request.headers.get(settings.CLIENT_IP_HEADER) or UNKNOWN_IP,
    )

    # Rate limiting happens before anything else touches YouTube
    result = await request.app.state.rate_limiter.limit(transcript_request.clientIp)
    if not result.success:
        logger.info(f"Rate limit exceeded for IP: {transcript_request.clientIp}")
        raise TranscriptAPIError(429, RATE_LIMITED_MESSAGE)

    if not transcript_request.id:
        raise TranscriptAPIError(400, MISSING_ID_MESSAGE)

    video_id = extract_video_id(transcript_request.id)
    if not video_id:
        raise TranscriptAPIError(400, INVALID_ID_MESSAGE)

    try:
        logger.info(f"Fetching transcript for video ID: {video_id}")
        client = await request.app.state.client_factory.create(settings)
        info = await client.get_info(video_id)
        video_title = info.basic_info.title or UNTITLED_VIDEO
        transcript_data = await info.get_transcript()

        raw_segments = get_initial_segments(transcript_data)
        if raw_segments is None:
            logger.warning(f"No transcript available for video: {video_id}")
            raise TranscriptAPIError(404, NO_TRANSCRIPT_MESSAGE, video_title=video_title)

        segments = normalize_segments(raw_segments)
        logger.info(f"Successfully fetched {len(segments)} transcript segments for {video_id}")

        response = TranscriptResponse(
            videoTitle=decode_html_entities(video_title),
            transcript=segments,
        )
        return JSONResponse(content=response.model_dump())

    except TranscriptAPIError:
        raise
    except Exception as e:
        logger.error(f"Error fetching transcript for {video_id}: {e}", exc_info=True)
        status_code, message = classify_fetch_error(e)
        raise TranscriptAPIError(status_code, message, video_id=video_id) from e
