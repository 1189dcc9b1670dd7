from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from schemas.transcript import ErrorResponse


class TranscriptAPIError(Exception):
    """An error that maps onto a JSON error body: {error, videoId?, videoTitle?}."""

    def __init__(
        self,
        status_code: int,
        error: str,
        video_id: Optional[str] = None,
        video_title: Optional[str] = None,
    ):
        super().__init__(error)
        self.status_code = status_code
        self.error = error
        self.video_id = video_id
        self.video_title = video_title

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(error=self.error, videoId=self.video_id, videoTitle=self.video_title)


async def transcript_api_error_handler(request: Request, exc: TranscriptAPIError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_response().model_dump(exclude_none=True),
    )
