from typing import Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn
from api.errors import TranscriptAPIError, transcript_api_error_handler
from api.routes.transcript import router as transcript_router
from config import Settings, settings as default_settings
from services.rate_limiter import RateLimiter, SlidingWindowRateLimiter
from services.youtube_client import YouTubeClient
import logging

logging.basicConfig(level=default_settings.LOG_LEVEL)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    rate_limiter: Optional[RateLimiter] = None,
    client_factory: Optional[Any] = None,
) -> FastAPI:
    """
    Build the API with its collaborators.

    rate_limiter: anything with `async limit(key) -> {success}`; defaults to an in-memory sliding window
    client_factory: anything with `async create(settings) -> client`; defaults to the yt-dlp client
    """
    settings = settings or default_settings

    app = FastAPI(
        title="YouTube Captions API",
        version="1.0.0",
    )

    app.state.settings = settings
    app.state.rate_limiter = rate_limiter or SlidingWindowRateLimiter(
        settings.RATE_LIMIT_REQUESTS,
        settings.RATE_LIMIT_PERIOD_SECONDS,
    )
    app.state.client_factory = client_factory or YouTubeClient

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(TranscriptAPIError, transcript_api_error_handler)

    app.include_router(
        transcript_router,
        tags=["transcript"],
    )

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "healthy"}

    return app


app = create_app()


def run():
    uvicorn.run("main:app", host="127.0.0.1", port=8000, reload=True, env_file='.env')
