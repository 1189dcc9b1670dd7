import os
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient

# No cookies or .env overrides in tests
os.environ["YOUTUBE_COOKIES_BASE64"] = ""

from config import Settings
from main import create_app
from services.rate_limiter import RateLimitResult


class StubRateLimiter:
    """Rate limiter that always answers the same way and records the keys it saw."""

    def __init__(self, success=True):
        self.success = success
        self.keys = []

    async def limit(self, key):
        self.keys.append(key)
        return RateLimitResult(success=self.success)


class StubVideoInfo:
    def __init__(self, title, transcript=None, error=None):
        self.basic_info = SimpleNamespace(title=title)
        self._transcript = transcript
        self._error = error

    async def get_transcript(self):
        if self._error is not None:
            raise self._error
        return self._transcript


class StubClient:
    def __init__(self, info=None, error=None):
        self.info = info
        self.error = error
        self.requested_ids = []

    async def get_info(self, video_id):
        self.requested_ids.append(video_id)
        if self.error is not None:
            raise self.error
        return self.info


class StubClientFactory:
    """Stands in for YouTubeClient: `await create(settings)` hands back a prepared client."""

    def __init__(self, client=None):
        self.client = client or StubClient()
        self.create_calls = 0

    async def create(self, config):
        self.create_calls += 1
        return self.client


def make_container(segments):
    return {"transcript": {"content": {"body": {"initial_segments": segments}}}}


def tsr_segment(text, start_ms, end_ms):
    return {
        "transcript_segment_renderer": {
            "snippet": {"text": text},
            "start_ms": start_ms,
            "end_ms": end_ms,
        }
    }


@pytest.fixture
def rate_limiter():
    return StubRateLimiter()


@pytest.fixture
def client_factory():
    return StubClientFactory()


@pytest.fixture
def api_client(rate_limiter, client_factory):
    """TestClient over an app wired to the stub limiter and stub YouTube client."""
    app = create_app(
        settings=Settings(),
        rate_limiter=rate_limiter,
        client_factory=client_factory,
    )
    return TestClient(app)
