from typing import List
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Netscape cookie jar for yt-dlp, base64 encoded; empty runs anonymously
    YOUTUBE_COOKIES_BASE64: str = ""

    # Caption track selection
    CAPTION_LANGUAGE: str = "en"
    CAPTION_FORMAT: str = "json3"
    HTTP_TIMEOUT_SECONDS: float = 30.0

    # Per-IP admission control (requests per rolling window)
    RATE_LIMIT_REQUESTS: int = 10
    RATE_LIMIT_PERIOD_SECONDS: float = 60.0
    CLIENT_IP_HEADER: str = "cf-connecting-ip"

    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    class Config:
        env_file = ".env"


settings = Settings()
