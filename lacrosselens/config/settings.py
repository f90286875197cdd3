"""Application settings using Pydantic BaseSettings."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Anthropic API
    anthropic_api_key: str = ""
    claude_model: str = "claude-sonnet-4-20250514"
    claude_max_tokens: int = 8192

    # YouTube Data API (optional, oEmbed is used without it)
    youtube_api_key: str = ""

    # Database
    database_url: str = "sqlite:///data/lacrosselens.db"

    # File storage
    upload_dir: str = "uploads/videos"
    thumbnail_dir: str = "uploads/thumbnails"
    max_upload_bytes: int = 2 * 1024 * 1024 * 1024
    allowed_video_types: list[str] = [
        "video/mp4",
        "video/mov",
        "video/avi",
        "video/quicktime",
    ]

    # Auth
    secret_key: str = "change-me-in-production"
    access_token_expire_hours: int = 24

    # Background processing
    processing_timeout_seconds: int = 300
    watchdog_interval_seconds: int = 30
    max_processing_retries: int = 1

    # Analysis
    max_caption_chars: int = 20000
    multi_pass_enabled: bool = True
    frame_sample_count: int = 16
    max_detail_segments: int = 10
    min_analysis_confidence: int = 30
    analysis_modules: list[str] = [
        "player",
        "tactical",
        "statistical",
        "transition",
        "faceoff",
    ]

    # Server
    log_level: str = "INFO"
    cors_origins: list[str] = ["*"]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
