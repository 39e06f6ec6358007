"""Application configuration via environment variables."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )

    # API Server
    api_host: str = Field(default="0.0.0.0", description="API server host")
    api_port: int = Field(default=8000, description="API server port")
    api_reload: bool = Field(default=False, description="Enable auto-reload for development")

    # Storage
    working_dir: Path = Field(
        default=Path("./uploads"),
        description="Shared directory for uploaded, fetched, extracted and archived assets",
    )
    max_upload_bytes: int = Field(
        default=100 * 1024 * 1024,
        description="Maximum size of an uploaded audio file in bytes",
    )

    # Repository
    repository_backend: Literal["memory", "sql"] = Field(
        default="memory",
        description="Entity repository backend (memory, sql)",
    )
    database_url: str = Field(
        default="sqlite:///./audio_clipper.db",
        description="SQLAlchemy connection string (repository_backend=sql)",
    )

    # Providers
    media_fetcher: str = Field(
        default="ytdlp",
        description="Source media fetcher (ytdlp, stub)",
    )
    segment_extractor: str = Field(
        default="ffmpeg",
        description="Segment extractor (ffmpeg, stub)",
    )
    remote_storage_provider: str = Field(
        default="google_drive",
        description="Remote storage provider for clip uploads (google_drive, stub)",
    )

    # FFmpeg
    ffmpeg_path: str = Field(default="ffmpeg", description="Path to the ffmpeg binary")
    ffprobe_path: str = Field(default="ffprobe", description="Path to the ffprobe binary")
    audio_bitrate: str = Field(default="192k", description="Bitrate of extracted mp3 clips")

    # yt-dlp
    ytdlp_player_clients: list[str] = Field(
        default_factory=lambda: ["default", "android", "ios", "tv"],
        description="Player clients tried in order when fetching source audio",
    )

    # Remote upload authorization
    handshake_ttl_seconds: int = Field(
        default=600,
        description="Lifetime of an authorization handshake before it is purged",
    )
    handshake_sweep_interval_seconds: int = Field(
        default=60,
        description="Interval between expired handshake sweeps",
    )

    # Google Drive OAuth
    google_client_id: str | None = Field(default=None, description="Google OAuth client ID")
    google_client_secret: str | None = Field(
        default=None, description="Google OAuth client secret"
    )
    google_redirect_uri: str = Field(
        default="http://localhost:8000/api/v1/remote-storage/callback",
        description="Google OAuth redirect URI",
    )


@lru_cache
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()


# Convenience alias
settings = get_settings()
