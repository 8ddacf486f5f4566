"""
Shared configuration management for TextTube services.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="TEXTTUBE_",
        env_file=".env",
        case_sensitive=False,
        extra="allow"
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Storage
    postgres_dsn: str = Field(default="postgres://localhost:5432/text_tube")

    # Internal services
    auth_service_url: str = Field(default="http://localhost:8010")
    video_service_url: str = Field(default="http://localhost:8020")
    downstream_timeout_seconds: float = Field(default=10.0)

    # Token signing. Changing jwt_secret invalidates every outstanding token.
    jwt_secret: str = Field(default="your-secret-key-change-in-production")
    jwt_algorithm: str = Field(default="HS256")
    token_ttl_hours: int = Field(default=24)
    bcrypt_rounds: int = Field(default=10)

    # Upstream video provider
    youtube_api_key: str = Field(default="")
    youtube_api_url: str = Field(default="https://www.googleapis.com/youtube/v3")
    youtube_oauth_token: Optional[str] = Field(default=None)
    transcript_page_url: str = Field(default="https://youtubetotranscript.com/transcript")
    transcript_source: str = Field(default="scrape")
    upstream_timeout_seconds: float = Field(default=15.0)

    # Read-through cache
    cache_max_age_minutes: int = Field(default=30)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
