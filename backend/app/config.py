"""Application configuration using pydantic-settings."""

from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Supabase (bookmark storage + auth tokens)
    supabase_url: Optional[str] = None
    supabase_key: Optional[str] = None
    supabase_service_key: Optional[str] = None
    # HS256 secret for legacy tokens; falls back to supabase_key when unset
    supabase_jwt_secret: Optional[str] = None

    # YouTube Data API (optional - only used to tell music videos apart)
    youtube_api_key: Optional[str] = None
    youtube_api_base_url: str = "https://www.googleapis.com/youtube/v3/videos"
    youtube_api_timeout: float = 3.0

    # Page metadata scraping
    metadata_fetch_timeout: float = 15.0
    metadata_max_bytes: int = 2_000_000
    metadata_user_agent: str = "Mozilla/5.0 (compatible; BookmarkBot/1.0)"

    # Bookmark cache
    bookmark_cache_ttl: int = 900  # 15 minutes

    # CORS
    cors_origins: str = "http://localhost:3000"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


_settings: Settings | None = None


def get_settings() -> Settings:
    """Get cached settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings


def reset_settings() -> None:
    """Reset settings for testing."""
    global _settings
    _settings = None
