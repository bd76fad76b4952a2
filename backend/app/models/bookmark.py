"""Bookmark data models: classification, scraped metadata, API payloads."""

from datetime import datetime
from enum import Enum
from typing import Any, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.services.url_utils import is_http_url, normalize_incoming_url, sanitize_text

T = TypeVar("T")


class ContentType(str, Enum):
    """Coarse category of bookmarked content."""

    ARTICLE = "article"
    MUSIC = "music"
    VIDEO = "video"
    DOCUMENT = "document"
    PODCAST = "podcast"
    SOCIAL = "social"
    OTHER = "other"


# =============================================================================
# Enrichment results
# =============================================================================


class UrlClassification(BaseModel):
    """Result of classifying a bookmark URL. Always fully populated."""

    model_config = ConfigDict(frozen=True)

    domain: str = Field("", description="Normalized hostname, empty if unparseable")
    platform: str = Field("unknown", description="Platform slug")
    content_type: ContentType = Field(
        ContentType.ARTICLE, description="Coarse content category"
    )

    @classmethod
    def fallback(cls) -> "UrlClassification":
        """Classification returned for any URL that cannot be parsed."""
        return cls(domain="", platform="unknown", content_type=ContentType.ARTICLE)


class UrlMetadata(BaseModel):
    """Best-effort scraped page metadata. Absent fields were not found."""

    model_config = ConfigDict(frozen=True)

    title: Optional[str] = None
    cover_url: Optional[str] = None
    description: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.title or self.cover_url or self.description)


class PlatformInfo(BaseModel):
    """Display information for a platform slug."""

    slug: str
    label: str
    domains: list[str] = Field(default_factory=list)
    content_type: Optional[ContentType] = None


# =============================================================================
# Bookmark records
# =============================================================================


def _clean_tags(tags: Optional[list[str]]) -> Optional[list[str]]:
    if tags is None:
        return None
    cleaned = [sanitize_text(t) for t in tags]
    return [t for t in cleaned if t]


def _check_cover_url(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    value = value.strip()
    if not is_http_url(value):
        raise ValueError("Invalid cover URL")
    return value


class BookmarkCreate(BaseModel):
    """Request to save a new bookmark."""

    url: str = Field(..., min_length=1, description="http(s) URL to bookmark")
    tags: list[str] = Field(default_factory=list)
    title: Optional[str] = Field(None, description="Overrides the scraped title")
    cover_url: Optional[str] = Field(None, description="Overrides the scraped image")

    @field_validator("url")
    @classmethod
    def _validate_url(cls, value: str) -> str:
        url = normalize_incoming_url(value)
        if not url:
            raise ValueError("Missing url")
        if not is_http_url(url):
            raise ValueError("URL must start with http:// or https://")
        return url

    @field_validator("cover_url")
    @classmethod
    def _validate_cover_url(cls, value: Optional[str]) -> Optional[str]:
        return _check_cover_url(value)

    @field_validator("title")
    @classmethod
    def _clean_title(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return sanitize_text(value) or None

    @field_validator("tags")
    @classmethod
    def _clean_tag_list(cls, value: list[str]) -> list[str]:
        return _clean_tags(value) or []


class BookmarkUpdate(BaseModel):
    """Partial update; only provided fields are changed."""

    title: Optional[str] = None
    cover_url: Optional[str] = None
    tags: Optional[list[str]] = None

    @field_validator("title")
    @classmethod
    def _clean_title(cls, value: Optional[str]) -> Optional[str]:
        return sanitize_text(value) if value is not None else None

    @field_validator("cover_url")
    @classmethod
    def _validate_cover_url(cls, value: Optional[str]) -> Optional[str]:
        return _check_cover_url(value)

    @field_validator("tags")
    @classmethod
    def _clean_tag_list(cls, value: Optional[list[str]]) -> Optional[list[str]]:
        return _clean_tags(value)

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class Bookmark(BaseModel):
    """Stored bookmark record."""

    id: str
    user_id: str
    url: str
    title: Optional[str] = None
    cover_url: Optional[str] = None
    description: Optional[str] = None
    domain: str = ""
    platform: str = "unknown"
    content_type: ContentType = ContentType.ARTICLE
    tags: list[str] = Field(default_factory=list)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class BookmarkPreview(BaseModel):
    """Enrichment for a URL without saving it."""

    url: str
    classification: UrlClassification
    metadata: UrlMetadata


class ApiResponse(BaseModel, Generic[T]):
    """Response envelope shared by the bookmark endpoints."""

    success: bool = True
    message: str
    data: Optional[T] = None
