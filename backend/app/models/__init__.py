from app.models.bookmark import (
    ApiResponse,
    Bookmark,
    BookmarkCreate,
    BookmarkPreview,
    BookmarkUpdate,
    ContentType,
    PlatformInfo,
    UrlClassification,
    UrlMetadata,
)

__all__ = [
    # Enrichment results
    "ContentType",
    "PlatformInfo",
    "UrlClassification",
    "UrlMetadata",
    # Bookmark records and payloads
    "ApiResponse",
    "Bookmark",
    "BookmarkCreate",
    "BookmarkPreview",
    "BookmarkUpdate",
]
