"""Bookmark use cases: create with enrichment, list, read, update, delete.

Creation runs the metadata extractor and the URL classifier concurrently and
merges both into the stored record. Enrichment is advisory: both are total,
so a bookmark is always saved even when neither finds anything.
"""

import asyncio
import logging
from typing import Any, Optional

from app.models.bookmark import (
    Bookmark,
    BookmarkPreview,
    BookmarkUpdate,
    UrlClassification,
    UrlMetadata,
)
from app.services.bookmark_store import BookmarkStore
from app.services.cache import (
    BookmarkCache,
    bookmark_key,
    bookmarks_key,
    get_bookmark_cache,
    user_bookmarks_pattern,
)
from app.services.classifier import UrlClassifier, get_url_classifier
from app.services.exceptions import BookmarkAccessDeniedError, BookmarkNotFoundError
from app.services.metadata_extractor import MetadataExtractor, get_metadata_extractor

logger = logging.getLogger(__name__)

# Singleton state
_service: Optional["BookmarkService"] = None
_lock = asyncio.Lock()


def _classification_fields(classification: UrlClassification) -> dict[str, Any]:
    return {
        "domain": classification.domain,
        "platform": classification.platform,
        "content_type": classification.content_type.value,
    }


class BookmarkService:
    """Coordinates enrichment, storage and caching for bookmarks."""

    def __init__(
        self,
        store: BookmarkStore,
        *,
        classifier: Optional[UrlClassifier] = None,
        metadata_extractor: Optional[MetadataExtractor] = None,
        cache: Optional[BookmarkCache] = None,
    ) -> None:
        self.store = store
        self.classifier = classifier if classifier is not None else get_url_classifier()
        self.metadata_extractor = (
            metadata_extractor if metadata_extractor is not None else get_metadata_extractor()
        )
        self.cache = cache if cache is not None else get_bookmark_cache()

    # ------------------------------------------------------------------
    # Enrichment
    # ------------------------------------------------------------------

    async def enrich(self, url: str) -> tuple[UrlMetadata, UrlClassification]:
        """Scrape and classify ``url`` independently; neither waits on the other."""
        metadata, classification = await asyncio.gather(
            self.metadata_extractor.extract(url),
            self.classifier.classify(url),
        )
        return metadata, classification

    async def preview(self, url: str) -> BookmarkPreview:
        metadata, classification = await self.enrich(url)
        return BookmarkPreview(url=url, classification=classification, metadata=metadata)

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    async def create_bookmark(
        self,
        user_id: str,
        url: str,
        tags: Optional[list[str]] = None,
        *,
        title: Optional[str] = None,
        cover_url: Optional[str] = None,
    ) -> Bookmark:
        """Save ``url`` for ``user_id``; caller-supplied title/cover win over scraped ones."""
        metadata, classification = await self.enrich(url)
        if metadata.is_empty():
            logger.info(f"No metadata found for {url}")

        record = {
            "user_id": user_id,
            "url": url,
            "title": title or metadata.title,
            "cover_url": cover_url or metadata.cover_url,
            "description": metadata.description,
            "tags": tags or [],
            **_classification_fields(classification),
        }
        bookmark = await self.store.insert(record)
        logger.info(
            f"Created bookmark {bookmark.id} for user {user_id}: "
            f"{classification.platform}/{classification.content_type.value}"
        )

        self.cache.delete_pattern(user_bookmarks_pattern(user_id))
        return bookmark

    async def update_bookmark(
        self, user_id: str, bookmark_id: str, update: BookmarkUpdate
    ) -> Bookmark:
        bookmark = await self._get_owned(user_id, bookmark_id)

        changes = update.changes()
        if not changes:
            return bookmark

        updated = await self.store.update(bookmark_id, changes)
        if updated is None:
            raise BookmarkNotFoundError(bookmark_id)

        self._invalidate(user_id, bookmark_id)
        return updated

    async def reclassify_bookmark(self, user_id: str, bookmark_id: str) -> Bookmark:
        """Run a fresh classification on the stored URL and persist it."""
        bookmark = await self._get_owned(user_id, bookmark_id)
        classification = await self.classifier.classify(bookmark.url)

        updated = await self.store.update(
            bookmark_id, _classification_fields(classification)
        )
        if updated is None:
            raise BookmarkNotFoundError(bookmark_id)

        self._invalidate(user_id, bookmark_id)
        return updated

    async def delete_bookmark(self, user_id: str, bookmark_id: str) -> None:
        await self._get_owned(user_id, bookmark_id)
        await self.store.delete(bookmark_id)
        self._invalidate(user_id, bookmark_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    async def list_bookmarks(
        self,
        user_id: str,
        *,
        tags: Optional[list[str]] = None,
        title: Optional[str] = None,
        content_type: Optional[str] = None,
        platform: Optional[str] = None,
    ) -> list[Bookmark]:
        cache_key = bookmarks_key(user_id, title, tags, content_type, platform)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        bookmarks = await self.store.list_for_user(
            user_id,
            tags=tags,
            title=title,
            content_type=content_type,
            platform=platform,
        )
        self.cache.set(cache_key, bookmarks)
        return bookmarks

    async def get_bookmark(self, user_id: str, bookmark_id: str) -> Bookmark:
        cache_key = bookmark_key(user_id, bookmark_id)
        cached = self.cache.get(cache_key)
        if cached is not None:
            return cached

        bookmark = await self._get_owned(user_id, bookmark_id)
        self.cache.set(cache_key, bookmark)
        return bookmark

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    async def _get_owned(self, user_id: str, bookmark_id: str) -> Bookmark:
        bookmark = await self.store.get(bookmark_id)
        if bookmark is None:
            raise BookmarkNotFoundError(bookmark_id)
        if bookmark.user_id != user_id:
            raise BookmarkAccessDeniedError(bookmark_id)
        return bookmark

    def _invalidate(self, user_id: str, bookmark_id: str) -> None:
        self.cache.delete_pattern(user_bookmarks_pattern(user_id))
        self.cache.delete(bookmark_key(user_id, bookmark_id))


# =====================================================================
# Singleton factory (thread-safe via asyncio.Lock)
# =====================================================================


async def get_bookmark_service() -> BookmarkService:
    """Get or create the singleton ``BookmarkService``."""
    global _service
    if _service is not None:
        return _service

    async with _lock:
        # Double-checked locking
        if _service is not None:
            return _service

        from app.db.supabase import get_async_supabase_client_async

        supabase = await get_async_supabase_client_async()
        _service = BookmarkService(BookmarkStore(supabase))

    return _service


def reset_bookmark_service() -> None:
    """Reset service for testing."""
    global _service
    _service = None
