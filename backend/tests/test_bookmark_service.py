"""Tests for app.services.bookmark_service."""

import asyncio
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.models.bookmark import (
    Bookmark,
    BookmarkUpdate,
    ContentType,
    UrlClassification,
    UrlMetadata,
)
from app.services.bookmark_service import BookmarkService
from app.services.cache import BookmarkCache, bookmark_key, bookmarks_key
from app.services.exceptions import BookmarkAccessDeniedError, BookmarkNotFoundError

USER_ID = "user-1"
OTHER_USER_ID = "user-2"
URL = "https://www.youtube.com/watch?v=dQw4w9WgXcQ"

CLASSIFICATION = UrlClassification(
    domain="youtube.com", platform="youtube", content_type=ContentType.MUSIC
)
METADATA = UrlMetadata(
    title="Scraped title",
    cover_url="https://i.ytimg.com/vi/dQw4w9WgXcQ/hq.jpg",
    description="A video",
)


def _bookmark(**overrides) -> Bookmark:
    data = {
        "id": "bm-1",
        "user_id": USER_ID,
        "url": URL,
        "title": "Scraped title",
        "domain": "youtube.com",
        "platform": "youtube",
        "content_type": "music",
        "tags": ["fun"],
        "created_at": datetime(2024, 1, 1, tzinfo=timezone.utc),
    }
    data.update(overrides)
    return Bookmark.model_validate(data)


@pytest.fixture
def store():
    mock = MagicMock()
    mock.insert = AsyncMock(side_effect=lambda record: _bookmark(**record, id="bm-new"))
    mock.get = AsyncMock(return_value=_bookmark())
    mock.list_for_user = AsyncMock(return_value=[_bookmark()])
    mock.update = AsyncMock(
        side_effect=lambda bookmark_id, changes: _bookmark(**changes)
    )
    mock.delete = AsyncMock(return_value=None)
    return mock


@pytest.fixture
def classifier():
    mock = MagicMock()
    mock.classify = AsyncMock(return_value=CLASSIFICATION)
    return mock


@pytest.fixture
def extractor():
    mock = MagicMock()
    mock.extract = AsyncMock(return_value=METADATA)
    return mock


@pytest.fixture
def cache():
    return BookmarkCache()


@pytest.fixture
def service(store, classifier, extractor, cache):
    return BookmarkService(
        store, classifier=classifier, metadata_extractor=extractor, cache=cache
    )


@pytest.mark.asyncio
class TestCreateBookmark:
    async def test_merges_metadata_and_classification(self, service, store):
        bookmark = await service.create_bookmark(USER_ID, URL, ["fun"])

        record = store.insert.await_args.args[0]
        assert record == {
            "user_id": USER_ID,
            "url": URL,
            "title": "Scraped title",
            "cover_url": METADATA.cover_url,
            "description": "A video",
            "tags": ["fun"],
            "domain": "youtube.com",
            "platform": "youtube",
            "content_type": "music",
        }
        assert bookmark.id == "bm-new"
        assert bookmark.content_type == ContentType.MUSIC

    async def test_provided_title_and_cover_win(self, service, store):
        await service.create_bookmark(
            USER_ID, URL, title="Mine", cover_url="https://example.com/c.png"
        )
        record = store.insert.await_args.args[0]
        assert record["title"] == "Mine"
        assert record["cover_url"] == "https://example.com/c.png"
        assert record["tags"] == []

    async def test_saved_without_metadata(self, service, store, extractor):
        extractor.extract.return_value = UrlMetadata()
        await service.create_bookmark(USER_ID, URL)
        record = store.insert.await_args.args[0]
        assert record["title"] is None
        assert record["cover_url"] is None
        assert record["platform"] == "youtube"

    async def test_enrichment_runs_concurrently(self, service, classifier, extractor):
        extract_started = asyncio.Event()
        classify_started = asyncio.Event()

        async def extract(url):
            extract_started.set()
            await asyncio.wait_for(classify_started.wait(), timeout=1)
            return METADATA

        async def classify(url):
            classify_started.set()
            await asyncio.wait_for(extract_started.wait(), timeout=1)
            return CLASSIFICATION

        extractor.extract.side_effect = extract
        classifier.classify.side_effect = classify

        metadata, classification = await service.enrich(URL)
        assert metadata == METADATA
        assert classification == CLASSIFICATION

    async def test_invalidates_cached_lists(self, service, cache):
        cache.set(bookmarks_key(USER_ID), ["stale"])
        cache.set(bookmarks_key(USER_ID, platform="youtube"), ["stale"])
        cache.set(bookmarks_key(OTHER_USER_ID), ["theirs"])

        await service.create_bookmark(USER_ID, URL)

        assert cache.get(bookmarks_key(USER_ID)) is None
        assert cache.get(bookmarks_key(USER_ID, platform="youtube")) is None
        assert cache.get(bookmarks_key(OTHER_USER_ID)) == ["theirs"]

    async def test_store_failure_propagates(self, service, store):
        store.insert.side_effect = RuntimeError("db down")
        with pytest.raises(RuntimeError):
            await service.create_bookmark(USER_ID, URL)


@pytest.mark.asyncio
class TestPreview:
    async def test_preview_does_not_store(self, service, store):
        preview = await service.preview(URL)
        assert preview.url == URL
        assert preview.classification == CLASSIFICATION
        assert preview.metadata == METADATA
        store.insert.assert_not_awaited()


@pytest.mark.asyncio
class TestQueries:
    async def test_list_is_cached(self, service, store):
        first = await service.list_bookmarks(USER_ID, tags=["fun"])
        second = await service.list_bookmarks(USER_ID, tags=["fun"])

        assert first == second
        store.list_for_user.assert_awaited_once_with(
            USER_ID, tags=["fun"], title=None, content_type=None, platform=None
        )

    async def test_uses_injected_cache(self, service, cache):
        bookmarks = await service.list_bookmarks(USER_ID)
        assert cache.get(bookmarks_key(USER_ID)) == bookmarks

    async def test_different_filters_query_separately(self, service, store):
        await service.list_bookmarks(USER_ID)
        await service.list_bookmarks(USER_ID, content_type="video")
        assert store.list_for_user.await_count == 2

    async def test_get_bookmark(self, service, store, cache):
        bookmark = await service.get_bookmark(USER_ID, "bm-1")
        assert bookmark.id == "bm-1"
        assert cache.get(bookmark_key(USER_ID, "bm-1")) == bookmark

        await service.get_bookmark(USER_ID, "bm-1")
        store.get.assert_awaited_once()

    async def test_get_missing(self, service, store):
        store.get.return_value = None
        with pytest.raises(BookmarkNotFoundError):
            await service.get_bookmark(USER_ID, "bm-404")

    async def test_get_other_users_bookmark(self, service):
        with pytest.raises(BookmarkAccessDeniedError):
            await service.get_bookmark(OTHER_USER_ID, "bm-1")


@pytest.mark.asyncio
class TestUpdateBookmark:
    async def test_applies_changes(self, service, store, cache):
        cache.set(bookmark_key(USER_ID, "bm-1"), _bookmark())
        cache.set(bookmarks_key(USER_ID), [_bookmark()])

        updated = await service.update_bookmark(
            USER_ID, "bm-1", BookmarkUpdate(tags=["a", "b"])
        )

        store.update.assert_awaited_once_with("bm-1", {"tags": ["a", "b"]})
        assert updated.tags == ["a", "b"]
        assert cache.get(bookmark_key(USER_ID, "bm-1")) is None
        assert cache.get(bookmarks_key(USER_ID)) is None

    async def test_no_changes_returns_existing(self, service, store):
        bookmark = await service.update_bookmark(USER_ID, "bm-1", BookmarkUpdate())
        assert bookmark.id == "bm-1"
        store.update.assert_not_awaited()

    async def test_other_user_denied(self, service, store):
        with pytest.raises(BookmarkAccessDeniedError):
            await service.update_bookmark(
                OTHER_USER_ID, "bm-1", BookmarkUpdate(title="x")
            )
        store.update.assert_not_awaited()

    async def test_row_vanished(self, service, store):
        store.update.side_effect = None
        store.update.return_value = None
        with pytest.raises(BookmarkNotFoundError):
            await service.update_bookmark(USER_ID, "bm-1", BookmarkUpdate(title="x"))


@pytest.mark.asyncio
class TestReclassifyBookmark:
    async def test_persists_fresh_classification(self, service, store, classifier):
        store.get.return_value = _bookmark(content_type="video")
        classifier.classify.return_value = CLASSIFICATION

        updated = await service.reclassify_bookmark(USER_ID, "bm-1")

        classifier.classify.assert_awaited_once_with(URL)
        store.update.assert_awaited_once_with(
            "bm-1",
            {"domain": "youtube.com", "platform": "youtube", "content_type": "music"},
        )
        assert updated.content_type == ContentType.MUSIC

    async def test_other_user_denied(self, service, classifier):
        with pytest.raises(BookmarkAccessDeniedError):
            await service.reclassify_bookmark(OTHER_USER_ID, "bm-1")
        classifier.classify.assert_not_awaited()


@pytest.mark.asyncio
class TestDeleteBookmark:
    async def test_deletes_and_invalidates(self, service, store, cache):
        cache.set(bookmark_key(USER_ID, "bm-1"), _bookmark())
        await service.delete_bookmark(USER_ID, "bm-1")

        store.delete.assert_awaited_once_with("bm-1")
        assert cache.get(bookmark_key(USER_ID, "bm-1")) is None

    async def test_missing(self, service, store):
        store.get.return_value = None
        with pytest.raises(BookmarkNotFoundError):
            await service.delete_bookmark(USER_ID, "bm-1")
        store.delete.assert_not_awaited()

    async def test_other_user_denied(self, service, store):
        with pytest.raises(BookmarkAccessDeniedError):
            await service.delete_bookmark(OTHER_USER_ID, "bm-1")
        store.delete.assert_not_awaited()
