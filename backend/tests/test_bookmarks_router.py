"""Tests for the bookmark, platform and health endpoints."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from app.auth.dependencies import get_current_user
from app.main import app
from app.models.bookmark import (
    Bookmark,
    BookmarkPreview,
    ContentType,
    UrlClassification,
    UrlMetadata,
)
from app.services.bookmark_service import get_bookmark_service
from app.services.exceptions import BookmarkAccessDeniedError, BookmarkNotFoundError

USER_ID = "test-user-id"


async def mock_get_current_user():
    """Mock user for testing - bypasses JWT validation."""
    return {
        "user_id": USER_ID,
        "email": "test@example.com",
        "role": "authenticated",
    }


def _bookmark(**overrides) -> Bookmark:
    data = {
        "id": "bm-1",
        "user_id": USER_ID,
        "url": "https://open.spotify.com/track/1",
        "title": "A song",
        "domain": "open.spotify.com",
        "platform": "spotify",
        "content_type": "music",
        "tags": ["chill"],
    }
    data.update(overrides)
    return Bookmark.model_validate(data)


@pytest.fixture
def service():
    mock = MagicMock()
    mock.list_bookmarks = AsyncMock(return_value=[_bookmark()])
    mock.create_bookmark = AsyncMock(return_value=_bookmark())
    mock.get_bookmark = AsyncMock(return_value=_bookmark())
    mock.update_bookmark = AsyncMock(return_value=_bookmark(title="Renamed"))
    mock.reclassify_bookmark = AsyncMock(return_value=_bookmark())
    mock.delete_bookmark = AsyncMock(return_value=None)
    mock.preview = AsyncMock(
        return_value=BookmarkPreview(
            url="https://open.spotify.com/track/1",
            classification=UrlClassification(
                domain="open.spotify.com",
                platform="spotify",
                content_type=ContentType.MUSIC,
            ),
            metadata=UrlMetadata(title="A song"),
        )
    )
    return mock


@pytest.fixture
def client(service):
    """Test client with auth and bookmark service overridden."""
    app.dependency_overrides[get_current_user] = mock_get_current_user
    app.dependency_overrides[get_bookmark_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


class TestHealthEndpoint:
    def test_degraded_without_storage(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "degraded"
        assert data["services"]["storage"]["status"] == "unconfigured"
        assert data["services"]["youtube_api"]["status"] == "disabled"


class TestListBookmarks:
    def test_list(self, client, service):
        response = client.get("/bookmarks")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["data"][0]["content_type"] == "music"
        service.list_bookmarks.assert_awaited_once_with(
            USER_ID, tags=None, title=None, content_type=None, platform=None
        )

    def test_filters(self, client, service):
        response = client.get(
            "/bookmarks",
            params=[
                ("tags", "a, b"),
                ("tags", "c"),
                ("title", "  song "),
                ("content_type", "video"),
                ("platform", "youtube"),
            ],
        )
        assert response.status_code == 200
        service.list_bookmarks.assert_awaited_once_with(
            USER_ID,
            tags=["a", "b", "c"],
            title="song",
            content_type="video",
            platform="youtube",
        )

    def test_unknown_content_type_rejected(self, client):
        response = client.get("/bookmarks", params={"content_type": "hologram"})
        assert response.status_code == 422

    def test_internal_error_has_error_id(self, client, service):
        service.list_bookmarks.side_effect = RuntimeError("db down")
        response = client.get("/bookmarks")
        assert response.status_code == 500
        assert "error id" in response.json()["detail"]


class TestCreateBookmark:
    def test_create(self, client, service):
        response = client.post(
            "/bookmarks",
            json={"url": " https://open.spotify.com/track/1 ", "tags": ["chill"]},
        )
        assert response.status_code == 201
        assert response.json()["data"]["platform"] == "spotify"
        service.create_bookmark.assert_awaited_once_with(
            USER_ID,
            "https://open.spotify.com/track/1",
            ["chill"],
            title=None,
            cover_url=None,
        )

    @pytest.mark.parametrize("url", ["", "example.com", "ftp://example.com"])
    def test_invalid_url(self, client, service, url):
        response = client.post("/bookmarks", json={"url": url})
        assert response.status_code == 422
        service.create_bookmark.assert_not_awaited()


class TestPreviewBookmark:
    def test_preview(self, client, service):
        response = client.get(
            "/bookmarks/preview", params={"url": "https://open.spotify.com/track/1"}
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["classification"]["content_type"] == "music"
        assert data["metadata"]["title"] == "A song"

    def test_non_http_rejected(self, client, service):
        response = client.get("/bookmarks/preview", params={"url": "javascript:void(0)"})
        assert response.status_code == 422
        service.preview.assert_not_awaited()


class TestSingleBookmark:
    def test_get(self, client):
        response = client.get("/bookmarks/bm-1")
        assert response.status_code == 200
        assert response.json()["data"]["id"] == "bm-1"

    def test_not_found(self, client, service):
        service.get_bookmark.side_effect = BookmarkNotFoundError("bm-1")
        response = client.get("/bookmarks/bm-1")
        assert response.status_code == 404
        assert response.json()["detail"] == "Bookmark not found"

    def test_forbidden(self, client, service):
        service.delete_bookmark.side_effect = BookmarkAccessDeniedError("bm-1")
        response = client.delete("/bookmarks/bm-1")
        assert response.status_code == 403

    def test_update(self, client, service):
        response = client.patch("/bookmarks/bm-1", json={"title": "Renamed"})
        assert response.status_code == 200
        assert response.json()["data"]["title"] == "Renamed"
        update = service.update_bookmark.await_args.args[2]
        assert update.changes() == {"title": "Renamed"}

    def test_reclassify(self, client, service):
        response = client.post("/bookmarks/bm-1/reclassify")
        assert response.status_code == 200
        service.reclassify_bookmark.assert_awaited_once_with(USER_ID, "bm-1")

    def test_delete(self, client, service):
        response = client.delete("/bookmarks/bm-1")
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Bookmark deleted successfully",
            "data": None,
        }


class TestPlatforms:
    def test_list(self, client):
        response = client.get("/platforms")
        assert response.status_code == 200
        slugs = [p["slug"] for p in response.json()["data"]]
        assert "youtube" in slugs
        assert slugs == sorted(slugs)

    def test_known_platform(self, client):
        data = client.get("/platforms/youtube").json()["data"]
        assert data["label"] == "YouTube"
        assert data["content_type"] == "video"
        assert data["domains"] == ["youtu.be"]

    def test_unknown_platform(self, client):
        data = client.get("/platforms/My Blog").json()["data"]
        assert data == {
            "slug": "my-blog",
            "label": "My Blog",
            "domains": [],
            "content_type": None,
        }
