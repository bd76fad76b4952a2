"""Bookmark API router."""

import logging
import uuid
from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.auth.dependencies import get_current_user
from app.models.bookmark import (
    ApiResponse,
    Bookmark,
    BookmarkCreate,
    BookmarkPreview,
    BookmarkUpdate,
    ContentType,
)
from app.services.bookmark_service import BookmarkService, get_bookmark_service
from app.services.exceptions import BookmarkAccessDeniedError, BookmarkNotFoundError
from app.services.url_utils import is_http_url, normalize_incoming_url

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookmarks", tags=["bookmarks"])


def _split_tags(raw: list[str]) -> Optional[list[str]]:
    """Accept both ``?tags=a&tags=b`` and ``?tags=a,b``."""
    tags = [t.strip() for value in raw for t in value.split(",") if t.strip()]
    return tags or None


def _raise_for(error: Exception, action: str) -> NoReturn:
    if isinstance(error, BookmarkNotFoundError):
        raise HTTPException(status_code=404, detail="Bookmark not found")
    if isinstance(error, BookmarkAccessDeniedError):
        raise HTTPException(
            status_code=403,
            detail=f"You are not authorized to {action} this bookmark",
        )
    error_id = str(uuid.uuid4())
    logger.error(f"Bookmark {action} failed [{error_id}]: {error}")
    raise HTTPException(
        status_code=500,
        detail=f"Internal server error (error id {error_id})",
    )


@router.get("", response_model=ApiResponse[list[Bookmark]])
async def list_bookmarks(
    tags: list[str] = Query([]),
    title: Optional[str] = Query(None),
    content_type: Optional[ContentType] = Query(None),
    platform: Optional[str] = Query(None),
    current_user: dict = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
) -> ApiResponse[list[Bookmark]]:
    """
    List the caller's bookmarks, newest first.

    Filters combine:
    - tags: any of the given tags (repeat the param or comma-separate)
    - title: case-insensitive substring
    - content_type / platform: exact match
    """
    try:
        bookmarks = await service.list_bookmarks(
            current_user["user_id"],
            tags=_split_tags(tags),
            title=title.strip() if title and title.strip() else None,
            content_type=content_type.value if content_type else None,
            platform=platform,
        )
    except Exception as e:
        _raise_for(e, "list")
    return ApiResponse(message="Fetched successfully", data=bookmarks)


@router.post(
    "",
    response_model=ApiResponse[Bookmark],
    status_code=status.HTTP_201_CREATED,
)
async def create_bookmark(
    request: BookmarkCreate,
    current_user: dict = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
) -> ApiResponse[Bookmark]:
    """
    Save a URL. Title, cover image, domain, platform and content type are
    filled in automatically; a provided title or cover URL takes precedence.
    """
    try:
        bookmark = await service.create_bookmark(
            current_user["user_id"],
            request.url,
            request.tags,
            title=request.title,
            cover_url=request.cover_url,
        )
    except Exception as e:
        _raise_for(e, "create")
    return ApiResponse(message="Bookmark created successfully", data=bookmark)


@router.get("/preview", response_model=ApiResponse[BookmarkPreview])
async def preview_bookmark(
    url: str = Query(..., min_length=1),
    current_user: dict = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
) -> ApiResponse[BookmarkPreview]:
    """Classify and scrape a URL without saving it (bookmarklet popup)."""
    normalized = normalize_incoming_url(url)
    if not is_http_url(normalized):
        raise HTTPException(
            status_code=422, detail="URL must start with http:// or https://"
        )
    preview = await service.preview(normalized)
    return ApiResponse(message="Preview generated", data=preview)


@router.get("/{bookmark_id}", response_model=ApiResponse[Bookmark])
async def get_bookmark(
    bookmark_id: str,
    current_user: dict = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
) -> ApiResponse[Bookmark]:
    try:
        bookmark = await service.get_bookmark(current_user["user_id"], bookmark_id)
    except Exception as e:
        _raise_for(e, "fetch")
    return ApiResponse(message="Bookmark fetched successfully", data=bookmark)


@router.patch("/{bookmark_id}", response_model=ApiResponse[Bookmark])
async def update_bookmark(
    bookmark_id: str,
    request: BookmarkUpdate,
    current_user: dict = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
) -> ApiResponse[Bookmark]:
    """Update title, cover URL and/or tags. Omitted fields are left unchanged."""
    try:
        bookmark = await service.update_bookmark(
            current_user["user_id"], bookmark_id, request
        )
    except Exception as e:
        _raise_for(e, "update")
    return ApiResponse(message="Bookmark updated successfully", data=bookmark)


@router.post("/{bookmark_id}/reclassify", response_model=ApiResponse[Bookmark])
async def reclassify_bookmark(
    bookmark_id: str,
    current_user: dict = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
) -> ApiResponse[Bookmark]:
    """Recompute domain, platform and content type from the stored URL."""
    try:
        bookmark = await service.reclassify_bookmark(
            current_user["user_id"], bookmark_id
        )
    except Exception as e:
        _raise_for(e, "reclassify")
    return ApiResponse(message="Bookmark reclassified successfully", data=bookmark)


@router.delete("/{bookmark_id}", response_model=ApiResponse[None])
async def delete_bookmark(
    bookmark_id: str,
    current_user: dict = Depends(get_current_user),
    service: BookmarkService = Depends(get_bookmark_service),
) -> ApiResponse[None]:
    try:
        await service.delete_bookmark(current_user["user_id"], bookmark_id)
    except Exception as e:
        _raise_for(e, "delete")
    return ApiResponse(message="Bookmark deleted successfully")
