"""Persistence for bookmarks in the Supabase ``bookmarks`` table."""

from typing import Any, Optional

from supabase import AsyncClient

from app.models.bookmark import Bookmark

TABLE = "bookmarks"


def _to_bookmark(row: dict[str, Any]) -> Bookmark:
    return Bookmark.model_validate(row)


class BookmarkStore:
    """Thin query layer; ownership rules live in ``BookmarkService``."""

    def __init__(self, supabase: AsyncClient) -> None:
        self.supabase = supabase

    async def insert(self, record: dict[str, Any]) -> Bookmark:
        result = await self.supabase.table(TABLE).insert(record).execute()
        if not result.data:
            raise RuntimeError("Bookmark insert returned no row")
        return _to_bookmark(result.data[0])

    async def get(self, bookmark_id: str) -> Optional[Bookmark]:
        result = await (
            self.supabase.table(TABLE)
            .select("*")
            .eq("id", bookmark_id)
            .limit(1)
            .execute()
        )
        return _to_bookmark(result.data[0]) if result.data else None

    async def list_for_user(
        self,
        user_id: str,
        *,
        tags: Optional[list[str]] = None,
        title: Optional[str] = None,
        content_type: Optional[str] = None,
        platform: Optional[str] = None,
    ) -> list[Bookmark]:
        """Newest first. ``tags`` matches any of; ``title`` is a case-insensitive substring."""
        query = self.supabase.table(TABLE).select("*").eq("user_id", user_id)
        if tags:
            query = query.overlaps("tags", tags)
        if title:
            query = query.ilike("title", f"%{title}%")
        if content_type:
            query = query.eq("content_type", content_type)
        if platform:
            query = query.eq("platform", platform)
        result = await query.order("created_at", desc=True).execute()
        return [_to_bookmark(row) for row in result.data or []]

    async def update(self, bookmark_id: str, changes: dict[str, Any]) -> Optional[Bookmark]:
        result = await (
            self.supabase.table(TABLE).update(changes).eq("id", bookmark_id).execute()
        )
        return _to_bookmark(result.data[0]) if result.data else None

    async def delete(self, bookmark_id: str) -> None:
        await self.supabase.table(TABLE).delete().eq("id", bookmark_id).execute()
