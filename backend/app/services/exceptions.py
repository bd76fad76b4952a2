"""Domain errors raised by the bookmark service."""


class BookmarkError(Exception):
    """Base class for bookmark service errors."""


class BookmarkNotFoundError(BookmarkError):
    def __init__(self, bookmark_id: str) -> None:
        super().__init__(f"Bookmark not found: {bookmark_id}")
        self.bookmark_id = bookmark_id


class BookmarkAccessDeniedError(BookmarkError):
    """Bookmark exists but belongs to another user."""

    def __init__(self, bookmark_id: str) -> None:
        super().__init__(f"Not authorized for bookmark: {bookmark_id}")
        self.bookmark_id = bookmark_id
