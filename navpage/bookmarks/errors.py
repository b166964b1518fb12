"""Bookmark store error taxonomy."""


class BookmarkError(Exception):
    """Base class for bookmark store failures."""


class ValidationError(BookmarkError, ValueError):
    """Rejected input: empty name, invalid address or invalid icon URL."""


class NotFoundError(BookmarkError, LookupError):
    """No bookmark with the requested id."""

    def __init__(self, bookmark_id: str):
        super().__init__(f"Bookmark not found: {bookmark_id}")
        self.bookmark_id = bookmark_id


class SchemaError(BookmarkError):
    """Persisted document cannot be decoded or is from a newer schema."""
