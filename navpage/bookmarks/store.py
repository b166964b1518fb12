"""Bookmark store: the authoritative bookmark list and theme flag.

All state lives in memory and is mirrored to a :class:`KeyValueStore`
after every mutation. The full list is rewritten each time; there are no
partial writes. If a write fails the exception propagates and memory stays
ahead of storage until the next successful write.
"""
import json
import logging
import uuid
from dataclasses import replace
from typing import Callable, Optional

from navpage.bookmarks.colors import color_tag
from navpage.bookmarks.errors import NotFoundError, SchemaError, ValidationError
from navpage.bookmarks.models import Bookmark
from navpage.bookmarks.schema import decode_document, encode_document, migrate
from navpage.bookmarks.urls import is_http_url, normalize_url
from navpage.storage.kv import KeyValueStore

logger = logging.getLogger("navpage.bookmarks.store")

BOOKMARKS_KEY = "navigation-bookmarks"
THEME_KEY = "dark-mode"


def new_bookmark_id() -> str:
    return uuid.uuid4().hex


def _clean_input(name: str, raw_url: str, icon: Optional[str]) -> tuple[str, str, Optional[str]]:
    """Validate and normalize user input, raising ValidationError."""
    clean_name = (name or "").strip()
    if not clean_name:
        raise ValidationError("Name must not be empty")

    url = normalize_url(raw_url)
    if url is None:
        raise ValidationError(f"Not a valid address: {raw_url!r}")

    clean_icon = (icon or "").strip() or None
    if clean_icon is not None and not is_http_url(clean_icon):
        raise ValidationError(f"Icon must be an absolute http(s) URL: {icon!r}")

    return clean_name, url, clean_icon


class BookmarkStore:
    """Bookmark list and dark-mode flag backed by a key-value port."""

    def __init__(
        self,
        storage: KeyValueStore,
        id_factory: Callable[[], str] = new_bookmark_id,
    ):
        self._storage = storage
        self._id_factory = id_factory
        self._bookmarks: tuple[Bookmark, ...] = ()
        self._dark_mode = False
        self._issued_ids: set[str] = set()

    # ── State ──────────────────────────────────────────────────────

    @property
    def bookmarks(self) -> tuple[Bookmark, ...]:
        return self._bookmarks

    @property
    def dark_mode(self) -> bool:
        return self._dark_mode

    def get(self, bookmark_id: str) -> Optional[Bookmark]:
        for bookmark in self._bookmarks:
            if bookmark.id == bookmark_id:
                return bookmark
        return None

    # ── Loading ────────────────────────────────────────────────────

    def load(self) -> list[Bookmark]:
        """Read the persisted list and theme flag into memory.

        Legacy documents and records missing a colour tag are migrated, and
        the list is rewritten only when migration changed something, so a
        second load with no mutation in between reads and writes nothing new.
        """
        self._bookmarks = tuple(self._read_bookmarks())
        self._dark_mode = self._read_theme()
        self._issued_ids |= {b.id for b in self._bookmarks}
        return list(self._bookmarks)

    def _read_bookmarks(self) -> list[Bookmark]:
        text = self._storage.get(BOOKMARKS_KEY)
        if text is None:
            return []
        try:
            bookmarks, changed = migrate(decode_document(text))
        except SchemaError as e:
            logger.warning("Ignoring stored bookmarks: %s", e)
            return []
        if changed:
            logger.info("Migrated stored bookmarks (%d records)", len(bookmarks))
            self._storage.set(BOOKMARKS_KEY, encode_document(bookmarks))
        return bookmarks

    def _read_theme(self) -> bool:
        text = self._storage.get(THEME_KEY)
        if text is None:
            return False
        try:
            value = json.loads(text)
        except json.JSONDecodeError:
            logger.warning("Ignoring unreadable theme flag: %r", text)
            return False
        if not isinstance(value, bool):
            logger.warning("Ignoring non-boolean theme flag: %r", value)
            return False
        return value

    # ── Mutations ──────────────────────────────────────────────────

    def _commit(self, bookmarks: tuple[Bookmark, ...]) -> None:
        self._bookmarks = bookmarks
        self._storage.set(BOOKMARKS_KEY, encode_document(list(bookmarks)))

    def _next_id(self) -> str:
        bid = self._id_factory()
        while bid in self._issued_ids:
            bid = self._id_factory()
        self._issued_ids.add(bid)
        return bid

    def add(self, name: str, raw_url: str, icon: Optional[str] = None) -> Bookmark:
        clean_name, url, clean_icon = _clean_input(name, raw_url, icon)
        bid = self._next_id()
        bookmark = Bookmark(
            id=bid,
            name=clean_name,
            url=url,
            color_tag=color_tag(bid),
            icon=clean_icon,
        )
        self._commit((*self._bookmarks, bookmark))
        logger.info("Added bookmark %s (%s)", bid, url)
        return bookmark

    def update(
        self,
        bookmark_id: str,
        name: str,
        raw_url: str,
        icon: Optional[str] = None,
    ) -> Bookmark:
        """Replace name, url and icon in place; id, position and colour stay."""
        clean_name, url, clean_icon = _clean_input(name, raw_url, icon)
        current = self.get(bookmark_id)
        if current is None:
            raise NotFoundError(bookmark_id)

        updated = replace(current, name=clean_name, url=url, icon=clean_icon)
        self._commit(tuple(updated if b.id == bookmark_id else b for b in self._bookmarks))
        logger.info("Updated bookmark %s", bookmark_id)
        return updated

    def remove(self, bookmark_id: str) -> Optional[Bookmark]:
        """Delete by id. Unknown ids are a no-op; the list is persisted either way."""
        removed = self.get(bookmark_id)
        self._commit(tuple(b for b in self._bookmarks if b.id != bookmark_id))
        if removed is None:
            logger.debug("Remove of unknown bookmark %s ignored", bookmark_id)
        else:
            logger.info("Removed bookmark %s", bookmark_id)
        return removed

    def toggle_theme(self) -> bool:
        self._dark_mode = not self._dark_mode
        self._storage.set(THEME_KEY, json.dumps(self._dark_mode))
        return self._dark_mode

    # ── Queries ────────────────────────────────────────────────────

    def filter(self, term: str) -> list[Bookmark]:
        """Bookmarks whose name or url contains ``term``, case-insensitively."""
        if not (term or "").strip():
            return list(self._bookmarks)
        needle = term.lower()
        return [
            b for b in self._bookmarks
            if needle in b.name.lower() or needle in b.url.lower()
        ]
