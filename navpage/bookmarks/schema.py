"""Persisted bookmark document: encoding, decoding and migration.

Version 1 is the bare JSON array the first release of the page wrote to
``localStorage``: ``[{"id", "name", "url", "icon"?}, ...]``.

Version 2 wraps the list and carries the derived colour tag on every
record::

    {"version": 2, "bookmarks": [{"id", "name", "url", "icon"?, "colorTag"}]}

:func:`migrate` upgrades anything older to the current version. Records
that cannot be admitted (no id, empty name, unusable address, duplicate id)
are dropped with a warning.
"""
import json
import logging
from typing import Any, Optional

from navpage.bookmarks.colors import color_tag, is_valid_tag
from navpage.bookmarks.errors import SchemaError
from navpage.bookmarks.models import Bookmark
from navpage.bookmarks.urls import normalize_url

logger = logging.getLogger("navpage.bookmarks.schema")

SCHEMA_VERSION = 2


def encode_document(bookmarks: list[Bookmark]) -> str:
    return json.dumps(
        {"version": SCHEMA_VERSION, "bookmarks": [b.to_record() for b in bookmarks]},
        ensure_ascii=False,
    )


def decode_document(text: str) -> Any:
    try:
        return json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaError(f"Bookmark document is not valid JSON: {e}") from e


def _document_records(raw: Any) -> tuple[int, list]:
    """Return (version, records) for a decoded document of any version."""
    if isinstance(raw, list):
        return 1, raw
    if not isinstance(raw, dict):
        raise SchemaError(f"Unexpected bookmark document type: {type(raw).__name__}")

    version = raw.get("version")
    if not isinstance(version, int) or isinstance(version, bool):
        raise SchemaError(f"Bookmark document has no usable version: {version!r}")
    if version > SCHEMA_VERSION:
        raise SchemaError(
            f"Bookmark document version {version} is newer than supported ({SCHEMA_VERSION})"
        )
    records = raw.get("bookmarks", [])
    if not isinstance(records, list):
        raise SchemaError("Bookmark document 'bookmarks' is not a list")
    return version, records


def _upgrade_record(record: Any) -> Optional[Bookmark]:
    if not isinstance(record, dict):
        logger.warning("Dropping non-object bookmark record: %r", record)
        return None

    bid = record.get("id")
    if isinstance(bid, (int, float)) and not isinstance(bid, bool):
        bid = str(bid)
    if not isinstance(bid, str) or not bid:
        logger.warning("Dropping bookmark without id: %r", record)
        return None

    name = record.get("name")
    name = name.strip() if isinstance(name, str) else ""
    if not name:
        logger.warning("Dropping bookmark %s: empty name", bid)
        return None

    raw_url = record.get("url")
    url = normalize_url(raw_url if isinstance(raw_url, str) else None)
    if url is None:
        logger.warning("Dropping bookmark %s: invalid address %r", bid, raw_url)
        return None

    icon = record.get("icon")
    icon = icon.strip() if isinstance(icon, str) else ""

    tag = record.get("colorTag")
    if not is_valid_tag(tag):
        tag = color_tag(bid)

    return Bookmark(id=bid, name=name, url=url, color_tag=tag, icon=icon or None)


def migrate(raw: Any) -> tuple[list[Bookmark], bool]:
    """Upgrade a decoded document to the current schema.

    Returns the admitted bookmarks and whether the persisted form differs
    from ``raw`` (and therefore needs rewriting). Existing colour tags are
    kept as stored; only missing or unusable ones are computed.
    """
    version, records = _document_records(raw)
    changed = version != SCHEMA_VERSION

    bookmarks: list[Bookmark] = []
    seen: set[str] = set()
    for record in records:
        bookmark = _upgrade_record(record)
        if bookmark is None:
            changed = True
            continue
        if bookmark.id in seen:
            logger.warning("Dropping duplicate bookmark id %s", bookmark.id)
            changed = True
            continue
        seen.add(bookmark.id)
        if bookmark.to_record() != record:
            changed = True
        bookmarks.append(bookmark)

    return bookmarks, changed
