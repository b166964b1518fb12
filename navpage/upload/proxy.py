"""Icon upload proxy: validate an image, store it, return its public URL."""
import logging
import re
import time
from typing import Optional

from navpage.upload.blob import BlobError, BlobStore
from navpage.upload.errors import BadRequest, ServiceUnavailable, StorageFailure

logger = logging.getLogger("navpage.upload.proxy")

ALLOWED_MIME_TYPES = frozenset({"image/png", "image/jpeg", "image/webp", "image/gif"})
MAX_SIZE = 1_000_000
KEY_PREFIX = "icons"
DEFAULT_FILENAME = "icon"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


def sanitize_filename(filename: Optional[str]) -> str:
    """Replace every character outside ``[A-Za-z0-9_.-]`` with ``_``."""
    return _UNSAFE_CHARS.sub("_", filename or DEFAULT_FILENAME)


def make_storage_key(
    filename: Optional[str],
    now_ms: Optional[int] = None,
    prefix: str = KEY_PREFIX,
) -> str:
    """``<prefix>/<epoch-ms>-<sanitized name>``; the timestamp keeps keys unique."""
    if now_ms is None:
        now_ms = time.time_ns() // 1_000_000
    return f"{prefix}/{now_ms}-{sanitize_filename(filename)}"


def require_store(store: Optional[BlobStore]) -> BlobStore:
    if store is None:
        raise ServiceUnavailable("Storage credential is not configured")
    return store


async def handle_upload(
    store: Optional[BlobStore],
    file_bytes: Optional[bytes],
    declared_mime_type: Optional[str],
    declared_size: Optional[int],
    original_filename: Optional[str],
    now_ms: Optional[int] = None,
    max_size: int = MAX_SIZE,
    prefix: str = KEY_PREFIX,
) -> str:
    """Validate and store one icon, returning its public URL.

    Raises:
        ServiceUnavailable: No blob store configured.
        BadRequest: Missing payload, disallowed type or oversize file.
        StorageFailure: The blob backend failed.
    """
    store = require_store(store)
    if file_bytes is None:
        raise BadRequest("Missing file")
    if declared_mime_type not in ALLOWED_MIME_TYPES:
        raise BadRequest("Only PNG/JPEG/WEBP/GIF images are supported")

    size = len(file_bytes) if declared_size is None else declared_size
    if size > max_size:
        raise BadRequest(f"File too large, maximum is {max_size} bytes")

    key = make_storage_key(original_filename, now_ms=now_ms, prefix=prefix)
    try:
        url = await store.put(key, file_bytes, declared_mime_type)
    except BlobError as e:
        logger.error("Upload of %s failed: %s", key, e)
        raise StorageFailure(str(e) or "Upload failed") from e

    logger.info("Uploaded icon %s -> %s", key, url)
    return url


async def handle_delete(store: Optional[BlobStore], url: Optional[str]) -> None:
    """Delete a previously uploaded icon by its public URL."""
    store = require_store(store)
    if not url:
        raise BadRequest("Missing URL")

    try:
        await store.delete(url)
    except BlobError as e:
        logger.error("Delete of %s failed: %s", url, e)
        raise StorageFailure(str(e) or "Delete failed") from e
