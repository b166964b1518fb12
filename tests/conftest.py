"""Shared test fixtures for navpage tests."""
from contextlib import ExitStack
from typing import Optional
from unittest.mock import patch

import pytest

from navpage.app.config import Settings
from navpage.bookmarks.store import BookmarkStore
from navpage.storage.kv import MemoryKeyValueStore
from navpage.upload.blob import BlobError, BlobStore

_SETTINGS_CONSUMERS = [
    "navpage.app.config.get_settings",
    "navpage.app.logging.get_settings",
    "navpage.app.paths.get_settings",
    "navpage.storage.kv.get_settings",
    "navpage.upload.blob.get_settings",
    "navpage.client.upload.get_settings",
    "navpage.web.server.get_settings",
    "navpage.cli.main.get_settings",
]


@pytest.fixture()
def tmp_settings(tmp_path):
    """Create a Settings instance backed by a temporary directory.

    Patches get_settings in every module that reads it so all code uses the
    temp paths and an unconfigured upload backend.
    """
    settings = Settings(
        storage_backend="json",
        storage_path=tmp_path / "storage" / "local_storage.json",
        log_path=tmp_path / "logs" / "app.log",
        blob_read_write_token="",
        proxy_url="http://proxy.test",
    )

    with ExitStack() as stack:
        for target in _SETTINGS_CONSUMERS:
            stack.enter_context(patch(target, return_value=settings))
        yield settings


@pytest.fixture()
def memory_storage():
    return MemoryKeyValueStore()


@pytest.fixture()
def bookmark_store(memory_storage):
    store = BookmarkStore(memory_storage)
    store.load()
    return store


class FakeBlobStore(BlobStore):
    """In-memory blob backend recording every call."""

    def __init__(self, fail_with: Optional[str] = None):
        self.objects: dict[str, tuple[bytes, str]] = {}
        self.deleted: list[str] = []
        self.fail_with = fail_with

    async def put(self, pathname: str, data: bytes, content_type: str) -> str:
        if self.fail_with:
            raise BlobError(self.fail_with)
        self.objects[pathname] = (data, content_type)
        return f"https://store.public.blob.test/{pathname}"

    async def delete(self, url: str) -> None:
        if self.fail_with:
            raise BlobError(self.fail_with)
        self.deleted.append(url)


@pytest.fixture()
def fake_blob_store():
    return FakeBlobStore()


@pytest.fixture()
def failing_blob_store():
    return FakeBlobStore(fail_with="backend exploded")
