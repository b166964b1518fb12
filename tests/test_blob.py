"""Tests for the Vercel Blob REST backend."""
import json

import httpx
import pytest

from navpage.app.config import Settings
from navpage.upload.blob import BlobError, VercelBlobStore, get_blob_store


def _store(handler) -> VercelBlobStore:
    return VercelBlobStore(
        token="vercel_blob_rw_test",
        api_url="https://blob.test",
        transport=httpx.MockTransport(handler),
    )


class TestPut:
    @pytest.mark.asyncio
    async def test_put_request_shape(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = request.content
            return httpx.Response(200, json={"url": "https://x.public.blob.test/icons/1-a.png"})

        url = await _store(handler).put("icons/1-a.png", b"data", "image/png")

        assert url == "https://x.public.blob.test/icons/1-a.png"
        assert seen["method"] == "PUT"
        assert seen["url"] == "https://blob.test/icons/1-a.png"
        assert seen["headers"]["authorization"] == "Bearer vercel_blob_rw_test"
        assert seen["headers"]["x-add-random-suffix"] == "0"
        assert seen["headers"]["x-content-type"] == "image/png"
        assert seen["body"] == b"data"

    @pytest.mark.asyncio
    async def test_backend_error_message(self):
        def handler(request):
            return httpx.Response(403, json={"error": {"code": "forbidden", "message": "Access denied"}})

        with pytest.raises(BlobError, match="Access denied"):
            await _store(handler).put("icons/1-a.png", b"data", "image/png")

    @pytest.mark.asyncio
    async def test_non_json_error(self):
        def handler(request):
            return httpx.Response(502, text="bad gateway")

        with pytest.raises(BlobError, match="502"):
            await _store(handler).put("icons/1-a.png", b"data", "image/png")

    @pytest.mark.asyncio
    async def test_missing_url_in_response(self):
        def handler(request):
            return httpx.Response(200, json={})

        with pytest.raises(BlobError):
            await _store(handler).put("icons/1-a.png", b"data", "image/png")

    @pytest.mark.asyncio
    async def test_transport_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(BlobError, match="connection refused"):
            await _store(handler).put("icons/1-a.png", b"data", "image/png")


    @pytest.mark.asyncio
    async def test_invalid_api_url(self):
        store = VercelBlobStore(token="t", api_url="https://blob.test:notaport")
        with pytest.raises(BlobError):
            await store.put("icons/1-a.png", b"data", "image/png")


class TestDelete:
    @pytest.mark.asyncio
    async def test_delete_request_shape(self):
        seen = {}

        def handler(request):
            seen["url"] = str(request.url)
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={})

        await _store(handler).delete("https://x.public.blob.test/icons/1-a.png")
        assert seen["url"] == "https://blob.test/delete"
        assert seen["body"] == {"urls": ["https://x.public.blob.test/icons/1-a.png"]}

    @pytest.mark.asyncio
    async def test_delete_failure(self):
        def handler(request):
            return httpx.Response(500, json={"error": {"message": "boom"}})

        with pytest.raises(BlobError, match="boom"):
            await _store(handler).delete("https://x/a.png")


class TestGetBlobStore:
    def test_unconfigured(self):
        assert get_blob_store(Settings(blob_read_write_token="")) is None

    def test_whitespace_token_is_unconfigured(self):
        assert get_blob_store(Settings(blob_read_write_token="   ")) is None

    def test_configured(self):
        store = get_blob_store(Settings(blob_read_write_token="tok", blob_api_url="https://b.test/"))
        assert isinstance(store, VercelBlobStore)
        assert store.api_url == "https://b.test"
