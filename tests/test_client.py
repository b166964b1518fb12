"""Tests for the upload proxy HTTP client."""
import httpx
import pytest

from navpage.client.upload import IconUploadClient, UploadClientError


def _client(handler) -> IconUploadClient:
    return IconUploadClient("http://proxy.test/api/upload", transport=httpx.MockTransport(handler))


class TestUpload:
    def test_posts_multipart_file(self, tmp_path):
        icon = tmp_path / "logo.png"
        icon.write_bytes(b"\x89PNG")
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["content_type"] = request.headers["content-type"]
            seen["body"] = request.content
            return httpx.Response(200, json={"url": "https://blob.test/icons/1-logo.png"})

        assert _client(handler).upload(icon) == "https://blob.test/icons/1-logo.png"
        assert seen["method"] == "POST"
        assert seen["content_type"].startswith("multipart/form-data")
        assert b'name="file"; filename="logo.png"' in seen["body"]
        assert b"Content-Type: image/png" in seen["body"]

    def test_error_carries_proxy_message(self, tmp_path):
        icon = tmp_path / "logo.svg"
        icon.write_bytes(b"<svg/>")

        def handler(request):
            return httpx.Response(400, json={"error": "Only PNG/JPEG/WEBP/GIF images are supported"})

        with pytest.raises(UploadClientError) as exc_info:
            _client(handler).upload(icon)
        assert exc_info.value.status_code == 400
        assert "PNG" in exc_info.value.message

    def test_unreachable(self, tmp_path):
        icon = tmp_path / "logo.png"
        icon.write_bytes(b"x")

        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(UploadClientError) as exc_info:
            _client(handler).upload(icon)
        assert exc_info.value.status_code is None


    def test_missing_file(self, tmp_path):
        def handler(request):
            raise AssertionError("no request expected")

        with pytest.raises(UploadClientError) as exc_info:
            _client(handler).upload(tmp_path / "missing.png")
        assert exc_info.value.status_code is None
        assert "Cannot read" in exc_info.value.message


class TestDelete:
    def test_sends_json_body(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["body"] = request.content
            return httpx.Response(200, json={"ok": True})

        _client(handler).delete("https://blob.test/icons/1-logo.png")
        assert seen["method"] == "DELETE"
        assert b'"url"' in seen["body"]

    def test_unconfigured_proxy(self):
        def handler(request):
            return httpx.Response(501, json={"error": "Storage credential is not configured"})

        with pytest.raises(UploadClientError) as exc_info:
            _client(handler).delete("https://blob.test/a.png")
        assert exc_info.value.status_code == 501


class TestFromSettings:
    def test_uses_proxy_url(self, tmp_settings):
        client = IconUploadClient.from_settings()
        assert client.endpoint == "http://proxy.test/api/upload"
