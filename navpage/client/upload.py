"""HTTP client for the icon upload proxy."""
import logging
import mimetypes
from pathlib import Path
from typing import Optional

import httpx

from navpage.app.config import Settings, get_settings

logger = logging.getLogger("navpage.client.upload")


class UploadClientError(Exception):
    """The proxy answered with an error status, or could not be reached."""

    def __init__(self, status_code: Optional[int], message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


def _raise_for_error(resp: httpx.Response) -> None:
    if resp.status_code < 400:
        return
    try:
        message = resp.json().get("error")
    except (ValueError, AttributeError):
        message = None
    raise UploadClientError(resp.status_code, message or f"HTTP {resp.status_code}")


class IconUploadClient:
    def __init__(
        self,
        endpoint: str,
        timeout: float = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.endpoint = endpoint
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "IconUploadClient":
        settings = settings or get_settings()
        return cls(settings.upload_endpoint, timeout=settings.http_timeout)

    def _client(self) -> httpx.Client:
        return httpx.Client(timeout=self.timeout, transport=self._transport)

    def upload(self, path: Path, content_type: Optional[str] = None) -> str:
        """Upload an image file and return the public URL the proxy reports."""
        content_type = content_type or mimetypes.guess_type(path.name)[0] or "application/octet-stream"
        try:
            data = path.read_bytes()
        except OSError as e:
            raise UploadClientError(None, f"Cannot read {path}: {e}") from e

        try:
            with self._client() as client:
                resp = client.post(
                    self.endpoint,
                    files={"file": (path.name, data, content_type)},
                )
        except httpx.HTTPError as e:
            raise UploadClientError(None, f"Upload proxy unreachable: {e}") from e

        _raise_for_error(resp)
        url = resp.json()["url"]
        logger.info("Uploaded %s -> %s", path.name, url)
        return url

    def delete(self, url: str) -> None:
        try:
            with self._client() as client:
                resp = client.request("DELETE", self.endpoint, json={"url": url})
        except httpx.HTTPError as e:
            raise UploadClientError(None, f"Upload proxy unreachable: {e}") from e
        _raise_for_error(resp)
