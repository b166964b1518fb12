"""Remote blob storage for uploaded icons.

:class:`VercelBlobStore` talks to the Vercel Blob REST API with a
read/write token. Objects are written without a random suffix, so the
caller's pathname is the object key, and they are publicly readable.
"""
import logging
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import quote

import httpx

from navpage.app.config import Settings, get_settings

logger = logging.getLogger("navpage.upload.blob")

# Prevent httpx/httpcore from logging Bearer tokens at DEBUG/TRACE level
logging.getLogger("httpx").setLevel(logging.WARNING)
logging.getLogger("httpcore").setLevel(logging.WARNING)

API_VERSION = "7"


class BlobError(Exception):
    """Backend failure carrying the backend's own message."""


class BlobStore(ABC):
    """Abstract public object store."""

    @abstractmethod
    async def put(self, pathname: str, data: bytes, content_type: str) -> str:
        """Store ``data`` under ``pathname`` and return its public URL."""
        ...

    @abstractmethod
    async def delete(self, url: str) -> None:
        """Delete the object previously returned as ``url``."""
        ...


def _error_message(resp: httpx.Response) -> str:
    """Pull the backend's error message out of a failed response."""
    try:
        body = resp.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
    return f"Blob storage returned HTTP {resp.status_code}"


class VercelBlobStore(BlobStore):
    def __init__(
        self,
        token: str,
        api_url: str = "https://blob.vercel-storage.com",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url.rstrip("/")
        self.timeout = timeout
        self._token = token
        self._transport = transport

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._token}",
            "x-api-version": API_VERSION,
        }

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=self.timeout, transport=self._transport)

    async def put(self, pathname: str, data: bytes, content_type: str) -> str:
        headers = {
            **self._headers(),
            "x-add-random-suffix": "0",
            "x-content-type": content_type,
        }
        try:
            async with self._client() as client:
                resp = await client.put(
                    f"{self.api_url}/{quote(pathname, safe='/')}",
                    content=data,
                    headers=headers,
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise BlobError(str(e) or type(e).__name__) from e

        if resp.status_code >= 400:
            raise BlobError(_error_message(resp))

        try:
            url = resp.json().get("url")
        except (ValueError, AttributeError):
            url = None
        if not url:
            raise BlobError("Blob storage response did not include a URL")

        logger.info("Stored %s (%d bytes)", pathname, len(data))
        return str(url)

    async def delete(self, url: str) -> None:
        try:
            async with self._client() as client:
                resp = await client.post(
                    f"{self.api_url}/delete",
                    json={"urls": [url]},
                    headers=self._headers(),
                )
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise BlobError(str(e) or type(e).__name__) from e

        if resp.status_code >= 400:
            raise BlobError(_error_message(resp))
        logger.info("Deleted %s", url)


def get_blob_store(settings: Optional[Settings] = None) -> Optional[BlobStore]:
    """Configured blob store, or None when no token is set."""
    settings = settings or get_settings()
    if not settings.upload_configured:
        return None
    return VercelBlobStore(
        token=settings.blob_read_write_token.strip(),
        api_url=settings.blob_api_url,
        timeout=settings.http_timeout,
    )
