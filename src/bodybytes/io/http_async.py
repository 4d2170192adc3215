"""Asynchronous HTTP body using httpx."""

import logging
from typing import Optional

import httpx

from ..core.model import SizeHint
from .base import DEFAULT_CHUNK_SIZE, SourceError, content_length, remaining_hint

logger = logging.getLogger(__name__)


# Global async client
_client: Optional[httpx.AsyncClient] = None


def _get_client() -> httpx.AsyncClient:
    """Get or create the global httpx AsyncClient."""
    global _client
    if _client is None:
        _client = httpx.AsyncClient(timeout=60.0, follow_redirects=True)
    return _client


class HTTPAsyncBody:
    """Asynchronous body streaming the response of a GET request."""

    def __init__(self, url: str, chunk_size: int = DEFAULT_CHUNK_SIZE, client: Optional[httpx.AsyncClient] = None):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.url = url
        self.chunk_size = chunk_size
        self.chunks_read = 0
        self.bytes_read = 0
        self.content_length: Optional[int] = None
        self._client = client
        self._response: Optional[httpx.Response] = None
        self._chunks = None

    async def _ensure_open(self):
        """Send the GET request if not already done."""
        if self._response is not None:
            return

        client = self._client or _get_client()
        try:
            request = client.build_request("GET", self.url)
            # redirects are followed, as in the requests body
            response = await client.send(request, stream=True, follow_redirects=True)
        except httpx.RequestError as e:
            raise SourceError(f"GET request failed: {e}") from e

        if response.status_code >= 400:
            await response.aclose()
            raise SourceError(f"GET request failed with status {response.status_code}")

        self._response = response
        self.content_length = content_length(response.headers)
        self._chunks = response.aiter_bytes(chunk_size=self.chunk_size)
        logger.debug("Streaming %s (content-length=%s)", self.url, self.content_length)

    def __aiter__(self):
        return self

    async def __anext__(self) -> bytes:
        await self._ensure_open()
        try:
            chunk = await self._chunks.__anext__()
        except httpx.HTTPError as e:
            raise SourceError(f"Reading response body failed: {e}") from e
        self.chunks_read += 1
        self.bytes_read += len(chunk)
        return chunk

    def size_hint(self) -> SizeHint:
        """Remaining bytes on the wire, from Content-Length."""
        if self._response is None:
            return SizeHint()
        # num_bytes_downloaded counts undecoded bytes, the same unit as Content-Length
        return remaining_hint(self.content_length, self._response.num_bytes_downloaded)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.aclose()

    async def aclose(self):
        """Release the connection; the client may be shared and stays open."""
        if self._response is not None:
            await self._response.aclose()


async def open_http_body_async(url: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> HTTPAsyncBody:
    """Create an asynchronous HTTP body."""
    return HTTPAsyncBody(url, chunk_size)


async def close_global_client():
    """Close the global httpx client. Call this at application shutdown."""
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None
