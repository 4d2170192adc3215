"""Synchronous HTTP body using requests."""

import logging
from typing import Optional

import requests

from ..core.model import SizeHint
from .base import DEFAULT_CHUNK_SIZE, SourceError, content_length, remaining_hint

logger = logging.getLogger(__name__)


# Module-level session for connection pooling
_session = None


def _get_session() -> requests.Session:
    """Get or create the global requests session."""
    global _session
    if _session is None:
        _session = requests.Session()
    return _session


class HTTPBody:
    """Synchronous body streaming the response of a GET request."""

    def __init__(self, url: str, chunk_size: int = DEFAULT_CHUNK_SIZE, session: Optional[requests.Session] = None):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.url = url
        self.chunk_size = chunk_size
        self.chunks_read = 0
        self.bytes_read = 0
        self.content_length: Optional[int] = None
        self._session = session or _get_session()
        self._response: Optional[requests.Response] = None
        self._chunks = None

    def _ensure_open(self):
        """Send the GET request if not already done."""
        if self._response is not None:
            return

        try:
            response = self._session.get(self.url, stream=True, timeout=30)
        except requests.RequestException as e:
            raise SourceError(f"GET request failed: {e}") from e

        if response.status_code >= 400:
            response.close()
            raise SourceError(f"GET request failed with status {response.status_code}")

        self._response = response
        self.content_length = content_length(response.headers)
        self._chunks = response.iter_content(chunk_size=self.chunk_size)
        logger.debug("Streaming %s (content-length=%s)", self.url, self.content_length)

    def __iter__(self):
        return self

    def __next__(self) -> bytes:
        self._ensure_open()
        try:
            chunk = next(self._chunks)
        except requests.RequestException as e:
            raise SourceError(f"Reading response body failed: {e}") from e
        self.chunks_read += 1
        self.bytes_read += len(chunk)
        return chunk

    def size_hint(self) -> SizeHint:
        """Remaining bytes on the wire, from Content-Length."""
        if self._response is None:
            return SizeHint()
        # raw.tell() counts undecoded bytes, the same unit as Content-Length
        return remaining_hint(self.content_length, self._response.raw.tell())

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Release the connection; the session is shared and stays open."""
        if self._response is not None:
            self._response.close()


def open_http_body(url: str, chunk_size: int = DEFAULT_CHUNK_SIZE) -> HTTPBody:
    """Create a synchronous HTTP body."""
    return HTTPBody(url, chunk_size)
