"""Shared types for the body adapters."""

from typing import Mapping, Optional

from ..core.model import SizeHint


class SourceError(IOError):
    """Raised by a body when pulling the next chunk fails."""


DEFAULT_CHUNK_SIZE = 64 * 1024  # 64 KB


def content_length(headers: Mapping[str, str]) -> Optional[int]:
    """Parse a Content-Length header, None when missing or malformed."""
    value = headers.get('content-length')
    if not value:
        return None
    try:
        length = int(value)
    except ValueError:
        return None
    return length if length >= 0 else None


def remaining_hint(total: Optional[int], consumed: int) -> SizeHint:
    """Exact hint for a body of known `total` size, empty hint otherwise."""
    if total is None:
        return SizeHint()
    return SizeHint.exact(max(total - consumed, 0))
