"""bodybytes - collect a streamed body into a single bytes object."""

from .core.model import SizeHint                                      # re-export
from .core.body import Body, AsyncBody
from .core.collect import (
    collect, collect_with_limit, collect_sync, collect_with_limit_sync,
)
from .io import open_body, open_body_async, SourceError


__all__ = [
    "collect", "collect_with_limit", "collect_sync", "collect_with_limit_sync",
    "open_body", "open_body_async",
    "Body", "AsyncBody", "SizeHint", "SourceError",
]
