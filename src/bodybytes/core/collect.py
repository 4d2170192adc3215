"""Flatten a stream of body chunks into a single bytes object.

Both variants keep the zero-copy fast path for a body that arrives in one
chunk: that chunk is handed back as-is and no buffer is allocated. Only when
a second chunk shows up do we reserve an AccumulationBuffer.

Exceptions raised by the body while pulling a chunk are never caught here,
so the caller gets the body's own error and no partial result.
"""

from __future__ import annotations
import logging
from typing import AsyncIterable, Iterable

from .body import Chunk, size_hint_lower
from .buffer import AccumulationBuffer, reserve_capacity

logger = logging.getLogger(__name__)


def _freeze(chunk: Chunk) -> bytes:
    # bytes is immutable, so returning the chunk itself is safe
    if isinstance(chunk, bytes):
        return chunk
    return bytes(chunk)


def _check_max_length(max_length: int) -> None:
    if max_length < 0:
        raise ValueError("max_length cannot be negative")


def _flatten_two(body, first: Chunk, second: Chunk) -> AccumulationBuffer:
    # the hint is read after two pulls, so it covers what is still to come
    capacity = reserve_capacity(len(first), len(second), size_hint_lower(body))
    logger.debug("Flattening multi-chunk body, reserving %d bytes", capacity)
    buf = AccumulationBuffer(capacity)
    buf.put(first)
    buf.put(second)
    return buf


# --------------------------- async --------------------------------- #
async def collect(body: AsyncIterable[Chunk]) -> bytes:
    """Read every chunk of `body` and return them concatenated."""
    chunks = aiter(body)

    first = await anext(chunks, None)
    if first is None:
        logger.debug("Body is empty")
        return b""

    second = await anext(chunks, None)
    if second is None:
        logger.debug("Single-chunk body of %d bytes", len(first))
        return _freeze(first)

    buf = _flatten_two(body, first, second)
    async for chunk in chunks:
        buf.put(chunk)
    return buf.freeze()


async def collect_with_limit(body: AsyncIterable[Chunk], max_length: int) -> bytes:
    """Read chunks of `body` until at least `max_length` bytes were collected.

    Truncation happens at chunk granularity: the chunk that reaches the
    threshold is kept whole, so the result may be longer than `max_length`.
    No chunk past that one is pulled from the body.
    """
    _check_max_length(max_length)
    chunks = aiter(body)

    first = await anext(chunks, None)
    if first is None:
        logger.debug("Body is empty")
        return b""

    if len(first) >= max_length:
        logger.debug("First chunk of %d bytes reaches max_length=%d", len(first), max_length)
        return _freeze(first)

    second = await anext(chunks, None)
    if second is None:
        logger.debug("Single-chunk body of %d bytes", len(first))
        return _freeze(first)

    buf = _flatten_two(body, first, second)
    if len(buf) >= max_length:
        logger.debug("First two chunks reach max_length=%d", max_length)
        return buf.freeze()

    async for chunk in chunks:
        buf.put(chunk)
        if len(buf) >= max_length:
            logger.debug("Stopped at %d bytes, max_length=%d", len(buf), max_length)
            break
    return buf.freeze()


# ---------------------------- sync --------------------------------- #
def collect_sync(body: Iterable[Chunk]) -> bytes:
    """Synchronous version of `collect`."""
    chunks = iter(body)

    first = next(chunks, None)
    if first is None:
        logger.debug("Body is empty")
        return b""

    second = next(chunks, None)
    if second is None:
        logger.debug("Single-chunk body of %d bytes", len(first))
        return _freeze(first)

    buf = _flatten_two(body, first, second)
    for chunk in chunks:
        buf.put(chunk)
    return buf.freeze()


def collect_with_limit_sync(body: Iterable[Chunk], max_length: int) -> bytes:
    """Synchronous version of `collect_with_limit`."""
    _check_max_length(max_length)
    chunks = iter(body)

    first = next(chunks, None)
    if first is None:
        logger.debug("Body is empty")
        return b""

    if len(first) >= max_length:
        logger.debug("First chunk of %d bytes reaches max_length=%d", len(first), max_length)
        return _freeze(first)

    second = next(chunks, None)
    if second is None:
        logger.debug("Single-chunk body of %d bytes", len(first))
        return _freeze(first)

    buf = _flatten_two(body, first, second)
    if len(buf) >= max_length:
        logger.debug("First two chunks reach max_length=%d", max_length)
        return buf.freeze()

    for chunk in chunks:
        buf.put(chunk)
        if len(buf) >= max_length:
            logger.debug("Stopped at %d bytes, max_length=%d", len(buf), max_length)
            break
    return buf.freeze()
