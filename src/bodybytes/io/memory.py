"""In-memory bodies over an already-available list of chunks."""

from typing import Iterable, Iterator, Union

from ..core.body import Chunk
from ..core.model import SizeHint
from .base import DEFAULT_CHUNK_SIZE


def iter_chunks(data: Union[bytes, bytearray, memoryview], chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[memoryview]:
    """Yield zero-copy memoryview slices of `data`, `chunk_size` bytes each."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    mv = memoryview(data)
    for i in range(0, len(mv), chunk_size):
        yield mv[i:i + chunk_size]


class MemoryBody:
    """Synchronous body serving a fixed sequence of chunks."""

    def __init__(self, chunks: Iterable[Chunk]):
        self._chunks = list(chunks)
        self._remaining = sum(len(c) for c in self._chunks)
        self._pos = 0
        self.chunks_read = 0
        self.bytes_read = 0

    def __iter__(self):
        return self

    def __next__(self) -> Chunk:
        if self._pos >= len(self._chunks):
            raise StopIteration
        chunk = self._chunks[self._pos]
        self._pos += 1
        self.chunks_read += 1
        self.bytes_read += len(chunk)
        self._remaining -= len(chunk)
        return chunk

    def size_hint(self) -> SizeHint:
        return SizeHint.exact(self._remaining)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass


class MemoryAsyncBody:
    """Asynchronous body - thin wrapper around MemoryBody."""

    def __init__(self, chunks: Iterable[Chunk]):
        self._sync_body = MemoryBody(chunks)

    @property
    def chunks_read(self) -> int:
        return self._sync_body.chunks_read

    @property
    def bytes_read(self) -> int:
        return self._sync_body.bytes_read

    def __aiter__(self):
        return self

    async def __anext__(self) -> Chunk:
        try:
            return next(self._sync_body)
        except StopIteration:
            raise StopAsyncIteration from None

    def size_hint(self) -> SizeHint:
        return self._sync_body.size_hint()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        pass
