"""Local file bodies."""

import asyncio
import io
import logging
import os
from pathlib import Path
from typing import BinaryIO, Optional, Union

from ..core.model import SizeHint
from .base import DEFAULT_CHUNK_SIZE, remaining_hint

logger = logging.getLogger(__name__)


class LocalBody:
    """Synchronous body reading a local file in fixed-size chunks."""

    def __init__(self, source: Union[Path, str, BinaryIO], chunk_size: int = DEFAULT_CHUNK_SIZE):
        if chunk_size <= 0:
            raise ValueError("chunk_size must be positive")
        self.chunk_size = chunk_size
        self.chunks_read = 0
        self.bytes_read = 0
        self._should_close_file = False

        if hasattr(source, 'read'):
            # BinaryIO object, read from its current position
            self._file = source
        else:
            # Path or str
            self._file = open(source, 'rb')
            self._should_close_file = True
            logger.debug("Opened %s for reading", source)

        self._size = self._remaining_at_start()

    def _remaining_at_start(self) -> Optional[int]:
        """Bytes between the current position and EOF, None if unknown."""
        try:
            if not self._file.seekable():
                return None
            current_pos = self._file.tell()
            end = self._file.seek(0, os.SEEK_END)
            self._file.seek(current_pos)
        except (io.UnsupportedOperation, OSError):
            return None
        return max(end - current_pos, 0)

    def __iter__(self):
        return self

    def __next__(self) -> bytes:
        if self._file is None:
            raise ValueError("Body is closed")
        chunk = self._file.read(self.chunk_size)
        if not chunk:
            raise StopIteration
        self.chunks_read += 1
        self.bytes_read += len(chunk)
        return chunk

    def size_hint(self) -> SizeHint:
        return remaining_hint(self._size, self.bytes_read)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        """Close the file if we opened it."""
        if self._should_close_file and self._file is not None:
            self._file.close()
        self._file = None


class LocalAsyncBody:
    """Asynchronous local file body - thin wrapper around sync body."""

    def __init__(self, source: Union[Path, str, BinaryIO], chunk_size: int = DEFAULT_CHUNK_SIZE):
        self._sync_body = LocalBody(source, chunk_size)

    @property
    def chunks_read(self) -> int:
        return self._sync_body.chunks_read

    @property
    def bytes_read(self) -> int:
        return self._sync_body.bytes_read

    def __aiter__(self):
        return self

    async def __anext__(self) -> bytes:
        chunk = await asyncio.to_thread(self._read_chunk)
        if chunk is None:
            raise StopAsyncIteration
        return chunk

    def _read_chunk(self) -> Optional[bytes]:
        # StopIteration cannot cross a thread boundary into a coroutine
        return next(self._sync_body, None)

    def size_hint(self) -> SizeHint:
        return self._sync_body.size_hint()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def close(self):
        """Close the underlying sync body."""
        await asyncio.to_thread(self._sync_body.close)


def open_local_body(source: Union[Path, str, BinaryIO], chunk_size: int = DEFAULT_CHUNK_SIZE) -> LocalBody:
    """Create a synchronous local file body."""
    return LocalBody(source, chunk_size)


async def open_local_body_async(source: Union[Path, str, BinaryIO], chunk_size: int = DEFAULT_CHUNK_SIZE) -> LocalAsyncBody:
    """Create an asynchronous local file body."""
    return LocalAsyncBody(source, chunk_size)
