"""I/O layer for bodybytes - chunk sources over memory, files and HTTP."""

# Re-export these for import convenience
from .base import SourceError, DEFAULT_CHUNK_SIZE
from .memory import MemoryBody, MemoryAsyncBody, iter_chunks
from .local import open_local_body, open_local_body_async
from .http_sync import open_http_body
from .http_async import open_http_body_async, close_global_client

_BYTES_LIKE = (bytes, bytearray, memoryview)


def open_body(source, chunk_size: int = DEFAULT_CHUNK_SIZE):
    """Factory function to create the appropriate sync body based on source type."""
    if isinstance(source, _BYTES_LIKE):
        return MemoryBody(iter_chunks(source, chunk_size))

    if hasattr(source, 'read'):  # BinaryIO
        return open_local_body(source, chunk_size)

    source_str = str(source)
    if source_str.startswith(('http://', 'https://')):
        return open_http_body(source_str, chunk_size)
    else:
        return open_local_body(source, chunk_size)


async def open_body_async(source, chunk_size: int = DEFAULT_CHUNK_SIZE):
    """Factory function to create the appropriate async body based on source type."""
    if isinstance(source, _BYTES_LIKE):
        return MemoryAsyncBody(iter_chunks(source, chunk_size))

    if hasattr(source, 'read'):  # BinaryIO
        return await open_local_body_async(source, chunk_size)

    source_str = str(source)
    if source_str.startswith(('http://', 'https://')):
        return await open_http_body_async(source_str, chunk_size)
    else:
        return await open_local_body_async(source, chunk_size)
