"""Protocols for the chunk sources the collectors consume."""

from typing import AsyncIterator, Iterator, Protocol, Union, runtime_checkable

from .model import SizeHint

Chunk = Union[bytes, bytearray, memoryview]


@runtime_checkable
class Body(Protocol):
    """Protocol for synchronous chunk sources."""

    def __iter__(self) -> Iterator[Chunk]:
        ...

    def size_hint(self) -> SizeHint:
        """Best-effort bounds on the bytes not yet yielded."""
        ...


@runtime_checkable
class AsyncBody(Protocol):
    """Protocol for asynchronous chunk sources."""

    def __aiter__(self) -> AsyncIterator[Chunk]:
        ...

    def size_hint(self) -> SizeHint:
        """Best-effort bounds on the bytes not yet yielded."""
        ...


def size_hint_lower(body) -> int:
    """Lower bound of the remaining size, 0 for sources without a hint.

    Plain iterables and generators are valid bodies too; they just carry no
    hint.
    """
    size_hint = getattr(body, "size_hint", None)
    if size_hint is None:
        return 0
    return size_hint().lower
