"""Accumulation buffer used when a body has to be flattened."""

RESERVE_CAP = 16 * 1024  # 16 KB


def reserve_capacity(first_len: int, second_len: int, hint_lower: int) -> int:
    """Capacity for a buffer that already holds two chunks.

    The remaining-size hint is capped at RESERVE_CAP so a large or bogus hint
    cannot make us over-reserve.
    """
    return first_len + second_len + min(hint_lower, RESERVE_CAP)


class AccumulationBuffer:
    """Presized, growable byte buffer owned by a single collection call."""

    __slots__ = ("_data", "_length")

    def __init__(self, capacity: int = 0):
        if capacity < 0:
            raise ValueError("Capacity cannot be negative")
        self._data = bytearray(capacity)
        self._length = 0

    def __len__(self) -> int:
        return self._length

    @property
    def capacity(self) -> int:
        return len(self._data)

    def put(self, chunk) -> None:
        """Append a bytes-like chunk, growing past the reserved capacity if needed."""
        end = self._length + len(chunk)
        # slice assignment past the end of the bytearray extends it
        self._data[self._length:end] = chunk
        self._length = end

    def freeze(self) -> bytes:
        """Drop the unused reserve and return the contents as immutable bytes."""
        del self._data[self._length:]
        return bytes(self._data)
