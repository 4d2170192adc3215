from __future__ import annotations
from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class SizeHint:
    """Best-effort estimate of the bytes a body has left to yield."""

    lower: int = 0
    upper: int | None = None

    def __post_init__(self) -> None:
        if self.lower < 0:
            raise ValueError("SizeHint lower bound cannot be negative")
        if self.upper is not None and self.upper < self.lower:
            raise ValueError(f"SizeHint upper bound {self.upper} is below lower bound {self.lower}")

    @classmethod
    def exact(cls, value: int) -> SizeHint:
        return cls(value, value)

    @property
    def exact_size(self) -> int | None:
        return self.lower if self.upper == self.lower else None


@dataclass(slots=True)
class Report:
    success: bool
    source: str
    body: bytes | None
    error: str | None
    chunks_read: int = 0       # filled from the body's counters
    bytes_read: int = 0
    max_length: int | None = None
