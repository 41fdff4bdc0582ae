"""Bounded FIFO retaining the most recent items.

Purpose
-------
Provide the eviction discipline of the in-memory buffer transport: once full,
every append drops the oldest item.

Contents
--------
* :class:`RingBuffer` - generic fixed-capacity buffer with iteration helpers.
"""

from __future__ import annotations

from collections import deque
from typing import Deque, Generic, Iterable, Iterator, TypeVar

T = TypeVar("T")


class RingBuffer(Generic[T]):
    """Fixed-size buffer keeping insertion order and evicting the oldest item.

    Examples
    --------
    >>> buffer = RingBuffer(max_entries=3)
    >>> buffer.extend([1, 2, 3, 4, 5])
    >>> buffer.snapshot()
    [3, 4, 5]
    """

    def __init__(self, *, max_entries: int) -> None:
        if max_entries <= 0:
            raise ValueError("max_entries must be positive")
        self._max_entries = max_entries
        self._buffer: Deque[T] = deque(maxlen=max_entries)

    @property
    def max_entries(self) -> int:
        """Return the configured capacity."""

        return self._max_entries

    @property
    def is_full(self) -> bool:
        return len(self._buffer) == self._max_entries

    def append(self, item: T) -> None:
        """Append ``item``, evicting the oldest entry when full."""

        self._buffer.append(item)

    def extend(self, items: Iterable[T]) -> None:
        """Append ``items`` preserving their order."""
        for item in items:
            self.append(item)

    def snapshot(self) -> list[T]:
        """Return a copy of the current contents, oldest first."""

        return list(self._buffer)

    def last(self) -> T | None:
        return self._buffer[-1] if self._buffer else None

    def __iter__(self) -> Iterator[T]:
        return iter(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)

    def clear(self) -> None:
        """Remove all entries."""
        self._buffer.clear()


__all__ = ["RingBuffer"]
