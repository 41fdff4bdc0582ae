"""In-memory buffer transport for tests and introspection.

Purpose
-------
Keep the last *N* records as plain-text entries and expose query and
assertion helpers that fail loudly with the captured messages.

Contents
--------
* :class:`BufferEntry` - captured entry (level name, plain message, timestamp, data).
* :class:`BufferTransport` - ring-buffer sink with optional artificial setup delay.

System Role
-----------
``setup_delay_ms`` simulates a slow transport, which is how the readiness
barrier of the manager is exercised in tests.
"""

from __future__ import annotations

import asyncio
import re
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Pattern

from lib_log_fanout.adapters.base import TransportBase
from lib_log_fanout.domain.errors import BufferAssertionError
from lib_log_fanout.domain.record import LogRecord
from lib_log_fanout.domain.ring_buffer import RingBuffer


@dataclass(slots=True, frozen=True)
class BufferEntry:
    """One captured record."""

    level: str
    message: str
    timestamp: datetime
    data: Mapping[str, Any] | None
    record: LogRecord


def _bullets(messages: list[str]) -> str:
    return "\n".join(f"  - {message}" for message in messages)


class BufferTransport(TransportBase):
    """Retain the most recent entries in memory.

    Examples
    --------
    >>> import asyncio
    >>> from lib_log_fanout.domain.levels import Level
    >>> buffer = BufferTransport(max_entries=2)
    >>> asyncio.run(buffer.setup())
    >>> for text in ('one', 'two', 'three'):
    ...     buffer.emit(LogRecord(Level('INFO', 3), text))
    >>> buffer.get_messages()
    ['two', 'three']
    >>> str(buffer)
    'Buffer[2/2]'
    """

    kind = "buffer"

    def __init__(
        self,
        *,
        max_entries: int = 1000,
        setup_delay_ms: float = 0,
        threshold: str | None = None,
        name: str | None = None,
    ) -> None:
        super().__init__(name=name, threshold=threshold)
        self._entries: RingBuffer[BufferEntry] = RingBuffer(max_entries=max_entries)
        self._setup_delay_ms = setup_delay_ms

    @property
    def max_entries(self) -> int:
        return self._entries.max_entries

    async def _open(self) -> None:
        if self._setup_delay_ms > 0:
            await asyncio.sleep(self._setup_delay_ms / 1000)

    def _write(self, record: LogRecord) -> None:
        self._entries.append(
            BufferEntry(
                level=record.level.name,
                message=record.text,
                timestamp=record.timestamp,
                data=record.data,
                record=record,
            )
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def get_entries(self) -> list[BufferEntry]:
        return self._entries.snapshot()

    def get_entries_by_level(self, level: str) -> list[BufferEntry]:
        wanted = level.strip().upper()
        return [entry for entry in self._entries if entry.level == wanted]

    def get_last_entry(self) -> BufferEntry | None:
        return self._entries.last()

    def get_messages(self) -> list[str]:
        return [entry.message for entry in self._entries]

    def get_all_text(self) -> str:
        return "\n".join(self.get_messages())

    def contains(self, text: str) -> bool:
        return any(text in entry.message for entry in self._entries)

    def matches(self, pattern: str | Pattern[str]) -> bool:
        compiled = re.compile(pattern) if isinstance(pattern, str) else pattern
        return any(compiled.search(entry.message) for entry in self._entries)

    @property
    def count(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    # ------------------------------------------------------------------
    # Assertions
    # ------------------------------------------------------------------

    def assert_contains(self, text: str) -> None:
        """Raise :class:`BufferAssertionError` unless some message contains ``text``."""

        if not self.contains(text):
            raise BufferAssertionError(
                f'Expected log to contain "{text}" but it was not found.\n'
                f"Captured messages:\n{_bullets(self.get_messages())}"
            )

    def assert_count(self, expected: int) -> None:
        """Raise :class:`BufferAssertionError` unless exactly ``expected`` entries are held."""

        actual = self.count
        if actual != expected:
            raise BufferAssertionError(
                f"Expected {expected} log entries but found {actual}.\n"
                f"Messages: {', '.join(self.get_messages())}"
            )

    def assert_matches(self, pattern: str | Pattern[str]) -> None:
        """Raise :class:`BufferAssertionError` unless some message matches ``pattern``."""

        if not self.matches(pattern):
            shown = pattern if isinstance(pattern, str) else pattern.pattern
            raise BufferAssertionError(
                f"Expected log to match pattern {shown} but no match was found.\n"
                f"Captured messages:\n{_bullets(self.get_messages())}"
            )

    def __str__(self) -> str:
        return f"Buffer[{self.count}/{self.max_entries}]"


__all__ = ["BufferEntry", "BufferTransport"]
