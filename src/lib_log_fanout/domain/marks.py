"""Named high-resolution time marks.

Purpose
-------
Capture a timestamp under a name and later read the elapsed milliseconds,
which powers the ``(<n> ms response)`` suffix of the message builder.

Contents
--------
* :class:`TimeMarks` - per-owner mark table.

System Role
-----------
Each :class:`~lib_log_fanout.application.logger.Logger` owns one instance;
marks are never shared between loggers.
"""

from __future__ import annotations

import itertools
import time
from collections.abc import Callable

from .errors import MarkNotFoundError


class TimeMarks:
    """Record and retrieve named timestamps.

    Examples
    --------
    >>> ticks = iter([1.0, 1.25])
    >>> marks = TimeMarks(clock=lambda: next(ticks))
    >>> marks.mark('db')
    'db'
    >>> marks.demark('db')
    250.0
    >>> 'db' in marks
    False
    """

    def __init__(self, *, clock: Callable[[], float] = time.perf_counter) -> None:
        self._clock = clock
        self._marks: dict[str, float] = {}
        self._counter = itertools.count(1)

    def mark(self, name: str | None = None) -> str:
        """Store the current time under ``name`` and return the name used."""

        key = name if name is not None else f"mark-{next(self._counter)}"
        self._marks[key] = self._clock()
        return key

    def demark(self, name: str, keep: bool = False) -> float:
        """Return milliseconds elapsed since ``mark(name)``.

        Raises
        ------
        MarkNotFoundError
            If ``name`` was never marked, or was already consumed without ``keep``.
        """

        try:
            started = self._marks[name] if keep else self._marks.pop(name)
        except KeyError as exc:
            raise MarkNotFoundError(name) from exc
        return (self._clock() - started) * 1000.0

    def __contains__(self, name: object) -> bool:
        return name in self._marks

    def __len__(self) -> int:
        return len(self._marks)


__all__ = ["TimeMarks"]
