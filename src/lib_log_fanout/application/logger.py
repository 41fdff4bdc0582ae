"""Per-context logger facade.

Purpose
-------
Hand out message builders bound to a level, carry context tags (package,
request id, session id), maintain the indentation stack and named time marks,
and forward emitted records to the manager.

Contents
--------
* :class:`Logger` - facade returned by :meth:`LogManager.get_logger`.

System Role
-----------
Every level of the bound level set is reachable as an attribute
(``logger.info``, ``logger.warn``, ``logger.finest`` ...) returning a fresh
:class:`~lib_log_fanout.domain.message.MessageBuilder`. Child loggers copy the
indentation stack and start time of their parent, so later changes on either
side never leak into the other.
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable
from typing import TYPE_CHECKING, Any

from lib_log_fanout.domain.levels import Level
from lib_log_fanout.domain.marks import TimeMarks
from lib_log_fanout.domain.message import MessageBuilder
from lib_log_fanout.domain.record import LogRecord

if TYPE_CHECKING:
    from lib_log_fanout.application.manager import LogManager


class Logger:
    """Context-carrying facade over a :class:`LogManager`.

    Examples
    --------
    >>> from lib_log_fanout.application.manager import LogManager
    >>> log = LogManager('min').get_logger(package='app')
    >>> log.indent('>>')
    >>> log.getdent()
    ['>>']
    >>> child = log.get_child(package='db')
    >>> child.indent(2)
    >>> (len(log.getdent()), len(child.getdent()))
    (1, 3)
    >>> child.packages
    ('app', 'db')
    """

    def __init__(
        self,
        manager: "LogManager",
        *,
        package: str | None = None,
        request_id: str | None = None,
        session_id: str | None = None,
        threshold: str | Level | None = None,
        packages: Iterable[str] = (),
        request_ids: Iterable[str] = (),
        indent: Iterable[str] = (),
        started: float | None = None,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._manager = manager
        self._packages = tuple(packages) + ((package,) if package else ())
        self._request_ids = tuple(request_ids) + ((request_id,) if request_id else ())
        self._session_id = session_id
        self._threshold: Level | None = None
        self._indent: list[str] = list(indent)
        self._timer = timer
        self._t0 = timer() if started is None else started
        self._marks = TimeMarks(clock=timer)
        if threshold is not None:
            self.threshold = threshold

    # ------------------------------------------------------------------
    # Context
    # ------------------------------------------------------------------

    @property
    def manager(self) -> "LogManager":
        return self._manager

    @property
    def packages(self) -> tuple[str, ...]:
        return self._packages

    @property
    def request_ids(self) -> tuple[str, ...]:
        return self._request_ids

    @property
    def session_id(self) -> str | None:
        return self._session_id

    @property
    def started(self) -> float:
        """Timer value captured when this logger (or its root ancestor) was created."""

        return self._t0

    @property
    def elapsed_ms(self) -> float:
        """Milliseconds since :attr:`started`."""

        return (self._timer() - self._t0) * 1000.0

    def get_child(
        self,
        *,
        package: str | None = None,
        request_id: str | None = None,
        session_id: str | None = None,
    ) -> "Logger":
        """Return a child logger.

        The child copies this logger's indentation stack, start time, package
        and request-id tags, then appends ``package``/``request_id`` if given.
        """

        return Logger(
            self._manager,
            package=package,
            request_id=request_id,
            session_id=session_id if session_id is not None else self._session_id,
            threshold=self._threshold,
            packages=self._packages,
            request_ids=self._request_ids,
            indent=list(self._indent),
            started=self._t0,
            timer=self._timer,
        )

    # ------------------------------------------------------------------
    # Thresholds
    # ------------------------------------------------------------------

    @property
    def threshold(self) -> Level:
        """Logger-specific threshold, falling back to the manager's."""

        return self._threshold if self._threshold is not None else self._manager.threshold

    @threshold.setter
    def threshold(self, value: str | int | Level) -> None:
        self._threshold = self._manager.level_set.level(value)

    def meets_threshold(self, level: str | int | Level) -> bool:
        return self._manager.meets_threshold(level, self.threshold)

    def meets_flush_threshold(self, level: str | int | Level) -> bool:
        return self._manager.meets_flush_threshold(level)

    # ------------------------------------------------------------------
    # Indentation
    # ------------------------------------------------------------------

    def indent(self, value: str | int | Iterable[str] | None = None) -> None:
        """Push indentation levels.

        A string is pushed verbatim, an integer pushes that many single spaces,
        any other iterable pushes each element, and ``None`` pushes one space.
        """

        if value is None:
            self._indent.append(" ")
        elif isinstance(value, str):
            self._indent.append(value)
        elif isinstance(value, int):
            self._indent.extend(" " for _ in range(value))
        else:
            self._indent.extend(str(item) for item in value)

    def outdent(self, n: int = 1) -> None:
        """Pop up to ``n`` indentation levels."""

        for _ in range(min(n, len(self._indent))):
            self._indent.pop()

    def nodent(self) -> None:
        """Clear the indentation stack."""

        self._indent.clear()

    def getdent(self) -> list[str]:
        """Return a copy of the indentation stack."""

        return list(self._indent)

    # ------------------------------------------------------------------
    # Timing
    # ------------------------------------------------------------------

    def mark(self, name: str | None = None) -> str:
        return self._marks.mark(name)

    def demark(self, name: str, keep: bool = False) -> float:
        return self._marks.demark(name, keep)

    # ------------------------------------------------------------------
    # Builders and emission
    # ------------------------------------------------------------------

    def builder(self, level: str | Level) -> MessageBuilder:
        """Return a fresh message builder bound to ``level``."""

        return self._manager.create_builder(level, self)

    def __getattr__(self, name: str) -> MessageBuilder:
        if name.startswith("_"):
            raise AttributeError(name)
        manager = self.__dict__.get("_manager")
        if manager is not None and manager.is_initialized and name in manager.level_set:
            return self.builder(name)
        raise AttributeError(f"{type(self).__name__!s} has no attribute or level {name!r}")

    def emit(self, record: LogRecord) -> LogRecord | None:
        """Forward ``record`` to the manager when it meets this logger's threshold.

        Records below the threshold are dropped silently and ``None`` is
        returned. Accepted records receive the indentation prefix and the
        logger's context tags before dispatch.
        """

        if not self.meets_threshold(record.level):
            return None
        if self._indent:
            record = record.with_prefix(" ".join(self._indent))
        record = record.replace(
            packages=record.packages or self._packages,
            request_ids=record.request_ids or self._request_ids,
            session_id=record.session_id if record.session_id is not None else self._session_id,
            elapsed_ms=record.elapsed_ms if record.elapsed_ms is not None else self.elapsed_ms,
        )
        return self._manager.dispatch(record)

    def log(self, level: str | Level, message: str, data: dict[str, Any] | None = None) -> LogRecord | None:
        """Emit a raw string message at ``level``."""

        resolved = self._manager.level_set.level(level)
        record = LogRecord(level=resolved, message=message, timestamp=self._manager.clock.now(), data=data)
        return self.emit(record)


__all__ = ["Logger"]
