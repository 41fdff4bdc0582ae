"""Log manager: threshold filter, readiness barrier and ordered fan-out.

Purpose
-------
Own the bound level set, the active threshold and the registered transports,
and guarantee that every transport observes the same records in the same
order.

Contents
--------
* :class:`ManagerState` - explicit lifecycle enum.
* :class:`LogManager` - dispatch pipeline with a pre-barrier FIFO queue.

System Role
-----------
Records emitted before every registered transport finished ``setup()`` are
held in one manager-owned :class:`collections.deque`. :meth:`LogManager.start`
awaits all setups concurrently and then drains the queue in FIFO order, each
record going to every transport in registration order. Transports added after
the barrier opened only receive records that arrive after they joined; those
are held in a queue local to the late joiner until its own setup completes.

Alignment Notes
---------------
Internal delivery failures are logged through :mod:`logging` and reported to
the optional diagnostic hook, never raised into the emitting call site.
"""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable, Iterable
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Deque

from lib_log_fanout.application.logger import Logger
from lib_log_fanout.application.ports.time import ClockPort
from lib_log_fanout.application.ports.transport import TransportPort
from lib_log_fanout.domain.display import DisplayOptions
from lib_log_fanout.domain.errors import ConfigurationError, ManagerClosedError
from lib_log_fanout.domain.levels import STD_LEVELS, Level, LevelSet, level_set_from_name
from lib_log_fanout.domain.message import BuilderFactory, MessageBuilder, MessageEmitter
from lib_log_fanout.domain.record import LogRecord


LOGGER = logging.getLogger(__name__)

DiagnosticHook = Callable[[str, dict[str, Any]], None]


class ManagerState(Enum):
    """Lifecycle of a :class:`LogManager`."""

    CONSTRUCTING = "constructing"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"
    CLOSED = "closed"


class _SystemClock:
    def now(self) -> datetime:
        return datetime.now(timezone.utc)


def _coerce_level_set(levels: LevelSet | Iterable[Level] | str) -> LevelSet:
    if isinstance(levels, LevelSet):
        return levels
    if isinstance(levels, str):
        return level_set_from_name(levels)
    return LevelSet(levels)


class LogManager:
    """Dispatch records from loggers to transports.

    Parameters
    ----------
    levels:
        A :class:`LevelSet`, a table of :class:`Level` rows, or the name of a
        shipped table. ``None`` leaves the manager unbound until :meth:`init`
        or :meth:`get_logger` binds one.
    threshold:
        Level name or :class:`Level`; defaults to the set's default level.
    display:
        Default :class:`DisplayOptions` handed to transports created by the
        runtime composition helpers.
    builder_factory:
        Callable producing message builders; defaults to :class:`MessageBuilder`.
    default_transport:
        Factory invoked by :meth:`start` when loggers were requested but no
        transport was registered.
    diagnostic:
        Optional hook receiving ``(name, payload)`` for delivery failures.
    """

    def __init__(
        self,
        levels: LevelSet | Iterable[Level] | str | None = None,
        *,
        threshold: str | Level | None = None,
        display: DisplayOptions | None = None,
        builder_factory: BuilderFactory = MessageBuilder,
        clock: ClockPort | None = None,
        default_transport: Callable[[], TransportPort] | None = None,
        diagnostic: DiagnosticHook | None = None,
    ) -> None:
        self._levels: LevelSet | None = None
        self._threshold: Level | None = None
        self._display = display or DisplayOptions()
        self._builder_factory = builder_factory
        self._clock: ClockPort = clock or _SystemClock()
        self._default_transport = default_transport
        self._diagnostic = diagnostic
        self._state = ManagerState.CONSTRUCTING
        self._transports: list[TransportPort] = []
        self._pending: Deque[LogRecord] = deque()
        self._barrier_tasks: list[asyncio.Future[None]] = []
        self._late_backlog: dict[int, Deque[LogRecord]] = {}
        self._late_tasks: list[asyncio.Task[None]] = []
        self._wants_default_transport = False
        if levels is not None:
            self.init(levels)
        if threshold is not None:
            self.threshold = threshold

    # ------------------------------------------------------------------
    # Levels and threshold
    # ------------------------------------------------------------------

    def init(self, levels: LevelSet | Iterable[Level] | str) -> "LogManager":
        """Bind a level set and reset the threshold to its default level."""

        if self._state is not ManagerState.CONSTRUCTING:
            raise ConfigurationError("Levels can only be bound before start()")
        self._levels = _coerce_level_set(levels)
        self._threshold = self._levels.default_level
        return self

    @property
    def is_initialized(self) -> bool:
        return self._levels is not None

    @property
    def level_set(self) -> LevelSet:
        """Return the bound :class:`LevelSet` or raise :class:`ConfigurationError`."""

        if self._levels is None:
            raise ConfigurationError(
                "Methods init() or get_logger() must be called before using log levels."
            )
        return self._levels

    @property
    def threshold(self) -> Level:
        if self._threshold is None:
            raise ConfigurationError(
                "Methods init() or get_logger() must be called before reading the log level threshold."
            )
        return self._threshold

    @threshold.setter
    def threshold(self, value: str | int | Level) -> None:
        if self._levels is None:
            raise ConfigurationError(
                "Methods init() or get_logger() must be called before setting log level threshold."
            )
        self._threshold = self._levels.level(value)

    def meets_threshold(self, level: str | int | Level, threshold: str | int | Level | None = None) -> bool:
        """Return ``True`` when ``level`` passes ``threshold`` (default: the manager's)."""

        levels = self.level_set
        return levels.meets_threshold(level, self.threshold if threshold is None else threshold)

    def meets_flush_threshold(self, level: str | int | Level) -> bool:
        return self.level_set.meets_flush_threshold(level)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def state(self) -> ManagerState:
        return self._state

    @property
    def transports(self) -> tuple[TransportPort, ...]:
        return tuple(self._transports)

    @property
    def pending(self) -> int:
        """Number of records held behind the readiness barrier."""

        return len(self._pending)

    @property
    def display(self) -> DisplayOptions:
        return self._display

    @property
    def clock(self) -> ClockPort:
        return self._clock

    def all_ready(self) -> bool:
        """Return ``True`` when every registered transport reports ready."""

        return all(transport.ready for transport in self._transports)

    # ------------------------------------------------------------------
    # Loggers and builders
    # ------------------------------------------------------------------

    def get_logger(self, **options: Any) -> Logger:
        """Return a root :class:`Logger`, binding the standard levels when unbound.

        ``options`` are forwarded to :class:`Logger` (``package``, ``request_id``,
        ``session_id``, ``threshold``).
        """

        if self._levels is None:
            self.init(LevelSet(STD_LEVELS, name="std"))
        if self._state is ManagerState.CONSTRUCTING and not self._transports:
            self._wants_default_transport = True
        return Logger(self, **options)

    def create_builder(self, level: str | Level, emitter: MessageEmitter | None = None) -> MessageBuilder:
        """Return a message builder bound to ``level`` and ``emitter``."""

        resolved = self.level_set.level(level)
        return self._builder_factory(resolved, emitter, clock=self._clock.now)

    # ------------------------------------------------------------------
    # Transport registry
    # ------------------------------------------------------------------

    def add_transport(self, transport: TransportPort) -> TransportPort:
        """Register ``transport``; insertion order is dispatch order.

        Before :meth:`start` the transport joins the readiness barrier. While
        starting, its setup is awaited by the running :meth:`start`. Once
        running, the transport becomes a late joiner: it receives only records
        dispatched after this call, buffered locally until its setup completes.
        """

        if self._state in (ManagerState.STOPPING, ManagerState.CLOSED):
            raise ManagerClosedError("Cannot add a transport to a closed LogManager")
        if any(existing is transport for existing in self._transports):
            return transport
        self._transports.append(transport)
        self._bind_levels(transport)
        if self._state is ManagerState.STARTING:
            self._barrier_tasks.append(asyncio.ensure_future(transport.setup()))
        elif self._state is ManagerState.RUNNING:
            self._late_backlog[id(transport)] = deque()
            self._late_tasks.append(asyncio.ensure_future(self._join_late(transport)))
        return transport

    def _bind_levels(self, transport: TransportPort) -> None:
        binder = getattr(transport, "bind_levels", None)
        if self._levels is not None and callable(binder):
            binder(self._levels)

    async def remove_transport(self, transport: TransportPort) -> None:
        """Unregister ``transport`` and destroy it."""

        self._transports = [existing for existing in self._transports if existing is not transport]
        self._late_backlog.pop(id(transport), None)
        await transport.destroy()

    async def _join_late(self, transport: TransportPort) -> None:
        try:
            await transport.setup()
        except Exception as exc:
            LOGGER.error("Late transport %s failed during setup; detaching", _name(transport), exc_info=exc)
            self._emit_diagnostic("transport_setup_failed", {"transport": _name(transport), "error": str(exc)})
            self._late_backlog.pop(id(transport), None)
            self._transports = [existing for existing in self._transports if existing is not transport]
            return
        backlog = self._late_backlog.pop(id(transport), None)
        while backlog:
            self._emit_to(transport, backlog.popleft())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Await every transport's setup, then open the barrier and drain the queue.

        Raises
        ------
        ManagerClosedError
            If the manager is stopping or closed.
        Exception
            The first setup failure; the manager then stays ``STARTING`` and
            keeps queuing records.
        """

        if self._state in (ManagerState.STOPPING, ManagerState.CLOSED):
            raise ManagerClosedError("Cannot start a closed LogManager")
        if self._state is ManagerState.RUNNING:
            return
        if self._levels is None:
            self.init(LevelSet(STD_LEVELS, name="std"))
        if not self._transports and self._wants_default_transport and self._default_transport is not None:
            self._transports.append(self._default_transport())
        for transport in self._transports:
            self._bind_levels(transport)
        self._state = ManagerState.STARTING
        self._barrier_tasks = [asyncio.ensure_future(t.setup()) for t in self._transports if not t.ready]
        while True:
            outstanding = [task for task in self._barrier_tasks if not task.done()]
            if not outstanding:
                break
            await asyncio.gather(*outstanding)
        if self._state is not ManagerState.STARTING:
            # close() took over while setups were pending and owns the queue.
            return
        for task in self._barrier_tasks:
            task.result()
        self._barrier_tasks = []
        self._state = ManagerState.RUNNING
        self._drain()

    async def flush(self) -> None:
        """Ask every ready transport to deliver buffered output.

        All transports are flushed even when one fails; the first failure is
        raised afterwards.
        """

        if self._state is ManagerState.RUNNING:
            self._drain()
        errors: list[Exception] = []
        for transport in self._transports:
            if not transport.ready:
                continue
            try:
                await transport.flush()
            except Exception as exc:
                LOGGER.error("Transport %s failed to flush", _name(transport), exc_info=exc)
                errors.append(exc)
        if errors:
            raise errors[0]

    async def close(self) -> None:
        """Drain queues, then stop and destroy every transport.

        Raises
        ------
        ManagerClosedError
            If the manager was already closed.
        TransportDeliveryError
            The first delivery failure reported by a transport's ``stop``; it
            is raised only after every transport was stopped and destroyed.
        """

        if self._state in (ManagerState.STOPPING, ManagerState.CLOSED):
            raise ManagerClosedError("LogManager is already closed")
        previous = self._state
        self._state = ManagerState.STOPPING
        if previous is ManagerState.CONSTRUCTING and self._pending:
            LOGGER.warning(
                "LogManager closed before start(); %d queued record(s) were never delivered",
                len(self._pending),
            )
        if self._barrier_tasks or self._late_tasks:
            await asyncio.gather(*self._barrier_tasks, *self._late_tasks, return_exceptions=True)
        self._barrier_tasks = []
        self._late_tasks = []
        if previous is ManagerState.CONSTRUCTING:
            self._pending.clear()
        elif all(transport.ready for transport in self._transports):
            self._drain()
        elif self._pending:
            LOGGER.warning(
                "LogManager closed with %d queued record(s) undelivered; not every transport finished setup",
                len(self._pending),
            )
            self._pending.clear()

        errors: list[Exception] = []
        for transport in self._transports:
            try:
                await transport.stop()
            except Exception as exc:
                LOGGER.error("Transport %s failed while stopping", _name(transport), exc_info=exc)
                errors.append(exc)
        for transport in self._transports:
            try:
                await transport.destroy()
            except Exception as exc:
                LOGGER.error("Transport %s failed while being destroyed", _name(transport), exc_info=exc)
                errors.append(exc)
        self._state = ManagerState.CLOSED
        if errors:
            raise errors[0]

    async def stop(self) -> None:
        """Alias of :meth:`close`."""

        await self.close()

    async def __aenter__(self) -> "LogManager":
        await self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.close()

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def dispatch(self, record: LogRecord) -> LogRecord | None:
        """Filter ``record`` by threshold and queue or fan it out.

        Returns the record when accepted, ``None`` when it was below the
        threshold.

        Raises
        ------
        ManagerClosedError
            If the manager is stopping or closed.
        """

        if self._state in (ManagerState.STOPPING, ManagerState.CLOSED):
            raise ManagerClosedError("LogManager is closed; record rejected")
        if not self.level_set.meets_threshold(record.level, self.threshold):
            return None
        if self._state is not ManagerState.RUNNING:
            self._pending.append(record)
            return record
        self._drain()
        self._deliver(record)
        return record

    def emit(self, record: LogRecord) -> LogRecord | None:
        """Alias of :meth:`dispatch`, letting the manager act as a builder emitter."""

        return self.dispatch(record)

    def _drain(self) -> None:
        while self._pending:
            self._deliver(self._pending.popleft())

    def _deliver(self, record: LogRecord) -> None:
        for transport in tuple(self._transports):
            backlog = self._late_backlog.get(id(transport))
            if backlog is not None:
                backlog.append(record)
                continue
            self._emit_to(transport, record)

    def _emit_to(self, transport: TransportPort, record: LogRecord) -> None:
        if not transport.ready:
            return
        limit = transport.threshold
        if limit is not None and not self.level_set.meets_threshold(record.level, limit):
            return
        try:
            transport.emit(record)
        except Exception as exc:
            LOGGER.error("Transport %s raised while emitting; continuing", _name(transport), exc_info=exc)
            self._emit_diagnostic(
                "transport_emit_failed",
                {"transport": _name(transport), "level": record.level.name, "error": str(exc)},
            )

    def _emit_diagnostic(self, name: str, payload: dict[str, Any]) -> None:
        if self._diagnostic is None:
            return
        try:
            self._diagnostic(name, payload)
        except Exception as exc:  # pragma: no cover - diagnostics must never raise
            LOGGER.debug("Diagnostic hook raised", exc_info=exc)


def _name(transport: TransportPort) -> str:
    return getattr(transport, "name", type(transport).__name__)


__all__ = ["DiagnosticHook", "LogManager", "ManagerState"]
