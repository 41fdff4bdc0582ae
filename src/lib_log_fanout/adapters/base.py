"""Shared lifecycle for the concrete transports.

Purpose
-------
Implement the transport state machine once so each variant only supplies its
own open/write/flush/close hooks.

Contents
--------
* :class:`TransportState` - ``constructed`` to ``destroyed`` lifecycle.
* :class:`TransportBase` - :class:`TransportPort` implementation with hooks.

System Role
-----------
Readiness is private to the transport: only :meth:`TransportBase.setup`
flips it. The manager reads :attr:`TransportBase.ready` and never writes it.
"""

from __future__ import annotations

from enum import Enum

from lib_log_fanout.domain.errors import TransportDestroyedError, TransportNotReadyError
from lib_log_fanout.domain.levels import LevelSet
from lib_log_fanout.domain.record import LogRecord


class TransportState(Enum):
    """Lifecycle of a transport."""

    CONSTRUCTED = "constructed"
    SETUP_PENDING = "setup-pending"
    READY = "ready"
    STOPPING = "stopping"
    STOPPED = "stopped"
    DESTROYED = "destroyed"


class TransportBase:
    """Base implementation of :class:`~lib_log_fanout.application.ports.transport.TransportPort`.

    Subclasses override the ``_open``/``_write``/``_flush``/``_close``/``_release``
    hooks; the public methods enforce the state machine.
    """

    kind = "transport"

    def __init__(self, *, name: str | None = None, threshold: str | None = None) -> None:
        self._name = name or self.kind
        self._threshold = threshold
        self._state = TransportState.CONSTRUCTED
        self._levels: LevelSet | None = None

    @property
    def name(self) -> str:
        return self._name

    @property
    def state(self) -> TransportState:
        return self._state

    @property
    def ready(self) -> bool:
        return self._state is TransportState.READY

    @property
    def threshold(self) -> str | None:
        return self._threshold

    @property
    def levels(self) -> LevelSet | None:
        return self._levels

    def bind_levels(self, levels: LevelSet) -> None:
        """Attach the manager's level set (used for level-tag padding)."""

        self._levels = levels

    async def setup(self) -> None:
        """Run :meth:`_open` and become ready; a failure leaves the transport constructed."""

        if self._state is TransportState.READY:
            return
        if self._state is TransportState.DESTROYED:
            raise TransportDestroyedError(f"{self._name} was destroyed")
        self._state = TransportState.SETUP_PENDING
        try:
            await self._open()
        except BaseException:
            self._state = TransportState.CONSTRUCTED
            raise
        self._state = TransportState.READY

    def emit(self, record: LogRecord) -> None:
        """Write ``record``.

        Raises
        ------
        TransportDestroyedError
            After :meth:`destroy`.
        TransportNotReadyError
            Before :meth:`setup` completed or after :meth:`stop`.
        """

        if self._state is TransportState.DESTROYED:
            raise TransportDestroyedError(f"{self._name} was destroyed")
        if self._state is not TransportState.READY:
            raise TransportNotReadyError(f"{self._name} is not ready ({self._state.value})")
        self._write(record)

    async def flush(self) -> None:
        if self._state in (TransportState.READY, TransportState.STOPPING):
            await self._flush()

    async def stop(self) -> None:
        """Flush pending output and stop accepting input."""

        if self._state in (TransportState.STOPPED, TransportState.DESTROYED):
            return
        was_ready = self._state is TransportState.READY
        self._state = TransportState.STOPPING
        try:
            if was_ready:
                await self._flush()
        finally:
            try:
                await self._close()
            finally:
                self._state = TransportState.STOPPED

    async def destroy(self) -> None:
        """Stop (if needed) and release resources; irreversible."""

        if self._state is TransportState.DESTROYED:
            return
        try:
            if self._state is not TransportState.STOPPED:
                await self.stop()
        finally:
            await self._release()
            self._state = TransportState.DESTROYED

    async def _open(self) -> None:
        """Acquire resources; override in subclasses."""

    def _write(self, record: LogRecord) -> None:
        raise NotImplementedError

    async def _flush(self) -> None:
        """Deliver buffered output; override in subclasses."""

    async def _close(self) -> None:
        """Close resources opened by :meth:`_open`; override in subclasses."""

    async def _release(self) -> None:
        """Release anything still held after :meth:`_close`."""

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self._name!r}, state={self._state.value!r})"


__all__ = ["TransportBase", "TransportState"]
