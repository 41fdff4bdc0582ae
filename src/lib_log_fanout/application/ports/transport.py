"""Transport port describing the capability contract of every sink.

Purpose
-------
Let the manager depend on one narrow protocol instead of a class hierarchy.
Console, file, buffer and network sinks are independent implementations.

Contents
--------
* :class:`TransportPort` - runtime-checkable protocol with the lifecycle
  hooks ``setup``/``emit``/``flush``/``stop``/``destroy`` and a ``ready`` query.

System Role
-----------
The readiness barrier of :class:`~lib_log_fanout.application.manager.LogManager`
awaits :meth:`TransportPort.setup` and reads :attr:`TransportPort.ready`; it
never changes a transport's readiness itself.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lib_log_fanout.domain.record import LogRecord


@runtime_checkable
class TransportPort(Protocol):
    """Independent output sink with its own readiness, buffering and retry policy."""

    @property
    def name(self) -> str:
        """Short identifier used in diagnostics."""

    @property
    def ready(self) -> bool:
        """Return ``True`` once :meth:`setup` completed and input is accepted."""

    @property
    def threshold(self) -> str | None:
        """Optional per-transport level name applied during fan-out."""

    async def setup(self) -> None:
        """Acquire resources; may take arbitrarily long."""

    def emit(self, record: LogRecord) -> None:
        """Accept ``record``; only valid while :attr:`ready`."""

    async def flush(self) -> None:
        """Deliver buffered output, raising when delivery is impossible."""

    async def stop(self) -> None:
        """Flush, then stop accepting input while remaining queryable."""

    async def destroy(self) -> None:
        """Stop, then irreversibly release resources."""


__all__ = ["TransportPort"]
