"""Runtime façade: build managers from configuration and shut them down.

Purpose
-------
Offer the two calls most applications need, :func:`create_manager` and
:func:`shutdown`, without touching the composition details.

Contents
--------
* :func:`create_manager` - manager from explicit arguments plus ``LOG_*`` settings.
* :func:`shutdown` - synchronous flush-and-close for scripts without a loop.
* :func:`shutdown_async` - awaitable variant for hosts with a running loop.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from typing import Any

from lib_log_fanout.application.manager import LogManager
from lib_log_fanout.application.ports.transport import TransportPort
from lib_log_fanout.application.use_cases.shutdown import create_shutdown
from lib_log_fanout.config import Settings, load_settings

from ._composition import build_console_transport, build_manager


def create_manager(
    settings: Settings | None = None,
    *,
    transports: Iterable[TransportPort] = (),
    **options: Any,
) -> LogManager:
    """Return a :class:`LogManager` configured from ``settings`` (default: environment).

    ``options`` (``levels``, ``threshold``, ``display``, ``builder_factory``,
    ``diagnostic``) override the settings.

    Examples
    --------
    >>> from lib_log_fanout.config import Settings
    >>> manager = create_manager(Settings(levels='cli'), threshold='debug')
    >>> manager.threshold.name
    'DEBUG'
    """

    resolved = settings if settings is not None else load_settings()
    return build_manager(resolved, transports=transports, **options)


async def shutdown_async(manager: LogManager, *, flush: bool = True) -> None:
    """Flush and close ``manager``; a closed manager is left untouched."""

    await create_shutdown(manager=manager, flush=flush)()


def shutdown(manager: LogManager, *, flush: bool = True) -> None:
    """Run :func:`shutdown_async` in a fresh event loop.

    Raises
    ------
    RuntimeError
        If called while an event loop is running; use :func:`shutdown_async`.
    """

    try:
        asyncio.get_running_loop()
    except RuntimeError:
        asyncio.run(shutdown_async(manager, flush=flush))
        return
    raise RuntimeError(
        "lib_log_fanout.runtime.shutdown() cannot run inside an active event loop; await shutdown_async() instead"
    )


__all__ = ["build_console_transport", "create_manager", "shutdown", "shutdown_async"]
