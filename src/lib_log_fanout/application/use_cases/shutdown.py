"""Shutdown orchestration for the dispatch pipeline.

Purpose
-------
Provide one awaitable that flushes buffered transport output and closes the
manager, tolerating a manager that was already closed.
"""

from __future__ import annotations

import logging
from typing import Awaitable, Callable

from lib_log_fanout.application.manager import LogManager, ManagerState

LOGGER = logging.getLogger(__name__)


def create_shutdown(*, manager: LogManager, flush: bool = True) -> Callable[[], Awaitable[None]]:
    """Return an async callable performing the shutdown sequence."""

    async def shutdown() -> None:
        """Flush transports (optional), then stop and destroy them."""
        if manager.state is ManagerState.CLOSED:
            LOGGER.debug("Shutdown requested for an already closed manager")
            return
        if flush and manager.state is ManagerState.RUNNING:
            try:
                await manager.flush()
            except Exception as exc:
                # close() still stops every transport and re-raises delivery failures.
                LOGGER.warning("Flush before shutdown failed", exc_info=exc)
        await manager.close()

    return shutdown


__all__ = ["create_shutdown"]
