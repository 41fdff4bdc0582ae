from __future__ import annotations

import logging

import pytest

from lib_log_fanout.adapters.buffer import BufferTransport
from lib_log_fanout.application.manager import LogManager, ManagerState
from lib_log_fanout.application.use_cases.shutdown import create_shutdown
from lib_log_fanout.domain.record import LogRecord


class _FlakyFlush(BufferTransport):
    """Fails the first flush only."""

    def __init__(self) -> None:
        super().__init__(name="flaky")
        self.flush_calls = 0

    async def _flush(self) -> None:
        self.flush_calls += 1
        if self.flush_calls == 1:
            raise RuntimeError("flush hiccup")


@pytest.mark.asyncio
async def test_shutdown_flushes_then_closes() -> None:
    flushed: list[int] = []

    class _Counting(BufferTransport):
        async def _flush(self) -> None:
            flushed.append(len(self))

    buffer = _Counting()
    manager = LogManager("std")
    manager.add_transport(buffer)
    await manager.start()
    manager.get_logger().info.plain("bye").emit()

    await create_shutdown(manager=manager)()

    assert manager.state is ManagerState.CLOSED
    assert flushed[0] == 1


@pytest.mark.asyncio
async def test_shutdown_is_a_no_op_for_closed_managers() -> None:
    manager = LogManager("std")
    shutdown = create_shutdown(manager=manager)

    await shutdown()
    await shutdown()

    assert manager.state is ManagerState.CLOSED


@pytest.mark.asyncio
async def test_shutdown_logs_failed_flush_and_still_closes(caplog: pytest.LogCaptureFixture) -> None:
    transport = _FlakyFlush()
    manager = LogManager("std")
    manager.add_transport(transport)
    await manager.start()

    with caplog.at_level(logging.WARNING, logger="lib_log_fanout.application.use_cases.shutdown"):
        await create_shutdown(manager=manager)()

    assert "Flush before shutdown failed" in caplog.text
    assert transport.flush_calls == 2
    assert manager.state is ManagerState.CLOSED


@pytest.mark.asyncio
async def test_shutdown_without_flush_skips_the_explicit_flush() -> None:
    transport = _FlakyFlush()
    manager = LogManager("std")
    manager.add_transport(transport)
    await manager.start()

    with pytest.raises(RuntimeError, match="flush hiccup"):
        await create_shutdown(manager=manager, flush=False)()

    assert manager.state is ManagerState.CLOSED


def test_records_emitted_to_the_manager_directly_are_filtered() -> None:
    manager = LogManager("min", threshold="warn")
    record = LogRecord(manager.level_set.level("info"), "direct")

    assert manager.emit(record) is None
    assert manager.pending == 0
