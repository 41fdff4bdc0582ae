from __future__ import annotations

from collections.abc import Callable, Iterator
from datetime import datetime, timezone
from io import StringIO

import pytest
from rich.console import Console

from lib_log_fanout.domain.levels import Level, LevelSet, MIN_LEVELS, STD_LEVELS
from lib_log_fanout.domain.record import LogRecord

FIXED_TS = datetime(2025, 9, 23, 12, 0, 0, 123000, tzinfo=timezone.utc)


@pytest.fixture
def record_console() -> Iterator[Console]:
    """Rich console recording plain output for assertions."""

    console = Console(file=StringIO(), record=True, width=200, color_system=None, force_terminal=False)
    yield console


@pytest.fixture
def ansi_console() -> Iterator[Console]:
    """Rich console that keeps ANSI sequences in its output stream."""

    console = Console(file=StringIO(), width=200, force_terminal=True, color_system="truecolor")
    yield console


@pytest.fixture
def std_levels() -> LevelSet:
    return LevelSet(STD_LEVELS, name="std")


@pytest.fixture
def min_levels() -> LevelSet:
    return LevelSet(MIN_LEVELS, name="min")


@pytest.fixture
def make_record(std_levels: LevelSet) -> Callable[..., LogRecord]:
    """Build records at a named level of the standard set with a fixed timestamp."""

    def factory(message: object = "hello", level: str | Level = "info", **changes: object) -> LogRecord:
        resolved = std_levels.level(level)
        return LogRecord(level=resolved, message=message, timestamp=FIXED_TS, **changes)  # type: ignore[arg-type]

    return factory
