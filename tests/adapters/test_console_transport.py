from __future__ import annotations

import json
from collections.abc import Callable

import pytest
from rich.console import Console

from lib_log_fanout.adapters.console.rich_console import ConsoleTransport
from lib_log_fanout.domain.display import DisplayOptions
from lib_log_fanout.domain.levels import Level
from lib_log_fanout.domain.message import MessageBuilder
from lib_log_fanout.domain.record import LogRecord

NO_TIME = DisplayOptions(timestamp="none")


async def _ready(console: Console, **options: object) -> ConsoleTransport:
    transport = ConsoleTransport(console=console, **options)  # type: ignore[arg-type]
    await transport.setup()
    return transport


def _styled_record(level: Level) -> LogRecord:
    record = MessageBuilder(level).h1("Deploy").label("target:").value("prod").emit()
    assert record is not None
    return record


@pytest.mark.asyncio
async def test_text_line_contains_every_enabled_part(record_console: Console, make_record: Callable[..., LogRecord]) -> None:
    transport = await _ready(record_console, display=NO_TIME)

    transport.emit(make_record("hello", packages=("app",), session_id="s1", request_ids=("r1", "r2"), data={"n": 1}))

    assert record_console.export_text().strip() == '[INFO] app s1 r1.r2 hello {"n": 1}'


@pytest.mark.asyncio
async def test_elapsed_timestamp_leads_the_line(record_console: Console, make_record: Callable[..., LogRecord]) -> None:
    transport = await _ready(record_console)

    transport.emit(make_record("timed", elapsed_ms=1534.0))

    assert record_console.export_text().strip() == "1.534s [INFO] timed"


@pytest.mark.asyncio
async def test_display_toggles_hide_parts(record_console: Console, make_record: Callable[..., LogRecord]) -> None:
    display = DisplayOptions(timestamp="none", level=False, package=False, data=False)
    transport = await _ready(record_console, display=display)

    transport.emit(make_record("bare", packages=("app",), data={"n": 1}))

    assert record_console.export_text().strip() == "bare"


@pytest.mark.asyncio
async def test_styled_messages_render_as_plain_text_in_recordings(
    record_console: Console, make_record: Callable[..., LogRecord]
) -> None:
    transport = await _ready(record_console, display=NO_TIME)

    transport.emit(_styled_record(make_record().level))

    assert record_console.export_text().strip() == "[INFO] Deploy target: prod"


@pytest.mark.asyncio
async def test_colour_reaches_terminal_consoles(ansi_console: Console, make_record: Callable[..., LogRecord]) -> None:
    transport = await _ready(ansi_console, display=NO_TIME)

    transport.emit(_styled_record(make_record().level))

    output = ansi_console.file.getvalue()  # type: ignore[attr-defined]
    assert "\x1b[" in output
    assert "Deploy" in output


@pytest.mark.asyncio
async def test_color_false_prints_without_escape_sequences(
    ansi_console: Console, make_record: Callable[..., LogRecord]
) -> None:
    transport = await _ready(ansi_console, display=NO_TIME, color=False)

    transport.emit(_styled_record(make_record().level))

    output = ansi_console.file.getvalue()  # type: ignore[attr-defined]
    assert "\x1b[" not in output
    assert output.strip() == "[INFO] Deploy target: prod"


@pytest.mark.asyncio
async def test_json_format_prints_one_object_per_line(record_console: Console, make_record: Callable[..., LogRecord]) -> None:
    transport = await _ready(record_console, display=NO_TIME, format="json")

    transport.emit(make_record("one", packages=("app", "db")))
    transport.emit(make_record("two", "warn"))

    lines = [json.loads(line) for line in record_console.export_text().splitlines()]
    assert lines == [
        {"level": "INFO", "package": "app.db", "msg": "one"},
        {"level": "WARN", "msg": "two"},
    ]


@pytest.mark.asyncio
async def test_json_array_format_prints_positional_arrays(
    record_console: Console, make_record: Callable[..., LogRecord]
) -> None:
    transport = await _ready(record_console, display=NO_TIME, format="json-array")

    transport.emit(make_record("hello", session_id="s1", data={"k": 1}))

    assert json.loads(record_console.export_text()) == [None, "INFO", None, "s1", None, "hello", {"k": 1}]
    assert str(transport) == "Console[json-array]"
    await transport.flush()
