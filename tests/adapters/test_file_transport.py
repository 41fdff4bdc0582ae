from __future__ import annotations

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from lib_log_fanout.adapters.file import FileTransport
from lib_log_fanout.domain.display import DisplayOptions, OutputFormat
from lib_log_fanout.domain.levels import LevelSet
from lib_log_fanout.domain.record import LogRecord

NO_TIME = DisplayOptions(timestamp="none")


@pytest.mark.asyncio
async def test_text_lines_are_buffered_until_flush(tmp_path: Path, make_record: Callable[..., LogRecord]) -> None:
    target = tmp_path / "logs" / "nested" / "app.log"
    transport = FileTransport(target, display=NO_TIME)
    await transport.setup()

    transport.emit(make_record("hello", packages=("app",)))
    assert target.read_text(encoding="utf-8") == ""
    assert transport.buffered > 0

    await transport.flush()
    assert target.read_text(encoding="utf-8") == "[INFO] app hello\n"
    await transport.stop()


@pytest.mark.asyncio
async def test_flush_levels_write_through_immediately(tmp_path: Path, make_record: Callable[..., LogRecord]) -> None:
    target = tmp_path / "app.log"
    transport = FileTransport(target, display=NO_TIME)
    await transport.setup()

    transport.emit(make_record("first"))
    transport.emit(make_record("broken", "error", data={"code": 7}))

    assert target.read_text(encoding="utf-8") == '[INFO] first\n[ERROR] broken {"code": 7}\n'
    await transport.stop()


@pytest.mark.asyncio
async def test_level_tags_are_padded_to_the_bound_level_set(
    tmp_path: Path, make_record: Callable[..., LogRecord], std_levels: LevelSet
) -> None:
    target = tmp_path / "padded.log"
    transport = FileTransport(target, display=NO_TIME)
    transport.bind_levels(std_levels)
    await transport.setup()

    transport.emit(make_record("x"))
    await transport.stop()

    assert target.read_text(encoding="utf-8") == "[INFO    ] x\n"


@pytest.mark.asyncio
async def test_full_buffer_is_written_through(tmp_path: Path, make_record: Callable[..., LogRecord]) -> None:
    target = tmp_path / "small.log"
    transport = FileTransport(target, display=NO_TIME, buffer_size=16)
    await transport.setup()

    transport.emit(make_record("a fairly long message"))

    assert target.read_text(encoding="utf-8") == "[INFO] a fairly long message\n"
    assert transport.buffered == 0
    await transport.stop()


@pytest.mark.asyncio
async def test_json_format_writes_one_object_per_line(tmp_path: Path, make_record: Callable[..., LogRecord]) -> None:
    target = tmp_path / "app.jsonl"
    transport = FileTransport(target, format="json", display=NO_TIME)
    await transport.setup()

    transport.emit(make_record("one", request_ids=("r1",), session_id="s1"))
    transport.emit(make_record("two", data={"k": "v"}))
    await transport.stop()

    lines = [json.loads(line) for line in target.read_text(encoding="utf-8").splitlines()]
    assert lines == [
        {"level": "INFO", "sid": "s1", "reqId": "r1", "msg": "one"},
        {"level": "INFO", "msg": "two", "data": {"k": "v"}},
    ]


@pytest.mark.asyncio
async def test_json_array_document_is_valid_and_appendable(tmp_path: Path, make_record: Callable[..., LogRecord]) -> None:
    target = tmp_path / "app.json"
    first = FileTransport(target, format=OutputFormat.JSON_ARRAY, display=NO_TIME)
    await first.setup()
    first.emit(make_record("one"))
    first.emit(make_record("two"))
    await first.stop()

    assert [item["msg"] for item in json.loads(target.read_text(encoding="utf-8"))] == ["one", "two"]

    second = FileTransport(target, format="json-array", display=NO_TIME)
    await second.setup()
    second.emit(make_record("three"))
    await second.stop()

    assert [item["msg"] for item in json.loads(target.read_text(encoding="utf-8"))] == ["one", "two", "three"]


@pytest.mark.asyncio
async def test_empty_json_array_document(tmp_path: Path) -> None:
    target = tmp_path / "empty.json"
    transport = FileTransport(target, mode="w", format="json-array")
    await transport.setup()
    await transport.stop()

    assert json.loads(target.read_text(encoding="utf-8")) == []


@pytest.mark.asyncio
async def test_truncate_and_exclusive_modes(tmp_path: Path, make_record: Callable[..., LogRecord]) -> None:
    target = tmp_path / "app.log"
    target.write_text("old content\n", encoding="utf-8")

    truncating = FileTransport(target, mode="w", display=NO_TIME)
    await truncating.setup()
    truncating.emit(make_record("fresh"))
    await truncating.destroy()
    assert target.read_text(encoding="utf-8") == "[INFO] fresh\n"

    exclusive = FileTransport(target, mode="x")
    with pytest.raises(FileExistsError):
        await exclusive.setup()
    assert exclusive.ready is False


def test_invalid_options_are_rejected(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Unsupported file mode"):
        FileTransport(tmp_path / "x.log", mode="r")
    with pytest.raises(ValueError, match="buffer_size"):
        FileTransport(tmp_path / "x.log", buffer_size=0)
    assert str(FileTransport(tmp_path / "x.log")).startswith("File[")
