"""Utilities that turn log records into text lines and JSON payloads.

Why
---
Console and file transports render the same parts (timestamp, level tag,
package, session id, request id, message, data). Producing them in one place
keeps both sinks byte-compatible.

Contents
--------
* :func:`format_timestamp` - render a timestamp per :class:`TimestampMode`.
* :func:`format_level_tag` - ``[LEVEL]`` padded to the widest level name.
* :func:`build_text_line` - space-joined text line.
* :func:`build_json_payload` - mapping serialised by the JSON formats.
* :func:`build_json_parts` - positional array used by the console array format.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any

from lib_log_fanout.domain.display import DisplayOptions, TimestampMode
from lib_log_fanout.domain.levels import LevelSet
from lib_log_fanout.domain.record import LogRecord


def format_duration(ms: float) -> str:
    """Return a compact duration label.

    Examples
    --------
    >>> format_duration(42.4)
    '42ms'
    >>> format_duration(1534.0)
    '1.534s'
    """

    if ms < 1000:
        return f"{ms:.0f}ms"
    return f"{ms / 1000:.3f}s"


def format_timestamp(record: LogRecord, mode: TimestampMode) -> str | None:
    """Render the record timestamp, or ``None`` when the column is disabled."""

    if mode is TimestampMode.NONE:
        return None
    if mode is TimestampMode.UTC:
        return record.timestamp.isoformat(timespec="milliseconds").replace("+00:00", "Z")
    if mode is TimestampMode.LOCAL:
        local: datetime = record.timestamp.astimezone()
        return local.isoformat(timespec="milliseconds")
    return format_duration(record.elapsed_ms or 0.0)


def format_level_tag(record: LogRecord, *, width: int, color: bool) -> str:
    """Return ``[LEVEL]`` right-padded to ``width`` and styled when ``color`` is set.

    Examples
    --------
    >>> from lib_log_fanout.domain.levels import Level
    >>> format_level_tag(LogRecord(Level('INFO', 3), 'x'), width=7, color=False)
    '[INFO   ]'
    """

    tag = f"[{record.level.name.ljust(width)}]"
    return record.level.styled(tag) if color else tag


def _joined(values: tuple[str, ...]) -> str | None:
    return ".".join(values) if values else None


def build_text_line(
    record: LogRecord,
    *,
    display: DisplayOptions,
    levels: LevelSet | None = None,
    color: bool = False,
) -> str:
    """Return the space-joined text line for ``record``."""

    parts: list[str] = []
    timestamp = format_timestamp(record, display.timestamp)
    if timestamp is not None:
        parts.append(record.level.styled(timestamp) if color else timestamp)
    if display.level:
        width = levels.max_width if levels is not None else len(record.level.name)
        parts.append(format_level_tag(record, width=width, color=color))
    package = _joined(record.packages)
    if display.package and package:
        parts.append(package)
    if display.session_id and record.session_id:
        parts.append(record.session_id)
    if display.request_id and record.request_ids:
        parts.append(".".join(record.request_ids))
    message = record.render(color)
    if message:
        parts.append(message)
    if display.data and record.data:
        parts.append(json.dumps(record.data, default=str, sort_keys=True))
    return " ".join(parts)


def build_json_payload(record: LogRecord, *, display: DisplayOptions) -> dict[str, Any]:
    """Return the JSON-ready mapping honouring ``display`` toggles."""

    payload: dict[str, Any] = {}
    timestamp = format_timestamp(record, display.timestamp)
    if timestamp is not None:
        payload["timestamp"] = timestamp
    if display.level:
        payload["level"] = record.level.name
    if display.package and record.packages:
        payload["package"] = _joined(record.packages)
    if display.session_id and record.session_id:
        payload["sid"] = record.session_id
    if display.request_id and record.request_ids:
        payload["reqId"] = ".".join(record.request_ids)
    payload["msg"] = record.text
    if display.data and record.data:
        payload["data"] = dict(record.data)
    return payload


def build_json_parts(record: LogRecord, *, display: DisplayOptions) -> list[Any]:
    """Return ``[timestamp, level, package, sid, reqId, msg, data]`` with ``None`` gaps."""

    payload = build_json_payload(record, display=display)
    return [payload.get(key) for key in ("timestamp", "level", "package", "sid", "reqId", "msg", "data")]


__all__ = [
    "build_json_parts",
    "build_json_payload",
    "build_text_line",
    "format_duration",
    "format_level_tag",
    "format_timestamp",
]
