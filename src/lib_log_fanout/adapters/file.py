"""File transport writing plain lines, JSON lines or a JSON array document.

Purpose
-------
Serialise each record and append it to a file, buffering output in memory and
writing it through when the buffer fills or a flush-trigger level arrives.

Contents
--------
* :class:`FileTransport` - buffered file sink.

System Role
-----------
Opening and closing the file run in worker threads (``asyncio.to_thread``).
Writes happen on the event loop thread only, so buffered chunks reach the file
in emission order.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import IO

from lib_log_fanout.adapters._formatting import build_json_payload, build_text_line
from lib_log_fanout.adapters.base import TransportBase
from lib_log_fanout.domain.display import DisplayOptions, OutputFormat
from lib_log_fanout.domain.errors import TransportDeliveryError
from lib_log_fanout.domain.record import LogRecord

BUFFER_SIZE = 4096
_MODES = {"a", "w", "x"}


class FileTransport(TransportBase):
    """Append serialised records to ``path``.

    Parameters
    ----------
    path:
        Target file; parent directories are created on setup.
    mode:
        ``"a"`` appends, ``"w"`` truncates, ``"x"`` requires a new file.
    format:
        :class:`OutputFormat` or its name (``plain``/``text``, ``json``,
        ``json-array``).
    buffer_size:
        Characters held in memory before writing through.
    """

    kind = "file"

    def __init__(
        self,
        path: str | Path,
        *,
        mode: str = "a",
        format: OutputFormat | str = OutputFormat.TEXT,
        display: DisplayOptions | None = None,
        buffer_size: int = BUFFER_SIZE,
        threshold: str | None = None,
        name: str | None = None,
    ) -> None:
        if mode not in _MODES:
            raise ValueError(f"Unsupported file mode: {mode!r}")
        if buffer_size <= 0:
            raise ValueError("buffer_size must be positive")
        super().__init__(name=name, threshold=threshold)
        self._path = Path(path)
        self._mode = mode
        self._format = OutputFormat.from_name(format) if isinstance(format, str) else format
        self._display = display or DisplayOptions()
        self._buffer_size = buffer_size
        self._chunks: list[str] = []
        self._buffered = 0
        self._handle: IO[str] | None = None
        self._array_items = 0

    @property
    def path(self) -> Path:
        return self._path

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def buffered(self) -> int:
        """Characters waiting in the in-memory buffer."""

        return self._buffered

    async def _open(self) -> None:
        self._handle = await asyncio.to_thread(self._open_sync)

    def _open_sync(self) -> IO[str]:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        if self._format is not OutputFormat.JSON_ARRAY:
            return self._path.open(self._mode, encoding="utf-8")
        if self._mode == "a" and self._path.exists() and self._path.stat().st_size > 0:
            return self._reopen_array()
        handle = self._path.open(self._mode, encoding="utf-8")
        handle.write("[")
        self._array_items = 0
        return handle

    def _reopen_array(self) -> IO[str]:
        """Strip the closing bracket of an existing array document and continue it."""

        content = self._path.read_text(encoding="utf-8").rstrip()
        if content.endswith("]"):
            content = content[:-1].rstrip()
        if not content.startswith("["):
            raise ValueError(f"{self._path} does not contain a JSON array")
        self._array_items = 0 if content == "[" else 1
        handle = self._path.open("w", encoding="utf-8")
        handle.write(content)
        return handle

    def _serialise(self, record: LogRecord) -> str:
        if self._format is OutputFormat.JSON:
            return json.dumps(build_json_payload(record, display=self._display), default=str) + "\n"
        if self._format is OutputFormat.JSON_ARRAY:
            item = json.dumps(build_json_payload(record, display=self._display), default=str)
            separator = "\n" if self._array_items == 0 else ",\n"
            self._array_items += 1
            return separator + item
        return build_text_line(record, display=self._display, levels=self.levels, color=False) + "\n"

    def _write(self, record: LogRecord) -> None:
        chunk = self._serialise(record)
        if self._buffered + len(chunk) > self._buffer_size:
            self._write_through()
        self._chunks.append(chunk)
        self._buffered += len(chunk)
        if record.level.flush or self._buffered >= self._buffer_size:
            self._write_through()

    def _write_through(self) -> None:
        if not self._chunks or self._handle is None:
            return
        data = "".join(self._chunks)
        try:
            self._handle.write(data)
            self._handle.flush()
        except OSError as exc:
            raise TransportDeliveryError(f"Could not write to {self._path}: {exc}", pending=len(self._chunks)) from exc
        self._chunks.clear()
        self._buffered = 0

    async def _flush(self) -> None:
        self._write_through()

    async def _close(self) -> None:
        handle = self._handle
        if handle is None:
            return
        try:
            if self._format is OutputFormat.JSON_ARRAY:
                self._chunks.append("\n]\n" if self._array_items else "]\n")
            self._write_through()
        finally:
            self._handle = None
            await asyncio.to_thread(handle.close)

    def __str__(self) -> str:
        return f"File[{self._path}]"


__all__ = ["BUFFER_SIZE", "FileTransport"]
