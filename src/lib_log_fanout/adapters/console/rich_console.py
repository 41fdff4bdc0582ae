"""Rich-powered console transport.

Purpose
-------
Write each record immediately to standard output or standard error through a
:class:`rich.console.Console`, without batching.

Contents
--------
* :class:`ConsoleTransport` - text, JSON-object or JSON-array line output.

System Role
-----------
Primary human-facing sink and the default transport registered when loggers
are requested from a manager that has none.

Alignment Notes
---------------
Styled messages are rendered with the fixed escape pairs and handed to Rich
via :meth:`rich.text.Text.from_ansi`, so Rich decides whether the terminal
receives colour (``force_color``/``no_color`` and TTY detection).
"""

from __future__ import annotations

import json

from rich.console import Console
from rich.text import Text

from lib_log_fanout.adapters._formatting import build_json_parts, build_json_payload, build_text_line
from lib_log_fanout.adapters.base import TransportBase
from lib_log_fanout.domain.display import DisplayOptions, OutputFormat
from lib_log_fanout.domain.record import LogRecord


class ConsoleTransport(TransportBase):
    """Render records to an interactive console.

    Examples
    --------
    >>> import asyncio
    >>> from io import StringIO
    >>> from lib_log_fanout.domain.levels import Level
    >>> console = Console(file=StringIO(), record=True, width=120)
    >>> transport = ConsoleTransport(console=console, display=DisplayOptions(timestamp='none'))
    >>> asyncio.run(transport.setup())
    >>> transport.emit(LogRecord(Level('INFO', 3), 'msg'))
    >>> console.export_text().strip()
    '[INFO] msg'
    """

    kind = "console"

    def __init__(
        self,
        *,
        color: bool = True,
        use_stderr: bool = False,
        format: OutputFormat | str = OutputFormat.TEXT,
        display: DisplayOptions | None = None,
        console: Console | None = None,
        force_color: bool = False,
        no_color: bool = False,
        threshold: str | None = None,
        name: str | None = None,
    ) -> None:
        """Configure colour, target stream and output format."""
        super().__init__(name=name, threshold=threshold)
        self._format = OutputFormat.from_name(format) if isinstance(format, str) else format
        self._display = display or DisplayOptions()
        self._color = color and not no_color
        self._use_stderr = use_stderr
        if console is not None:
            self._console = console
        else:
            self._console = Console(
                stderr=use_stderr,
                force_terminal=force_color or None,
                no_color=no_color,
                highlight=False,
            )

    @property
    def color(self) -> bool:
        return self._color

    @property
    def format(self) -> OutputFormat:
        return self._format

    @property
    def console(self) -> Console:
        return self._console

    def _write(self, record: LogRecord) -> None:
        if self._format is OutputFormat.JSON:
            self._print_plain(json.dumps(build_json_payload(record, display=self._display), default=str))
        elif self._format is OutputFormat.JSON_ARRAY:
            self._print_plain(json.dumps(build_json_parts(record, display=self._display), default=str))
        elif self._color:
            line = build_text_line(record, display=self._display, levels=self.levels, color=True)
            self._console.print(Text.from_ansi(line), highlight=False, soft_wrap=True)
        else:
            self._print_plain(build_text_line(record, display=self._display, levels=self.levels, color=False))

    def _print_plain(self, line: str) -> None:
        self._console.print(line, markup=False, highlight=False, soft_wrap=True)

    async def _flush(self) -> None:
        self._console.file.flush()

    def __str__(self) -> str:
        return f"Console[{self._format.value}]"


__all__ = ["ConsoleTransport"]
