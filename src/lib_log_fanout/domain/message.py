"""Fluent message builder accumulating styled tokens.

Purpose
-------
Let callers compose a message from semantic pieces (headers, labels, values,
paths, error tags) and render it with the fixed escape pairs or as plain text.

Contents
--------
* :class:`MessageEmitter` - protocol the owning logger implements.
* :class:`MessageBuilder` - chainable token accumulator.
* :func:`format_elapsed` - millisecond formatting used by the response suffix.

System Role
-----------
Loggers hand out builders bound to a level; ``emit()`` snapshots the tokens
into a :class:`~lib_log_fanout.domain.tokens.StyledMessage`, wraps it in a
:class:`~lib_log_fanout.domain.record.LogRecord` and forwards it to the
emitter. Project-specific methods are added by composition through
:meth:`MessageBuilder.with_methods`, never by hand-written subclasses.
"""

from __future__ import annotations

import json
import math
import traceback
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from typing import Any, Protocol, runtime_checkable

from .errors import ConfigurationError
from .levels import Level
from .marks import TimeMarks
from .record import LogRecord
from .styles import StyleKind
from .tokens import StyledMessage, StyledToken, render_tokens


@runtime_checkable
class MessageEmitter(Protocol):
    """Receiver of records produced by :meth:`MessageBuilder.emit`."""

    def emit(self, record: LogRecord) -> LogRecord | None:
        """Forward ``record``; return it when delivered, ``None`` when suppressed."""

    def demark(self, name: str, keep: bool = False) -> float:
        """Return elapsed milliseconds for the mark ``name``."""


def _stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (Mapping, list, tuple)):
        return json.dumps(value, default=str)
    return str(value)


def format_elapsed(ms: float) -> str:
    """Format ``ms`` with fewer decimals for longer durations.

    Examples
    --------
    >>> format_elapsed(1234.4)
    '1234'
    >>> format_elapsed(12.345)
    '12.3'
    >>> format_elapsed(1.5)
    '1.50'
    >>> format_elapsed(0.25)
    '0.250'
    """

    if ms > 100:
        digits = 0
    elif ms > 10:
        digits = 1
    elif ms > 1:
        digits = 2
    else:
        digits = 3
    return f"{ms:.{digits}f}"


def _now() -> datetime:
    return datetime.now(timezone.utc)


class MessageBuilder:
    """Accumulate styled tokens and render or emit them.

    Examples
    --------
    >>> builder = MessageBuilder()
    >>> builder.h1('Title').label('key:').value(42).format(False)
    'Title key: 42'
    >>> MessageBuilder().h2('x').format(True)
    '\\x1b[35mx\\x1b[39m'
    """

    def __init__(
        self,
        level: Level | None = None,
        emitter: MessageEmitter | None = None,
        *,
        color: bool = True,
        tokens: Iterable[StyledToken] | None = None,
        clock: Callable[[], datetime] = _now,
    ) -> None:
        self._level = level
        self._emitter = emitter
        self._color = color
        self._clock = clock
        self._tokens: list[StyledToken] = list(tokens or ())
        self._suffix: list[str] = []
        self._allow = True
        self._branch_taken = False
        self._pluralize: bool | None = None
        self._data: dict[str, Any] = {}
        self._marks: TimeMarks | None = None

    @property
    def level(self) -> Level | None:
        return self._level

    @property
    def color(self) -> bool:
        return self._color

    @property
    def tokens(self) -> tuple[StyledToken, ...]:
        """Message tokens followed by comment tokens."""

        return (*self._tokens, *(StyledToken(text, StyleKind.PLAIN) for text in self._suffix))

    @property
    def is_empty(self) -> bool:
        return not self._tokens and not self._suffix

    def stylize(self, kind: StyleKind, *args: Any) -> "MessageBuilder":
        """Append one token of ``kind`` built from ``args`` joined by spaces.

        Nothing is appended inside a conditional branch that was not taken.
        """

        if not self._allow:
            return self
        args = self._apply_pluralization(args)
        if args:
            self._tokens.append(StyledToken(" ".join(_stringify(arg) for arg in args), kind))
        return self

    # ------------------------------------------------------------------
    # Conditional chain
    # ------------------------------------------------------------------

    def if_(self, condition: bool) -> "MessageBuilder":
        """Open a conditional chain; following parts are kept only when ``condition`` holds.

        Examples
        --------
        >>> MessageBuilder().if_(False).h1('a').elif_(True).h2('b').else_().h3('c').format(False)
        'b'
        >>> MessageBuilder().if_(False).h1('a').endif().h2('b').format(False)
        'b'
        """

        self._branch_taken = bool(condition)
        self._allow = bool(condition)
        return self

    def elif_(self, condition: bool) -> "MessageBuilder":
        if self._branch_taken:
            self._allow = False
        else:
            self._allow = bool(condition)
            self._branch_taken = bool(condition)
        return self

    def else_(self) -> "MessageBuilder":
        self._allow = not self._branch_taken
        self._branch_taken = True
        return self

    def endif(self) -> "MessageBuilder":
        """Close the chain; every later part is appended again."""

        self._allow = True
        self._branch_taken = False
        return self

    def _apply_pluralization(self, args: tuple[Any, ...]) -> tuple[Any, ...]:
        plural, self._pluralize = self._pluralize, None
        if plural is None:
            return args
        if len(args) == 1 and isinstance(args[0], str) and args[0]:
            return (f"{args[0]}s",) if plural else args
        if len(args) == 2 and all(isinstance(arg, str) and arg for arg in args):
            return (args[1],) if plural else (args[0],)
        return args

    def h1(self, *args: Any) -> "MessageBuilder":
        return self.stylize(StyleKind.H1, *args)

    def h2(self, *args: Any) -> "MessageBuilder":
        return self.stylize(StyleKind.H2, *args)

    def h3(self, *args: Any) -> "MessageBuilder":
        return self.stylize(StyleKind.H3, *args)

    def action(self, *args: Any) -> "MessageBuilder":
        return self.stylize(StyleKind.ACTION, *args)

    def label(self, *args: Any) -> "MessageBuilder":
        return self.stylize(StyleKind.LABEL, *args)

    def highlight(self, *args: Any) -> "MessageBuilder":
        return self.stylize(StyleKind.HIGHLIGHT, *args)

    def value(self, *args: Any) -> "MessageBuilder":
        return self.stylize(StyleKind.VALUE, *args)

    def path(self, *args: Any) -> "MessageBuilder":
        return self.stylize(StyleKind.PATH, *args)

    def date(self, *args: Any) -> "MessageBuilder":
        return self.stylize(StyleKind.DATE, *args)

    def warn(self, *args: Any) -> "MessageBuilder":
        return self.stylize(StyleKind.WARN, *args)

    def error(self, *args: Any) -> "MessageBuilder":
        return self.stylize(StyleKind.ERROR, *args)

    def strikethru(self, *args: Any) -> "MessageBuilder":
        return self.stylize(StyleKind.STRIKETHRU, *args)

    def text(self, *args: Any) -> "MessageBuilder":
        return self.stylize(StyleKind.TEXT, *args)

    def plain(self, *args: Any) -> "MessageBuilder":
        """Append unstyled text."""

        return self.stylize(StyleKind.PLAIN, *args)

    def url(self, *args: Any) -> "MessageBuilder":
        return self.stylize(StyleKind.PATH, *args)

    def code(self, *args: Any) -> "MessageBuilder":
        return self.stylize(StyleKind.TEXT, *args)

    def success(self, *args: Any) -> "MessageBuilder":
        return self.stylize(StyleKind.VALUE, *args)

    def count(self, num: int) -> "MessageBuilder":
        """Append ``num`` as a value and pluralize the next part unless ``num == 1``.

        The next part is pluralized by appending ``s`` to a single word or by
        picking the second of a ``(singular, plural)`` pair.

        Examples
        --------
        >>> MessageBuilder().text('Found').count(3).text('activity', 'activities').format(False)
        'Found 3 activities'
        >>> MessageBuilder().count(1).plain('file').format(False)
        '1 file'
        """

        if not self._allow:
            return self
        self.stylize(StyleKind.VALUE, num)
        self._pluralize = num != 1 if isinstance(num, int) and not isinstance(num, bool) else None
        return self

    def section(self, title: str = "", width: int = 80) -> "MessageBuilder":
        """Append an ``h1`` divider of ``width`` dashes with ``title`` centred in it."""

        if not title:
            return self.h1("-" * width)
        padding = (width - len(title) - 2) / 2
        return self.h1(f"{'-' * math.floor(padding)} {title} {'-' * math.ceil(padding)}")

    def comment(self, *args: Any) -> "MessageBuilder":
        """Append unstyled text placed after every other part of the message."""

        if self._allow and args:
            self._suffix.append(" ".join(_stringify(arg) for arg in args))
        return self

    def data(self, payload: Mapping[str, Any]) -> "MessageBuilder":
        """Merge ``payload`` into the structured data of the emitted record."""

        if self._allow:
            self._data.update(payload)
        return self

    def err(
        self,
        error: BaseException,
        *,
        code: bool = True,
        cause: bool = True,
        path: bool = True,
        stack: bool = False,
    ) -> "MessageBuilder":
        """Append tokens describing ``error``.

        The message becomes an ``error`` token; ``code``, ``__cause__`` and
        ``filename``/``path`` attributes are appended as label/value pairs when
        present and enabled. ``stack`` appends the formatted traceback.
        """

        if not self._allow:
            return self
        self.error(str(error) or type(error).__name__)
        error_code = getattr(error, "code", None)
        if error_code is None and isinstance(error, OSError):
            error_code = error.errno
        if code and error_code is not None:
            self.label("code:").value(error_code)
        if cause and error.__cause__ is not None:
            self.label("cause:").value(str(error.__cause__) or type(error.__cause__).__name__)
        error_path = getattr(error, "filename", None) or getattr(error, "path", None)
        if path and error_path:
            self.path(str(error_path))
        if stack and error.__traceback__ is not None:
            trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
            self.text(trace.rstrip())
        return self

    def mark(self, name: str | None = None) -> str:
        """Record a named timestamp on the emitter (or this builder when standalone)."""

        emitter_mark = getattr(self._emitter, "mark", None)
        if callable(emitter_mark):
            return emitter_mark(name)
        return self._own_marks().mark(name)

    def demark(self, name: str, keep: bool = False) -> float:
        """Return milliseconds since ``mark(name)``; see :class:`TimeMarks`."""

        if self._emitter is not None:
            return self._emitter.demark(name, keep)
        return self._own_marks().demark(name, keep)

    def _own_marks(self) -> TimeMarks:
        if self._marks is None:
            self._marks = TimeMarks()
        return self._marks

    def elapsed(self, duration: str | float | None = None, *, keep: bool = False) -> "MessageBuilder":
        """Append ``(<ms> ms response)``.

        ``duration`` is either a mark name resolved via :meth:`demark` or a
        number of milliseconds. ``None`` uses the emitter's elapsed time since
        creation.
        """

        if isinstance(duration, str):
            ms = self.demark(duration, keep)
        elif duration is None:
            ms = getattr(self._emitter, "elapsed_ms", None)
            if ms is None:
                raise ConfigurationError("elapsed() without a duration requires a logger")
        else:
            ms = float(duration)
        return self.stylize(StyleKind.ELAPSED, f"({format_elapsed(ms)} ms response)")

    def ewt(self, duration: str | float | None = None, *, keep: bool = False) -> LogRecord | None:
        """Emit with time: append the response suffix, then :meth:`emit`."""

        return self.elapsed(duration, keep=keep).emit()

    def no_colors(self) -> "MessageBuilder":
        """Disable styling for this builder; idempotent."""

        self._color = False
        return self

    def format(self, color: bool | None = None) -> str:
        """Render tokens joined by single spaces; ``None`` uses the builder's setting."""

        use_color = self._color if color is None else color
        return render_tokens(self.tokens, use_color)

    def to_message(self) -> StyledMessage:
        """Snapshot the current tokens into an immutable :class:`StyledMessage`."""

        return StyledMessage(self.tokens, self._color)

    def clear(self) -> "MessageBuilder":
        self._tokens.clear()
        self._suffix.clear()
        self._data = {}
        self._pluralize = None
        return self.endif()

    def emit(self, data: Mapping[str, Any] | None = None) -> LogRecord | None:
        """Build a record, hand it to the emitter and reset the builder.

        Returns the record, or ``None`` when the emitter suppressed it.
        Without an emitter the record is simply returned.
        """

        if self._level is None:
            raise ConfigurationError("emit() requires a builder bound to a level")
        if data:
            self._data.update(data)
        record = LogRecord(
            level=self._level,
            message=self.to_message(),
            timestamp=self._clock(),
            data=dict(self._data) if self._data else None,
        )
        self.clear()
        if self._emitter is None:
            return record
        return self._emitter.emit(record)

    def __str__(self) -> str:
        return self.format(False)

    @classmethod
    def with_methods(
        cls,
        methods: Mapping[str, StyleKind | Callable[..., "MessageBuilder"]],
        *,
        name: str | None = None,
    ) -> type["MessageBuilder"]:
        """Return a builder type extended with extra token-appending methods.

        Each entry maps a method name to either a :class:`StyleKind` (the method
        appends one token of that kind) or a callable ``fn(builder, *args)``
        that composes existing methods and returns the builder.

        Examples
        --------
        >>> Custom = MessageBuilder.with_methods({'ok': StyleKind.VALUE})
        >>> Custom().ok('done').format(False)
        'done'
        """

        namespace: dict[str, Any] = {}
        for method_name, spec in methods.items():
            if hasattr(MessageBuilder, method_name):
                raise ValueError(f"Cannot override builder method: {method_name!r}")
            namespace[method_name] = _token_method(spec) if isinstance(spec, StyleKind) else spec
        return type(name or f"{cls.__name__}Extended", (cls,), namespace)

    @classmethod
    def extend(cls, method_name: str, kind: StyleKind) -> type["MessageBuilder"]:
        """Shorthand for :meth:`with_methods` with one kind-backed method."""

        return cls.with_methods({method_name: kind})


def _token_method(kind: StyleKind) -> Callable[..., MessageBuilder]:
    def method(self: MessageBuilder, *args: Any) -> MessageBuilder:
        return self.stylize(kind, *args)

    method.__doc__ = f"Append a ``{kind.value}`` token."
    return method


BuilderFactory = Callable[..., MessageBuilder]


__all__ = ["BuilderFactory", "MessageBuilder", "MessageEmitter", "format_elapsed"]
