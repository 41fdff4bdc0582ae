"""Style kinds and their fixed ANSI escape pairs.

Purpose
-------
Pin down the byte sequences every styled token is wrapped in. The table is an
external contract: downstream tooling compares rendered output byte for byte.

Contents
--------
* :class:`StyleKind` enum naming the semantic token kinds.
* :func:`style_pair` returning the ``(open, close)`` pair for a kind.
* :func:`apply_style` wrapping text in the pair.

System Role
-----------
Consumed by :mod:`lib_log_fanout.domain.message` when rendering with colour
and by :mod:`lib_log_fanout.domain.levels` to build level style functions.
"""

from __future__ import annotations

from enum import Enum


class StyleKind(Enum):
    """Semantic category attached to each message token."""

    H1 = "h1"
    H2 = "h2"
    H3 = "h3"
    ACTION = "action"
    LABEL = "label"
    HIGHLIGHT = "highlight"
    VALUE = "value"
    PATH = "path"
    DATE = "date"
    WARN = "warn"
    ERROR = "error"
    STRIKETHRU = "strikethru"
    TEXT = "text"
    PLAIN = "plain"
    ELAPSED = "_elapsed"

    @classmethod
    def from_name(cls, name: str) -> "StyleKind":
        """Resolve ``name`` (value or member name, any case) to a kind.

        Examples
        --------
        >>> StyleKind.from_name('H1') is StyleKind.H1
        True
        >>> StyleKind.from_name('_elapsed') is StyleKind.ELAPSED
        True
        """

        normalized = name.strip().lower()
        for member in cls:
            if member.value == normalized or member.name.lower() == normalized:
                return member
        raise ValueError(f"Unknown style kind: {name!r}")


_ESC = "\x1b["

_STYLE_PAIRS: dict[StyleKind, tuple[str, str]] = {
    StyleKind.H1: (f"{_ESC}1m{_ESC}35m", f"{_ESC}39m{_ESC}22m"),
    StyleKind.H2: (f"{_ESC}35m", f"{_ESC}39m"),
    StyleKind.H3: (f"{_ESC}33m", f"{_ESC}39m"),
    StyleKind.ACTION: (f"{_ESC}30m{_ESC}43m", f"{_ESC}49m{_ESC}39m"),
    StyleKind.LABEL: (f"{_ESC}34m", f"{_ESC}39m"),
    StyleKind.HIGHLIGHT: (f"{_ESC}95m", f"{_ESC}39m"),
    StyleKind.VALUE: (f"{_ESC}32m", f"{_ESC}39m"),
    StyleKind.PATH: (f"{_ESC}4m{_ESC}90m", f"{_ESC}39m{_ESC}24m"),
    StyleKind.DATE: (f"{_ESC}96m", f"{_ESC}39m"),
    StyleKind.WARN: (f"{_ESC}93m", f"{_ESC}39m"),
    StyleKind.ERROR: (f"{_ESC}1m{_ESC}91m", f"{_ESC}39m{_ESC}22m"),
    StyleKind.STRIKETHRU: (f"{_ESC}7m", f"{_ESC}27m"),
    StyleKind.TEXT: (f"{_ESC}97m", f"{_ESC}39m"),
    StyleKind.PLAIN: ("", ""),
    StyleKind.ELAPSED: (f"{_ESC}37m", f"{_ESC}39m"),
}


def style_pair(kind: StyleKind) -> tuple[str, str]:
    """Return the ``(open, close)`` escape pair for ``kind``."""

    return _STYLE_PAIRS[kind]


def apply_style(kind: StyleKind, text: str) -> str:
    """Wrap ``text`` in the escape pair of ``kind``.

    Examples
    --------
    >>> apply_style(StyleKind.LABEL, 'x')
    '\\x1b[34mx\\x1b[39m'
    >>> apply_style(StyleKind.PLAIN, 'x')
    'x'
    """

    opener, closer = _STYLE_PAIRS[kind]
    return f"{opener}{text}{closer}"


# Level tag colours, composed from the same SGR vocabulary as the token table.
RED = (f"{_ESC}31m", f"{_ESC}39m")
YELLOW = (f"{_ESC}33m", f"{_ESC}39m")
GREEN = (f"{_ESC}32m", f"{_ESC}39m")
CYAN = (f"{_ESC}36m", f"{_ESC}39m")
BLUE_DIM = (f"{_ESC}2m{_ESC}34m", f"{_ESC}39m{_ESC}22m")
GRAY = (f"{_ESC}90m", f"{_ESC}39m")
BRIGHT_RED = (f"{_ESC}1m{_ESC}91m", f"{_ESC}39m{_ESC}22m")
MAGENTA = (f"{_ESC}35m", f"{_ESC}39m")


__all__ = [
    "BLUE_DIM",
    "BRIGHT_RED",
    "CYAN",
    "GRAY",
    "GREEN",
    "MAGENTA",
    "RED",
    "StyleKind",
    "YELLOW",
    "apply_style",
    "style_pair",
]
