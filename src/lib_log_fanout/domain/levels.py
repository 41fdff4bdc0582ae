"""Data-driven severity levels and the threshold model.

Purpose
-------
Represent a set of named severities as a plain table instead of a class
hierarchy. Alternative vocabularies (a fine-grained Java-style set, a CLI
oriented set) are simply different tables handed to the same
:class:`LevelSet`.

Contents
--------
* :class:`Level` - immutable row of the table (name, rank, style, flags).
* :class:`LevelSet` - lookup, ordering and threshold helpers over a table.
* ``STD_LEVELS``, ``CLI_LEVELS``, ``JAVA_LEVELS``, ``MIN_LEVELS`` - shipped tables.
* :func:`level_set_from_name` - resolve a shipped table by name.

System Role
-----------
Bound to exactly one :class:`~lib_log_fanout.application.manager.LogManager`.
The manager filters every record through :meth:`LevelSet.meets_threshold`
before the readiness barrier, and transports consult
:meth:`LevelSet.meets_flush_threshold` to force immediate output.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from dataclasses import dataclass, field

from . import styles
from .errors import ConfigurationError

StyleFn = Callable[[str], str]


def _identity(text: str) -> str:
    return text


@dataclass(slots=True, frozen=True)
class _Painter:
    """Callable wrapping text in a fixed escape pair."""

    opener: str
    closer: str

    def __call__(self, text: str) -> str:
        return f"{self.opener}{text}{self.closer}"


def painter(pair: tuple[str, str]) -> StyleFn:
    """Return a style function wrapping text in ``pair``.

    Examples
    --------
    >>> painter(("<", ">"))("info")
    '<info>'
    """

    return _Painter(*pair)


@dataclass(slots=True, frozen=True)
class Level:
    """One severity level.

    Attributes
    ----------
    name:
        Upper-case level name.
    rank:
        Numeric rank; ordering direction is owned by the :class:`LevelSet`.
    style:
        Function applied to the level tag when rendering with colour.
    default, flush, warn, lowest:
        Table flags. ``flush`` marks levels that force transports to write
        buffered output immediately.
    """

    name: str
    rank: int
    style: StyleFn = field(default=_identity, compare=False)
    default: bool = False
    flush: bool = False
    warn: bool = False
    lowest: bool = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "name", self.name.strip().upper())
        if not self.name:
            raise ConfigurationError("Level name must not be empty")

    def styled(self, text: str | None = None) -> str:
        """Return ``text`` (default: the level name) passed through :attr:`style`."""

        return self.style(self.name if text is None else text)


class LevelSet:
    """Ordered table of :class:`Level` rows with threshold helpers.

    The ordering direction is derived from the table itself: when the rank of
    the ``warn`` level is greater than or equal to the rank of the ``lowest``
    level, larger ranks are more severe; otherwise smaller ranks are.

    Examples
    --------
    >>> levels = LevelSet(MIN_LEVELS)
    >>> levels.as_value('warn')
    2
    >>> levels.meets_threshold('error', 'info')
    True
    >>> levels.meets_threshold('debug', 'info')
    False
    """

    def __init__(self, levels: Iterable[Level], *, name: str = "custom") -> None:
        table = tuple(levels)
        if not table:
            raise ConfigurationError("A level set requires at least one level")
        by_name: dict[str, Level] = {}
        for level in table:
            if level.name in by_name:
                raise ConfigurationError(f"Duplicate level name: {level.name!r}")
            by_name[level.name] = level
        self._name = name
        self._levels = table
        self._by_name = by_name
        self._default = self._flagged("default") or table[0]
        self._warn = self._flagged("warn")
        lowest = self._flagged("lowest")
        if self._warn is not None and lowest is not None:
            self._increasing = self._warn.rank >= lowest.rank
        else:
            self._increasing = False
        if lowest is None:
            key = (lambda lvl: lvl.rank) if not self._increasing else (lambda lvl: -lvl.rank)
            lowest = max(table, key=key)
        self._lowest = lowest

    def _flagged(self, flag: str) -> Level | None:
        for level in self._levels:
            if getattr(level, flag):
                return level
        return None

    @property
    def name(self) -> str:
        return self._name

    @property
    def increasing(self) -> bool:
        """Return ``True`` when larger ranks denote higher severity."""

        return self._increasing

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(level.name for level in self._levels)

    @property
    def default_level(self) -> Level:
        return self._default

    @property
    def warn_level(self) -> Level | None:
        return self._warn

    @property
    def lowest_level(self) -> Level:
        return self._lowest

    @property
    def max_width(self) -> int:
        """Return the length of the longest level name, used to pad level tags."""

        return max(len(level.name) for level in self._levels)

    def __iter__(self) -> Iterator[Level]:
        return iter(self._levels)

    def __len__(self) -> int:
        return len(self._levels)

    def __contains__(self, item: object) -> bool:
        if isinstance(item, Level):
            return self._by_name.get(item.name) == item
        if isinstance(item, str):
            return item.strip().upper() in self._by_name
        return False

    def __repr__(self) -> str:
        return f"LevelSet(name={self._name!r}, levels={list(self.names)!r})"

    def level(self, value: str | int | Level) -> Level:
        """Return the :class:`Level` identified by name, rank or instance.

        Raises
        ------
        ConfigurationError
            If ``value`` does not identify a level of this set.
        """

        if isinstance(value, Level):
            if value.name in self._by_name:
                return self._by_name[value.name]
        elif isinstance(value, bool):
            pass
        elif isinstance(value, int):
            for level in self._levels:
                if level.rank == value:
                    return level
        elif isinstance(value, str):
            found = self._by_name.get(value.strip().upper())
            if found is not None:
                return found
        raise ConfigurationError(f"Cannot get log level: no name for level: {value}")

    def as_value(self, value: str | int | Level) -> int:
        """Return the rank of ``value``."""

        return self.level(value).rank

    def as_name(self, value: str | int | Level) -> str:
        """Return the canonical upper-case name of ``value``."""

        return self.level(value).name

    def meets_threshold(self, level: str | int | Level, threshold: str | int | Level) -> bool:
        """Return ``True`` when ``level`` is at least as severe as ``threshold``."""

        rank = self.as_value(level)
        bound = self.as_value(threshold)
        if self._increasing:
            return rank >= bound
        return rank <= bound

    def meets_flush_threshold(self, level: str | int | Level) -> bool:
        """Return ``True`` when ``level`` carries the ``flush`` flag."""

        return self.level(level).flush

    def apply_style(self, level: str | int | Level, text: str | None = None) -> str:
        """Render ``text`` (default: the level name) with the level's style."""

        return self.level(level).styled(text)


_red = painter(styles.RED)
_yellow = painter(styles.YELLOW)
_green = painter(styles.GREEN)
_cyan = painter(styles.CYAN)
_blue_dim = painter(styles.BLUE_DIM)
_gray = painter(styles.GRAY)
_bright_red = painter(styles.BRIGHT_RED)
_magenta = painter(styles.MAGENTA)

STD_LEVELS: tuple[Level, ...] = (
    Level("FATAL", 0, _bright_red, flush=True),
    Level("CRITICAL", 0, _bright_red, flush=True),
    Level("ERROR", 1, _red, flush=True),
    Level("WARN", 2, _yellow, warn=True),
    Level("INFO", 3, _green, default=True),
    Level("VERBOSE", 4, _cyan),
    Level("DEBUG", 5, _blue_dim),
    Level("TRACE", 6, _gray),
    Level("SPAM", 7, _gray, lowest=True),
    Level("SILLY", 7, _gray),
)

CLI_LEVELS: tuple[Level, ...] = (
    Level("ERROR", 0, _red, flush=True),
    Level("WARN", 1, _yellow, warn=True),
    Level("HELP", 2, _cyan),
    Level("DATA", 3, _gray),
    Level("INFO", 4, _green, default=True),
    Level("DEBUG", 5, _blue_dim),
    Level("PROMPT", 6, _gray),
    Level("VERBOSE", 7, _cyan),
    Level("INPUT", 8, _gray),
    Level("SILLY", 9, _magenta, lowest=True),
)

JAVA_LEVELS: tuple[Level, ...] = (
    Level("SEVERE", 1, _red, flush=True),
    Level("WARNING", 2, _yellow, warn=True),
    Level("INFO", 3, _green, default=True),
    Level("CONFIG", 4, _cyan),
    Level("FINE", 5, _blue_dim),
    Level("FINER", 6, _gray),
    Level("FINEST", 7, _gray, lowest=True),
)

MIN_LEVELS: tuple[Level, ...] = (
    Level("ERROR", 1, _red, flush=True),
    Level("WARN", 2, _yellow, warn=True),
    Level("INFO", 3, _green, default=True),
    Level("DEBUG", 5, _blue_dim, lowest=True),
)

_SHIPPED: dict[str, tuple[Level, ...]] = {
    "std": STD_LEVELS,
    "cli": CLI_LEVELS,
    "java": JAVA_LEVELS,
    "min": MIN_LEVELS,
}


def level_set_from_name(name: str) -> LevelSet:
    """Return a fresh :class:`LevelSet` for one of the shipped tables.

    Examples
    --------
    >>> level_set_from_name('java').default_level.name
    'INFO'
    """

    key = name.strip().lower()
    try:
        table = _SHIPPED[key]
    except KeyError as exc:
        raise ConfigurationError(f"Unknown level set: {name!r}") from exc
    return LevelSet(table, name=key)


SHIPPED_LEVEL_SETS = tuple(_SHIPPED)


__all__ = [
    "CLI_LEVELS",
    "JAVA_LEVELS",
    "Level",
    "LevelSet",
    "MIN_LEVELS",
    "SHIPPED_LEVEL_SETS",
    "STD_LEVELS",
    "StyleFn",
    "level_set_from_name",
    "painter",
]
