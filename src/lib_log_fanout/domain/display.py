"""Display options shared by the text-rendering transports.

Purpose
-------
Describe which parts of a record appear on a rendered line and how the
timestamp is shown, independent of where the line is written.

Contents
--------
* :class:`TimestampMode` - ``elapsed``, ``local``, ``utc`` or ``none``.
* :class:`OutputFormat` - ``text``, ``json`` or ``json-array``.
* :class:`DisplayOptions` - frozen bundle of per-part toggles.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Any


class TimestampMode(Enum):
    """How the timestamp column is rendered."""

    ELAPSED = "elapsed"
    LOCAL = "local"
    UTC = "utc"
    NONE = "none"

    @classmethod
    def from_name(cls, name: str) -> "TimestampMode":
        normalized = name.strip().lower()
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValueError(f"Unsupported timestamp mode: {name!r}") from exc


class OutputFormat(Enum):
    """Serialisation used by console and file transports.

    Examples
    --------
    >>> OutputFormat.from_name('plain') is OutputFormat.TEXT
    True
    >>> OutputFormat.from_name('JSON-ARRAY') is OutputFormat.JSON_ARRAY
    True
    """

    TEXT = "text"
    JSON = "json"
    JSON_ARRAY = "json-array"

    @classmethod
    def from_name(cls, name: str) -> "OutputFormat":
        normalized = name.strip().lower().replace("_", "-")
        if normalized == "plain":
            return cls.TEXT
        if normalized == "jsonarray":
            return cls.JSON_ARRAY
        try:
            return cls(normalized)
        except ValueError as exc:
            raise ValueError(f"Unsupported output format: {name!r}") from exc


@dataclass(slots=True, frozen=True)
class DisplayOptions:
    """Per-part toggles for rendered log lines."""

    level: bool = True
    timestamp: TimestampMode = TimestampMode.ELAPSED
    package: bool = True
    session_id: bool = True
    request_id: bool = True
    data: bool = True

    def __post_init__(self) -> None:
        if isinstance(self.timestamp, str):
            object.__setattr__(self, "timestamp", TimestampMode.from_name(self.timestamp))

    def replace(self, **changes: Any) -> "DisplayOptions":
        """Return a copy with ``changes`` applied."""

        return replace(self, **changes)


__all__ = ["DisplayOptions", "OutputFormat", "TimestampMode"]
