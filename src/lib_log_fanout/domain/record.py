"""Log record travelling from loggers through the manager to transports.

Purpose
-------
Provide one immutable, serialisable value per ``emit()`` call.

Contents
--------
* :class:`LogRecord` dataclass with rendering and serialisation helpers.
* ``_ensure_aware`` timestamp validation helper.

System Role
-----------
Created by the message builder (or directly by callers), prefixed once with
the logger's indentation, then owned by the manager for the duration of
dispatch. Transports read it but never mutate it.
"""

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from .levels import Level
from .tokens import StyledMessage


def _ensure_aware(ts: datetime) -> datetime:
    """Validate that ``ts`` is timezone-aware and normalise to UTC."""
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        raise ValueError("timestamp must be timezone-aware")
    return ts.astimezone(timezone.utc)


@dataclass(slots=True, frozen=True)
class LogRecord:
    """Immutable log record.

    Attributes
    ----------
    level:
        :class:`Level` the record was emitted at.
    message:
        Raw string or :class:`StyledMessage` produced by a builder.
    timestamp:
        Emission time, timezone-aware UTC.
    request_ids, packages:
        Ordered context tags inherited from the emitting logger.
    session_id:
        Optional session identifier.
    data:
        Optional structured payload attached via ``builder.data()``.
    elapsed_ms:
        Milliseconds since the emitting logger was created, if known.
    """

    level: Level
    message: str | StyledMessage
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    request_ids: tuple[str, ...] = ()
    packages: tuple[str, ...] = ()
    session_id: str | None = None
    data: Mapping[str, Any] | None = None
    elapsed_ms: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "timestamp", _ensure_aware(self.timestamp))
        object.__setattr__(self, "request_ids", tuple(self.request_ids))
        object.__setattr__(self, "packages", tuple(self.packages))
        if self.data is not None:
            object.__setattr__(self, "data", dict(self.data))

    @property
    def text(self) -> str:
        """Return the message rendered without escape sequences."""

        return self.render(color=False)

    def render(self, color: bool = False) -> str:
        """Render the message, applying token styles when ``color`` is set."""

        if isinstance(self.message, StyledMessage):
            return self.message.format(color)
        return self.message

    def with_prefix(self, prefix: str) -> "LogRecord":
        """Return a copy whose message starts with ``prefix``.

        Examples
        --------
        >>> from lib_log_fanout.domain.levels import Level
        >>> record = LogRecord(Level('INFO', 3), 'hello')
        >>> record.with_prefix('>>').message
        '>> hello'
        """

        if not prefix:
            return self
        if isinstance(self.message, StyledMessage):
            return replace(self, message=self.message.prepend(prefix))
        return replace(self, message=f"{prefix} {self.message}")

    def to_dict(self) -> dict[str, Any]:
        """Serialise the record with an ISO-8601 timestamp and plain message."""

        payload: dict[str, Any] = {
            "timestamp": self.timestamp.isoformat(),
            "level": self.level.name,
            "message": self.text,
        }
        if self.packages:
            payload["packages"] = list(self.packages)
        if self.request_ids:
            payload["request_ids"] = list(self.request_ids)
        if self.session_id is not None:
            payload["session_id"] = self.session_id
        if self.data:
            payload["data"] = dict(self.data)
        if self.elapsed_ms is not None:
            payload["elapsed_ms"] = round(self.elapsed_ms, 3)
        return payload

    def to_json(self) -> str:
        """Serialise the record to JSON with sorted keys for deterministic output."""

        return json.dumps(self.to_dict(), sort_keys=True, default=str)

    def replace(self, **changes: Any) -> "LogRecord":
        """Return a copied record with ``changes`` applied."""

        return replace(self, **changes)


__all__ = ["LogRecord"]
