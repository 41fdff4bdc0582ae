"""Domain entities and value objects used by the dispatch pipeline."""

from __future__ import annotations

from .display import DisplayOptions, OutputFormat, TimestampMode
from .errors import (
    BufferAssertionError,
    ConfigurationError,
    LogFanoutError,
    ManagerClosedError,
    MarkNotFoundError,
    TransportDeliveryError,
    TransportDestroyedError,
    TransportError,
    TransportNotReadyError,
)
from .levels import (
    CLI_LEVELS,
    JAVA_LEVELS,
    MIN_LEVELS,
    STD_LEVELS,
    Level,
    LevelSet,
    level_set_from_name,
)
from .marks import TimeMarks
from .message import MessageBuilder, format_elapsed
from .record import LogRecord
from .ring_buffer import RingBuffer
from .styles import StyleKind
from .tokens import StyledMessage, StyledToken

__all__ = [
    "BufferAssertionError",
    "CLI_LEVELS",
    "ConfigurationError",
    "DisplayOptions",
    "JAVA_LEVELS",
    "Level",
    "LevelSet",
    "LogFanoutError",
    "LogRecord",
    "MIN_LEVELS",
    "ManagerClosedError",
    "MarkNotFoundError",
    "MessageBuilder",
    "OutputFormat",
    "RingBuffer",
    "STD_LEVELS",
    "StyleKind",
    "StyledMessage",
    "StyledToken",
    "TimeMarks",
    "TimestampMode",
    "TransportDeliveryError",
    "TransportDestroyedError",
    "TransportError",
    "TransportNotReadyError",
    "format_elapsed",
    "level_set_from_name",
]
