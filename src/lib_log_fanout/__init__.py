"""Public package surface for structured, styled, multi-transport logging.

Applications usually need only :func:`create_manager`, a logger from
:meth:`LogManager.get_logger`, and :func:`shutdown` at exit. Transports and
domain types are re-exported for callers that wire things by hand.
"""

from __future__ import annotations

from .adapters.buffer import BufferEntry, BufferTransport
from .adapters.console.rich_console import ConsoleTransport
from .adapters.file import FileTransport
from .adapters.network import BatchingNetworkTransport, RequestsSender
from .application.logger import Logger
from .application.manager import LogManager, ManagerState
from .cli import summary_info
from .config import Settings, enable_dotenv, load_settings
from .domain import (
    CLI_LEVELS,
    JAVA_LEVELS,
    MIN_LEVELS,
    STD_LEVELS,
    BufferAssertionError,
    ConfigurationError,
    DisplayOptions,
    Level,
    LevelSet,
    LogFanoutError,
    LogRecord,
    ManagerClosedError,
    MarkNotFoundError,
    MessageBuilder,
    OutputFormat,
    StyleKind,
    StyledMessage,
    TimestampMode,
    TransportDeliveryError,
    TransportDestroyedError,
    TransportError,
    TransportNotReadyError,
)
from .runtime import create_manager, shutdown, shutdown_async

__all__ = [
    "BatchingNetworkTransport",
    "BufferAssertionError",
    "BufferEntry",
    "BufferTransport",
    "CLI_LEVELS",
    "ConfigurationError",
    "ConsoleTransport",
    "DisplayOptions",
    "FileTransport",
    "JAVA_LEVELS",
    "Level",
    "LevelSet",
    "LogFanoutError",
    "LogManager",
    "LogRecord",
    "Logger",
    "MIN_LEVELS",
    "ManagerClosedError",
    "ManagerState",
    "MarkNotFoundError",
    "MessageBuilder",
    "OutputFormat",
    "RequestsSender",
    "STD_LEVELS",
    "Settings",
    "StyleKind",
    "StyledMessage",
    "TimestampMode",
    "TransportDeliveryError",
    "TransportDestroyedError",
    "TransportError",
    "TransportNotReadyError",
    "create_manager",
    "enable_dotenv",
    "load_settings",
    "shutdown",
    "shutdown_async",
    "summary_info",
]
