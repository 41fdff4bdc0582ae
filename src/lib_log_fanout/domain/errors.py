"""Error taxonomy shared by every layer of the toolkit.

Purpose
-------
Give callers one hierarchy to catch while keeping each failure class aligned
with a familiar builtin (``RuntimeError``, ``LookupError``, ``AssertionError``).

Contents
--------
* :class:`LogFanoutError` - common base.
* :class:`ConfigurationError` - level set unbound or malformed.
* :class:`MarkNotFoundError` - ``demark`` without a matching ``mark``.
* :class:`TransportError` and its delivery/readiness subclasses.
* :class:`ManagerClosedError` - dispatch or close after close.
* :class:`BufferAssertionError` - buffer transport assertion helpers.

System Role
-----------
Configuration and timing errors surface immediately at the call site.
Delivery errors are raised from ``flush``/``stop`` after a transport exhausted
its own retry policy.
"""

from __future__ import annotations


class LogFanoutError(Exception):
    """Base class for all errors raised by :mod:`lib_log_fanout`."""


class ConfigurationError(LogFanoutError, RuntimeError):
    """Raised when levels or thresholds are queried or set inconsistently."""


class MarkNotFoundError(LogFanoutError, LookupError):
    """Raised when :meth:`demark` is called for a name that was never marked."""

    def __init__(self, name: str) -> None:
        super().__init__(f"No mark found for name: {name!r}")
        self.name = name


class TransportError(LogFanoutError):
    """Base class for transport lifecycle and delivery failures."""


class TransportNotReadyError(TransportError):
    """Raised when a record is emitted to a transport whose setup has not completed."""


class TransportDestroyedError(TransportError):
    """Raised when a destroyed transport receives further input."""


class TransportDeliveryError(TransportError):
    """Raised when a transport could not deliver buffered output.

    Attributes
    ----------
    attempts:
        Number of delivery attempts performed before giving up.
    pending:
        Number of records still queued inside the transport.
    """

    def __init__(self, message: str, *, attempts: int = 1, pending: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.pending = pending


class ManagerClosedError(LogFanoutError, RuntimeError):
    """Raised when a closed :class:`LogManager` receives records or is closed again."""


class BufferAssertionError(AssertionError):
    """Raised by the buffer transport assertion helpers."""


__all__ = [
    "BufferAssertionError",
    "ConfigurationError",
    "LogFanoutError",
    "ManagerClosedError",
    "MarkNotFoundError",
    "TransportDeliveryError",
    "TransportDestroyedError",
    "TransportError",
    "TransportNotReadyError",
]
