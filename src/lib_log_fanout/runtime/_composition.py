"""Runtime composition helpers wiring domain, application, and adapters.

Purpose
-------
Translate :class:`~lib_log_fanout.config.Settings` into a ready-to-start
:class:`LogManager` with a console transport as default sink.

Contents
--------
* :func:`build_display` - display options derived from settings.
* :func:`build_console_transport` - console transport honouring colour flags.
* :func:`build_manager` - manager with level set, threshold and transports.

System Role
-----------
Anchors the clean-architecture boundary: only this module (and the CLI)
imports concrete adapters together with the application layer.
"""

from __future__ import annotations

from collections.abc import Iterable

from lib_log_fanout.adapters.console.rich_console import ConsoleTransport
from lib_log_fanout.application.manager import DiagnosticHook, LogManager
from lib_log_fanout.application.ports.transport import TransportPort
from lib_log_fanout.config import Settings
from lib_log_fanout.domain.display import DisplayOptions
from lib_log_fanout.domain.levels import Level, LevelSet
from lib_log_fanout.domain.message import BuilderFactory, MessageBuilder


def build_display(settings: Settings) -> DisplayOptions:
    return DisplayOptions(timestamp=settings.timestamp)


def build_console_transport(settings: Settings, display: DisplayOptions | None = None) -> ConsoleTransport:
    """Return a console transport configured from ``settings``."""

    return ConsoleTransport(
        color=not settings.no_color,
        use_stderr=settings.use_stderr,
        format=settings.console_format,
        display=display or build_display(settings),
        force_color=settings.force_color,
        no_color=settings.no_color,
    )


def build_manager(
    settings: Settings,
    *,
    levels: LevelSet | Iterable[Level] | str | None = None,
    threshold: str | Level | None = None,
    transports: Iterable[TransportPort] = (),
    display: DisplayOptions | None = None,
    builder_factory: BuilderFactory = MessageBuilder,
    diagnostic: DiagnosticHook | None = None,
) -> LogManager:
    """Assemble a manager; explicit arguments override ``settings``."""

    resolved_display = display or build_display(settings)
    manager = LogManager(
        levels if levels is not None else settings.levels,
        threshold=threshold if threshold is not None else settings.threshold,
        display=resolved_display,
        builder_factory=builder_factory,
        default_transport=lambda: build_console_transport(settings, resolved_display),
        diagnostic=diagnostic,
    )
    for transport in transports:
        manager.add_transport(transport)
    return manager


__all__ = ["build_console_transport", "build_display", "build_manager"]
