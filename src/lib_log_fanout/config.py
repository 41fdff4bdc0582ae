"""Environment-driven configuration and optional ``.env`` loading.

Purpose
-------
Resolve the settings the CLI and :func:`lib_log_fanout.runtime.create_manager`
use when callers do not pass them explicitly, and optionally hydrate
``os.environ`` from the nearest ``.env`` file via :mod:`dotenv`.

Contents
--------
* :data:`DOTENV_ENV_VAR` - toggle consulted by the CLI.
* :func:`enable_dotenv` - load the nearest ``.env`` once, never overriding
  variables that are already set.
* :class:`Settings` / :func:`load_settings` - frozen snapshot of ``LOG_*``
  variables.

System Role
-----------
Explicit arguments always win over environment values, and environment values
always win over ``.env`` entries.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path

from dotenv import find_dotenv, load_dotenv

from lib_log_fanout.domain.display import OutputFormat, TimestampMode
from lib_log_fanout.domain.errors import ConfigurationError
from lib_log_fanout.domain.levels import SHIPPED_LEVEL_SETS

DOTENV_ENV_VAR = "LOG_USE_DOTENV"

_DOTENV_PATH: Path | None = None
_DOTENV_LOADED = False


def enable_dotenv(*, search_from: Path | None = None) -> Path | None:
    """Load the nearest ``.env`` (searching upwards) and return its path.

    Variables already present in the environment keep precedence. Only the
    first call loads anything; later calls return the cached path.
    """

    global _DOTENV_PATH, _DOTENV_LOADED
    if _DOTENV_LOADED:
        return _DOTENV_PATH
    if search_from is None:
        located = find_dotenv(usecwd=True)
        found = Path(located).resolve() if located else None
    else:
        found = _find_upwards(search_from)
    _DOTENV_LOADED = True
    if found is None:
        return None
    load_dotenv(found, override=False)
    _DOTENV_PATH = found
    return found


def _find_upwards(start: Path) -> Path | None:
    for directory in (start, *start.parents):
        candidate = directory / ".env"
        if candidate.is_file():
            return candidate.resolve()
    return None


def _reset_dotenv_state_for_testing() -> None:
    global _DOTENV_PATH, _DOTENV_LOADED
    _DOTENV_PATH = None
    _DOTENV_LOADED = False


def _env_bool(name: str, default: bool, environ: Mapping[str, str] | None = None) -> bool:
    """Return the boolean value of an environment variable with fallback.

    Examples
    --------
    >>> _env_bool('LOG_EXAMPLE', True, environ={})
    True
    >>> _env_bool('LOG_EXAMPLE', True, environ={'LOG_EXAMPLE': 'off'})
    False
    """

    source = os.environ if environ is None else environ
    value = source.get(name)
    if value is None or not value.strip():
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def dotenv_requested(flag: bool | None, environ: Mapping[str, str] | None = None) -> bool:
    """Return whether ``.env`` loading is on; an explicit ``flag`` beats :data:`DOTENV_ENV_VAR`."""

    if flag is not None:
        return flag
    return _env_bool(DOTENV_ENV_VAR, False, environ)


@dataclass(slots=True, frozen=True)
class Settings:
    """Resolved ``LOG_*`` configuration."""

    levels: str = "std"
    threshold: str | None = None
    timestamp: TimestampMode = TimestampMode.ELAPSED
    force_color: bool = False
    no_color: bool = False
    use_stderr: bool = False
    console_format: OutputFormat = OutputFormat.TEXT


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    """Read ``LOG_LEVELS``, ``LOG_THRESHOLD``, ``LOG_TIMESTAMP``, ``LOG_FORCE_COLOR``,
    ``LOG_NO_COLOR``, ``LOG_USE_STDERR`` and ``LOG_CONSOLE_FORMAT``.

    Raises
    ------
    ConfigurationError
        If a value cannot be interpreted.

    Examples
    --------
    >>> load_settings({'LOG_LEVELS': 'java', 'LOG_THRESHOLD': 'fine'}).threshold
    'fine'
    """

    source = os.environ if environ is None else environ
    levels = (source.get("LOG_LEVELS") or "std").strip().lower()
    if levels not in SHIPPED_LEVEL_SETS:
        raise ConfigurationError(f"LOG_LEVELS must be one of {', '.join(SHIPPED_LEVEL_SETS)}; got {levels!r}")
    threshold = (source.get("LOG_THRESHOLD") or "").strip() or None
    try:
        timestamp = TimestampMode.from_name(source.get("LOG_TIMESTAMP") or "elapsed")
        console_format = OutputFormat.from_name(source.get("LOG_CONSOLE_FORMAT") or "text")
    except ValueError as exc:
        raise ConfigurationError(str(exc)) from exc
    return Settings(
        levels=levels,
        threshold=threshold,
        timestamp=timestamp,
        force_color=_env_bool("LOG_FORCE_COLOR", False, source),
        no_color=_env_bool("LOG_NO_COLOR", False, source),
        use_stderr=_env_bool("LOG_USE_STDERR", False, source),
        console_format=console_format,
    )


__all__ = [
    "DOTENV_ENV_VAR",
    "Settings",
    "dotenv_requested",
    "enable_dotenv",
    "load_settings",
]
