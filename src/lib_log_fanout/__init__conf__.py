"""Distribution metadata surfaced by the CLI ``info`` command."""

from __future__ import annotations

from collections.abc import Callable
from importlib import metadata

name = "lib_log_fanout"
title = "Structured logging with styled messages and ordered multi-transport fan-out"


def _installed_version(distribution: str) -> str:
    """Return the installed version of ``distribution``; a source checkout reports ``0.0.0``."""

    try:
        return metadata.version(distribution)
    except metadata.PackageNotFoundError:
        return "0.0.0"


version = _installed_version(name)
author = "bitranox"
shell_command = "lib_log_fanout"


def print_info(writer: Callable[[str], object] | None = None) -> None:
    """Write the metadata banner through ``writer`` (default: :func:`print`).

    Examples
    --------
    >>> lines = []
    >>> print_info(writer=lines.append)
    >>> lines[0]
    'Info for lib_log_fanout:\\n'
    """

    fields = (
        ("name", name),
        ("title", title),
        ("version", version),
        ("author", author),
        ("shell_command", shell_command),
    )
    width = max(len(label) for label, _ in fields)
    lines = [f"Info for {name}:\n", "\n"]
    lines.extend(f"    {label.ljust(width)} = {value}\n" for label, value in fields)
    emit = writer if writer is not None else (lambda text: print(text, end=""))
    for line in lines:
        emit(line)


__all__ = ["author", "name", "print_info", "shell_command", "title", "version"]
