"""Click command group exposing metadata and a rendering demo.

Purpose
-------
Give operators a quick way to inspect the installed distribution and to see
how each level set and style kind renders on their terminal.

Contents
--------
* :func:`cli` - root group with ``--version`` and the ``.env`` toggle.
* :func:`info` - print the metadata banner.
* :func:`demo` - emit one line per level plus a styled sample.
* :func:`main` - test-friendly entry point returning an exit code.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from typing import Sequence

import click

from . import __init__conf__
from . import config as log_config
from .domain.display import DisplayOptions, TimestampMode
from .domain.levels import SHIPPED_LEVEL_SETS
from .runtime import create_manager
from .runtime._composition import build_console_transport

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}


def summary_info() -> str:
    """Return the metadata banner printed by ``info``.

    Examples
    --------
    >>> "version" in summary_info()
    True
    """

    lines: list[str] = []
    __init__conf__.print_info(writer=lines.append)
    return "".join(lines)


@click.group(invoke_without_command=True, context_settings=CONTEXT_SETTINGS)
@click.version_option(__init__conf__.version, "--version", "-V", message="%(version)s")
@click.option(
    "--use-dotenv/--no-use-dotenv",
    default=None,
    help=f"Load the nearest .env before reading LOG_* settings (default: ${log_config.DOTENV_ENV_VAR}).",
)
@click.pass_context
def cli(ctx: click.Context, use_dotenv: bool | None) -> None:
    """Structured logging toolkit command line."""

    if log_config.dotenv_requested(use_dotenv):
        log_config.enable_dotenv()
    if ctx.invoked_subcommand is None:
        click.echo(summary_info(), nl=False)


@cli.command("info")
def info() -> None:
    """Print distribution metadata."""

    click.echo(summary_info(), nl=False)


@cli.command("demo")
@click.option("--levels", "level_set", type=click.Choice(SHIPPED_LEVEL_SETS), default=None, help="Level set to demo.")
@click.option("--threshold", default=None, help="Lowest level name to show.")
@click.option("--no-color", is_flag=True, default=False, help="Render without escape sequences.")
@click.option("--stderr", "use_stderr", is_flag=True, default=False, help="Write to standard error.")
def demo(level_set: str | None, threshold: str | None, no_color: bool, use_stderr: bool) -> None:
    """Emit one line per level and a sample using every style kind."""

    settings = log_config.load_settings()
    settings = replace(settings, no_color=no_color or settings.no_color, use_stderr=use_stderr or settings.use_stderr)
    count = asyncio.run(_run_demo(settings, level_set or settings.levels, threshold))
    click.echo(f"emitted {count} record(s)")


async def _run_demo(settings: log_config.Settings, level_set: str, threshold: str | None) -> int:
    display = DisplayOptions(timestamp=TimestampMode.NONE)
    transport = build_console_transport(settings, display)
    manager = create_manager(settings, levels=level_set, threshold=threshold, display=display, transports=[transport])
    log = manager.get_logger(package="demo")
    emitted = 0
    async with manager:
        for level in manager.level_set:
            if log.builder(level).h2(level.name.lower()).plain("sample message").emit() is not None:
                emitted += 1
        sample = log.builder(manager.threshold)
        sample.h1("h1").h2("h2").h3("h3").action("action").label("label").highlight("highlight")
        sample.value("value").path("path").date("date").strikethru("strikethru").warn("warn").error("error")
        if sample.elapsed(log.elapsed_ms).emit() is not None:
            emitted += 1
    return emitted


def main(argv: Sequence[str] | None = None) -> int:
    """Run the Click group and return an exit code instead of exiting.

    Examples
    --------
    >>> main(["--version"])  # doctest: +ELLIPSIS
    0...
    0
    """

    args = list(argv) if argv is not None else None
    try:
        cli.main(args=args, prog_name=__init__conf__.shell_command, standalone_mode=False)
    except click.ClickException as error:
        error.show()
        return error.exit_code
    return 0


__all__ = ["cli", "demo", "info", "main", "summary_info"]
