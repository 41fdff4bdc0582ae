"""CLI behaviour coverage for the click command group."""

from __future__ import annotations

import re

import pytest
from click.testing import CliRunner

from lib_log_fanout import __init__conf__
from lib_log_fanout import cli as cli_mod

ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")


def strip_ansi(text: str) -> str:
    """Return ``text`` without ANSI colour codes.

    Examples
    --------
    >>> strip_ansi("\x1b[31mred\x1b[0m")
    'red'
    """

    return ANSI_RE.sub("", text)


@pytest.fixture(autouse=True)
def _clean_log_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("LOG_LEVELS", "LOG_THRESHOLD", "LOG_TIMESTAMP", "LOG_CONSOLE_FORMAT", "LOG_FORCE_COLOR", "LOG_USE_DOTENV"):
        monkeypatch.delenv(name, raising=False)


def test_cli_without_subcommand_prints_summary() -> None:
    result = CliRunner().invoke(cli_mod.cli, [], prog_name=__init__conf__.shell_command)

    assert result.exit_code == 0
    assert result.output == cli_mod.summary_info()


def test_cli_info_command_matches_summary() -> None:
    result = CliRunner().invoke(cli_mod.cli, ["info"])

    assert result.exit_code == 0
    assert result.output.startswith("Info for lib_log_fanout:")
    assert "version" in result.output


def test_cli_version_flag_prints_version() -> None:
    result = CliRunner().invoke(cli_mod.cli, ["--version"])

    assert result.exit_code == 0
    assert result.output.strip() == __init__conf__.version


def test_demo_emits_levels_at_or_above_the_threshold() -> None:
    result = CliRunner().invoke(cli_mod.cli, ["demo", "--no-color"])

    assert result.exit_code == 0, result.output
    output = strip_ansi(result.output)
    assert "[FATAL   ] demo fatal sample message" in output
    assert "debug sample message" not in output
    assert "emitted 6 record(s)" in output


def test_demo_with_alternative_level_set_and_threshold() -> None:
    result = CliRunner().invoke(cli_mod.cli, ["demo", "--levels", "min", "--threshold", "debug", "--no-color"])

    assert result.exit_code == 0, result.output
    output = strip_ansi(result.output)
    assert "[DEBUG] demo debug sample message" in output
    assert "h1 h2 h3 action label highlight value path date strikethru warn error" in output
    assert "emitted 5 record(s)" in output


def test_demo_rejects_unknown_level_sets() -> None:
    result = CliRunner().invoke(cli_mod.cli, ["demo", "--levels", "syslog"])

    assert result.exit_code != 0
    assert "syslog" in result.output


def test_main_returns_zero_and_prints_version(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_mod.main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == __init__conf__.version


def test_main_reports_usage_errors(capsys: pytest.CaptureFixture[str]) -> None:
    assert cli_mod.main(["demo", "--levels", "syslog"]) == 2
    assert "syslog" in capsys.readouterr().err


def test_version_comes_from_installed_distribution_metadata() -> None:
    from importlib import metadata

    assert __init__conf__.version == metadata.version(__init__conf__.name)


def test_version_falls_back_when_distribution_is_missing() -> None:
    assert __init__conf__._installed_version("lib-log-fanout-not-installed") == "0.0.0"
