from __future__ import annotations

import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner

from lib_log_fanout import cli as cli_module
from lib_log_fanout import config as log_config
from lib_log_fanout.domain.display import OutputFormat, TimestampMode
from lib_log_fanout.domain.errors import ConfigurationError


@pytest.fixture(autouse=True)
def _reset_dotenv_state() -> Iterator[None]:
    """Reset shared dotenv state around each test."""

    log_config._reset_dotenv_state_for_testing()
    yield
    log_config._reset_dotenv_state_for_testing()


def test_enable_dotenv_populates_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    nested = tmp_path / "nested"
    nested.mkdir()
    env_file = tmp_path / ".env"
    env_file.write_text("LOG_THRESHOLD=debug\n")
    monkeypatch.chdir(nested)
    monkeypatch.delenv("LOG_THRESHOLD", raising=False)

    loaded = log_config.enable_dotenv()

    assert loaded == env_file.resolve()
    assert os.environ["LOG_THRESHOLD"] == "debug"
    monkeypatch.delenv("LOG_THRESHOLD", raising=False)


def test_enable_dotenv_respects_existing_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".env").write_text("LOG_LEVELS=java\n")
    monkeypatch.setenv("LOG_LEVELS", "cli")

    result = log_config.enable_dotenv(search_from=tmp_path)

    assert result == (tmp_path / ".env").resolve()
    assert os.environ["LOG_LEVELS"] == "cli"


def test_enable_dotenv_loads_only_once(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    first = tmp_path / "first"
    other = tmp_path / "other"
    first.mkdir()
    other.mkdir()
    (first / ".env").write_text("LOG_NO_COLOR=1\n")
    (other / ".env").write_text("LOG_NO_COLOR=0\n")
    monkeypatch.delenv("LOG_NO_COLOR", raising=False)

    loaded = log_config.enable_dotenv(search_from=first)

    assert log_config.enable_dotenv(search_from=other) == loaded
    assert os.environ["LOG_NO_COLOR"] == "1"
    monkeypatch.delenv("LOG_NO_COLOR", raising=False)


def test_cli_dotenv_toggle_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    """CLI flag wins over the environment toggle when deciding whether to load .env."""

    runner = CliRunner()
    calls: list[tuple[tuple[object, ...], dict[str, object]]] = []

    def record_enable(*args: object, **kwargs: object) -> None:
        calls.append((args, kwargs))

    monkeypatch.setattr(log_config, "enable_dotenv", record_enable)
    monkeypatch.delenv(log_config.DOTENV_ENV_VAR, raising=False)

    result = runner.invoke(cli_module.cli, ["--use-dotenv", "info"])
    assert result.exit_code == 0
    assert len(calls) == 1

    calls.clear()
    result = runner.invoke(cli_module.cli, ["info"], env={log_config.DOTENV_ENV_VAR: "1"})
    assert result.exit_code == 0
    assert len(calls) == 1

    calls.clear()
    result = runner.invoke(cli_module.cli, ["--no-use-dotenv", "info"], env={log_config.DOTENV_ENV_VAR: "1"})
    assert result.exit_code == 0
    assert calls == []


def test_load_settings_reads_log_variables() -> None:
    settings = log_config.load_settings(
        {
            "LOG_LEVELS": "JAVA",
            "LOG_THRESHOLD": " fine ",
            "LOG_TIMESTAMP": "utc",
            "LOG_FORCE_COLOR": "yes",
            "LOG_NO_COLOR": "0",
            "LOG_USE_STDERR": "true",
            "LOG_CONSOLE_FORMAT": "json",
        }
    )

    assert settings == log_config.Settings(
        levels="java",
        threshold="fine",
        timestamp=TimestampMode.UTC,
        force_color=True,
        no_color=False,
        use_stderr=True,
        console_format=OutputFormat.JSON,
    )


def test_load_settings_defaults_for_empty_environment() -> None:
    assert log_config.load_settings({}) == log_config.Settings()


@pytest.mark.parametrize(
    "environ",
    [{"LOG_LEVELS": "syslog"}, {"LOG_TIMESTAMP": "lunar"}, {"LOG_CONSOLE_FORMAT": "xml"}],
)
def test_load_settings_rejects_invalid_values(environ: dict[str, str]) -> None:
    with pytest.raises(ConfigurationError):
        log_config.load_settings(environ)
