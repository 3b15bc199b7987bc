from __future__ import annotations

import os
from pathlib import Path

import pytest
from click.testing import CliRunner

from lib_udp_output import cli as cli_module
from lib_udp_output import config as output_config
from lib_udp_output.domain.config import ConfigInvalidError
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]


@pytest.fixture(autouse=True)
def _reset_dotenv_state() -> None:
    """Reset shared dotenv state around each test."""

    output_config._reset_dotenv_state_for_testing()
    yield
    output_config._reset_dotenv_state_for_testing()


def test_enable_dotenv_populates_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Loading the nearest .env injects values without overriding call arguments."""

    nested = tmp_path / "nested"
    nested.mkdir()
    env_file = tmp_path / ".env"
    env_file.write_text("UDP_OUTPUT_HOST=dotenv-collector\n")
    monkeypatch.chdir(nested)
    monkeypatch.delenv("UDP_OUTPUT_HOST", raising=False)

    loaded = output_config.enable_dotenv()

    assert loaded == env_file.resolve()
    assert os.environ["UDP_OUTPUT_HOST"] == "dotenv-collector"

    os.environ.pop("UDP_OUTPUT_HOST", None)


def test_enable_dotenv_respects_existing_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Existing environment variables keep precedence over .env entries."""

    nested = tmp_path / "nested"
    nested.mkdir()
    (tmp_path / ".env").write_text("UDP_OUTPUT_HOST=dotenv-collector\n")
    monkeypatch.chdir(nested)
    monkeypatch.setenv("UDP_OUTPUT_HOST", "real-collector")

    result = output_config.enable_dotenv()

    assert result is not None
    assert os.environ["UDP_OUTPUT_HOST"] == "real-collector"


def test_enable_dotenv_without_file_returns_none(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setattr(output_config, "find_dotenv", lambda usecwd: "")

    assert output_config.enable_dotenv() is None


def test_cli_dotenv_toggle_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    """CLI flag wins over environment toggle when deciding whether to load .env."""

    runner = CliRunner()

    calls: list[tuple[tuple[object, ...], dict[str, object]]] = []

    def record_enable(*args: object, **kwargs: object) -> None:
        calls.append((args, kwargs))

    monkeypatch.setattr(output_config, "enable_dotenv", record_enable)
    monkeypatch.delenv(output_config.DOTENV_ENV_VAR, raising=False)

    result = runner.invoke(cli_module.cli, ["--use-dotenv", "info"])
    assert result.exit_code == 0
    assert len(calls) == 1

    calls.clear()
    env = {output_config.DOTENV_ENV_VAR: "1"}
    result = runner.invoke(cli_module.cli, ["info"], env=env)
    assert result.exit_code == 0
    assert len(calls) == 1

    calls.clear()
    env = {output_config.DOTENV_ENV_VAR: "1"}
    result = runner.invoke(cli_module.cli, ["--no-use-dotenv", "info"], env=env)
    assert result.exit_code == 0
    assert calls == []


@pytest.mark.parametrize("value", ["0", "off", "", "maybe"])
def test_should_use_dotenv_ignores_non_truthy_values(value: str) -> None:
    assert output_config.should_use_dotenv(env_value=value) is False


def test_load_output_config_prefers_environment() -> None:
    env = {
        "UDP_OUTPUT_HOST": "collector.example",
        "UDP_OUTPUT_PORT": "5140",
        "UDP_OUTPUT_PARAMS": "x,y",
        "UDP_OUTPUT_SEPARATOR": "",
    }

    config = output_config.load_output_config(host="code-host", port=1, params="a", separator=";", environ=env)

    assert config.address == ("collector.example", 5140)
    assert config.field_names == ("x", "y")
    assert config.separator == ""


def test_load_output_config_ignores_blank_environment_values() -> None:
    env = {"UDP_OUTPUT_HOST": "  ", "UDP_OUTPUT_PARAMS": ""}

    config = output_config.load_output_config(host="code-host", port=514, params="a,b", environ=env)

    assert config.host == "code-host"
    assert config.field_names == ("a", "b")


def test_load_output_config_reports_missing_options() -> None:
    with pytest.raises(ConfigInvalidError, match="Missing configuration"):
        output_config.load_output_config(params="a", environ={})
