import io
from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from fritzlog.cli import command_defconfig, main
from fritzlog.exceptions import InvalidCredentialsError


def test_defconfig_prints_sections_with_settings():
    stream = io.StringIO()

    command_defconfig(stream)

    output = stream.getvalue()
    assert output.startswith("[Base]\n")
    assert "[Csv]\nout_dir = \".\"\n" in output
    assert "[Console]" not in output


def test_main_defconfig_exits_zero(capsys: pytest.CaptureFixture[str]):
    assert main(["defconfig"]) == 0
    assert "[Base]" in capsys.readouterr().out


def test_main_without_command_prints_help(capsys: pytest.CaptureFixture[str]):
    assert main([]) == 2
    assert "usage:" in capsys.readouterr().err


def test_run_with_missing_config_exits_with_error_chain(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
):
    # Act
    code = main(["run", "-c", str(tmp_path / "missing.toml")])

    # Assert
    assert code == 1
    err = capsys.readouterr().err
    assert "Error: Failed to load config file" in err
    assert "Caused by: Config file" in err


def test_run_with_unknown_backend_exits_with_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
):
    config = tmp_path / "config.toml"
    config.write_text('[Base]\nbackends = ["Influx"]\n', encoding="utf-8")

    code = main(["run", "-c", str(config)])

    assert code == 1
    assert "Backend \"Influx\" does not exist" in capsys.readouterr().err


def test_run_with_failed_login_exits_with_error(
    tmp_path: Path, capsys: pytest.CaptureFixture[str]
):
    # Prepare
    config = tmp_path / "config.toml"
    config.write_text('[Base]\nbackends = []\npassword = "x"\n', encoding="utf-8")
    async_run = AsyncMock(side_effect=InvalidCredentialsError("Authentication failed"))

    # Act
    with patch("fritzlog.cli.async_run", async_run):
        code = main(["run", "-c", str(config)])

    # Assert
    assert code == 1
    assert "Error: Authentication failed" in capsys.readouterr().err
    settings = async_run.await_args.args[0]
    assert settings.password == "x"
    assert settings.backends == []


def test_run_ignores_invalid_settings_of_disabled_backend(tmp_path: Path):
    # Prepare
    config = tmp_path / "config.toml"
    config.write_text(
        '[Base]\nbackends = ["Console"]\n\n[Csv]\nout_dir = 5\n', encoding="utf-8"
    )
    async_run = AsyncMock(return_value=None)

    # Act
    with patch("fritzlog.cli.async_run", async_run):
        code = main(["run", "-c", str(config)])

    # Assert
    assert code == 0
    dispatcher = async_run.await_args.args[1]
    assert [backend.name for backend in dispatcher.backends] == ["Console"]
