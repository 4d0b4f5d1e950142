"""Tests for CLI main module."""

import pytest
from unittest.mock import MagicMock, patch

import typer
from typer.testing import CliRunner

from netspawn.cli.main import _run_cli_command, app
from netspawn.errors import SelectionError, UserCancelled


cli_runner = CliRunner()


@patch("netspawn.cli.main.setup_logging")
@patch("netspawn.cli.main.build_registry")
@patch("netspawn.cli.main.ConfigManager")
@patch("netspawn.cli.main.console")
def test_run_cli_command_success(mock_console, mock_manager, mock_build, mock_logging):
    """Test the CLI command runner on a successful execution."""
    mock_handler = MagicMock()
    config = mock_manager.return_value.load.return_value
    config.log_level = "INFO"

    _run_cli_command(mock_handler, None, None, vmid=101)

    mock_manager.assert_called_once_with(None)
    mock_logging.assert_called_once_with("INFO", None)
    mock_build.assert_called_once_with(config)
    mock_handler.assert_called_once_with(config, mock_build.return_value, vmid=101)
    mock_console.print.assert_not_called()


@patch("netspawn.cli.main.setup_logging")
@patch("netspawn.cli.main.build_registry")
@patch("netspawn.cli.main.ConfigManager")
@patch("netspawn.cli.main.console")
def test_run_cli_command_log_level_override(mock_console, mock_manager, mock_build, mock_logging):
    mock_manager.return_value.load.return_value.log_level = "INFO"

    _run_cli_command(MagicMock(), None, "DEBUG")

    mock_logging.assert_called_once_with("DEBUG", None)


@patch("netspawn.cli.main.setup_logging")
@patch("netspawn.cli.main.build_registry")
@patch("netspawn.cli.main.ConfigManager")
@patch("netspawn.cli.main.console")
def test_run_cli_command_provisioning_error(mock_console, mock_manager, mock_build, mock_logging):
    """Test the CLI command runner when a stage fails."""
    mock_handler = MagicMock(side_effect=SelectionError("No suitable storage found for containers"))

    with pytest.raises(typer.Exit) as exc_info:
        _run_cli_command(mock_handler, None, None)

    mock_console.print.assert_called_once_with("[red]Error:[/red] No suitable storage found for containers")
    assert exc_info.value.exit_code == 1


@patch("netspawn.cli.main.setup_logging")
@patch("netspawn.cli.main.build_registry")
@patch("netspawn.cli.main.ConfigManager")
@patch("netspawn.cli.main.console")
def test_run_cli_command_cancelled(mock_console, mock_manager, mock_build, mock_logging):
    mock_handler = MagicMock(side_effect=UserCancelled("Container creation cancelled."))

    with pytest.raises(typer.Exit) as exc_info:
        _run_cli_command(mock_handler, None, None)

    mock_console.print.assert_called_once_with("[yellow]Container creation cancelled.[/yellow]")
    assert exc_info.value.exit_code == 0


def test_config_show(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("defaults:\n  memory: 2048\n")

    result = cli_runner.invoke(app, ["config", "show", "--config", str(path)])

    assert result.exit_code == 0
    assert "memory: 2048" in result.output


def test_config_show_missing_file(tmp_path):
    result = cli_runner.invoke(app, ["config", "show", "--config", str(tmp_path / "nope.yaml")])

    assert result.exit_code == 1


@patch("netspawn.cli.main._run_cli_command")
def test_update_passes_vmid(mock_run):
    result = cli_runner.invoke(app, ["update", "105"])

    assert result.exit_code == 0
    assert mock_run.call_args.kwargs["vmid"] == 105


def test_update_rejects_non_numeric_vmid():
    result = cli_runner.invoke(app, ["update", "abc"])

    assert result.exit_code == 2
