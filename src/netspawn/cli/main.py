"""Main CLI implementation using Typer."""

from pathlib import Path
from typing import Any, Callable, Optional

import typer

from netspawn.cli.commands import (
    build_registry,
    check_host,
    console,
    create_container,
    show_config,
    update_container,
)
from netspawn.engine.config import ConfigManager
from netspawn.errors import ProvisioningError, UserCancelled
from netspawn.utils.logging import setup_logging


app = typer.Typer(
    name="netspawn",
    help="Create a Proxmox VE LXC container running the NetBird VPN client",
    add_completion=False,
)


def _run_cli_command(
    handler: Callable[..., Any],
    config_path: Optional[Path],
    log_level: Optional[str],
    log_file: Optional[Path] = None,
    **kwargs: Any,
):
    """Load config, wire providers and map pipeline errors to exit codes."""
    try:
        manager = ConfigManager(config_path)
        config = manager.load()
        setup_logging(log_level or config.log_level, log_file)
        registry = build_registry(config)
        return handler(config, registry, **kwargs)
    except UserCancelled as e:
        console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(e.exit_code)
    except ProvisioningError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(e.exit_code) from e


@app.command("create")
def create_command(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML configuration file"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Override the configured log level"
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also write logs to this file"
    ),
):
    """Create a container and install NetBird in it."""
    _run_cli_command(create_container, config, log_level, log_file)


@app.command("check")
def check_command(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML configuration file"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Override the configured log level"
    ),
):
    """Check the host and show the storage and template a run would use."""
    _run_cli_command(check_host, config, log_level)


@app.command("update")
def update_command(
    vmid: int = typer.Argument(..., help="ID of an existing NetBird container"),
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML configuration file"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", "-l", help="Override the configured log level"
    ),
):
    """Upgrade packages in an existing NetBird container."""
    _run_cli_command(update_container, config, log_level, vmid=vmid)


# Config subcommands
config_app = typer.Typer(help="Configuration commands")
app.add_typer(config_app, name="config")


@config_app.command("show")
def config_show_command(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="YAML configuration file"
    ),
):
    """Print the effective configuration."""
    manager = ConfigManager(config)
    try:
        manager.load()
    except ProvisioningError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(e.exit_code) from e
    show_config(manager)


def main():
    """Main entry point for CLI."""
    app()
