"""Command implementations for CLI."""

import logging
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

from netspawn.adapters.proxmox import ProxmoxHost
from netspawn.cli import display
from netspawn.cli.prompts import InputCollector, InputSource, RichInputSource
from netspawn.engine.config import ConfigManager
from netspawn.engine.pipeline import ProvisioningOutcome, ProvisioningPipeline
from netspawn.models.config import SpawnConfig
from netspawn.models.container import ContainerHandle
from netspawn.providers.registry import ProviderRegistry
from netspawn.utils.command import CommandRunner, run_command


logger = logging.getLogger(__name__)

console = display.console


def build_registry(config: SpawnConfig, runner: CommandRunner = run_command) -> ProviderRegistry:
    """Wire the host adapter and every provider for one run."""
    host = ProxmoxHost(
        runner=runner,
        lxc_config_dir=Path(config.host.lxc_config_dir),
        timeout=config.host.command_timeout,
    )
    registry = ProviderRegistry(host)
    registry.initialize(config)
    return registry


def create_container(
    config: SpawnConfig,
    registry: ProviderRegistry,
    source: Optional[InputSource] = None,
    out: Optional[Console] = None,
) -> ProvisioningOutcome:
    """Run the full provisioning pipeline interactively."""
    out = out or console
    host = registry.host
    collector = InputCollector(
        source=source or RichInputSource(out),
        defaults=config.defaults,
        next_vmid=host.next_vmid,
        vmid_in_use=lambda vmid: not host.vmid_available(vmid),
        summary=lambda request, selection, label: display.render_summary(
            request, selection, label, out=out
        ),
    )

    display.render_banner(out)
    outcome = ProvisioningPipeline(registry, collector).run()
    display.render_completion(outcome, out=out)
    return outcome


def check_host(config: SpawnConfig, registry: ProviderRegistry, out: Optional[Console] = None):
    """Probe the host and show what a run would use."""
    out = out or console
    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        console=out,
        transient=True,
    ) as progress:
        task = progress.add_task("Checking host...", total=None)
        report = ProvisioningPipeline(registry).preflight()
        progress.update(task, completed=True)

    display.render_preflight(report, out=out)
    out.print("[green]✓[/green] Host is ready for provisioning")
    return report


def update_container(
    config: SpawnConfig,
    registry: ProviderRegistry,
    vmid: int,
    out: Optional[Console] = None,
):
    """Upgrade packages in an existing NetBird container."""
    out = out or console
    registry.require("host").verify_host_environment()
    handle = ContainerHandle(vmid=vmid, hostname=str(vmid))
    registry.require("payload").update(handle)
    out.print(f"[green]✓[/green] Container {vmid} updated")


def show_config(manager: ConfigManager, out: Optional[Console] = None):
    """Print the effective configuration."""
    out = out or console
    if manager.source:
        out.print(f"[dim]# loaded from {manager.source}[/dim]")
    else:
        out.print("[dim]# built-in defaults[/dim]")
    out.print(manager.dump(), markup=False, highlight=False)
