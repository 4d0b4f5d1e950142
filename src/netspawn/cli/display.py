"""Rich rendering for the operator's terminal."""

from typing import List, Optional, Tuple

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from netspawn.models.request import ProvisioningRequest
from netspawn.models.resources import ResourceSelection
from netspawn.providers.base import ProviderStatus


console = Console()


def render_banner(out: Optional[Console] = None):
    """Print the tool banner."""
    out = out or console
    out.print(Panel.fit(
        "[bold]NetBird LXC Container Creation[/bold]\nfor Proxmox VE",
        border_style="cyan",
    ))


def summary_rows(
    request: ProvisioningRequest,
    selection: ResourceSelection,
    vmid_label: str,
) -> List[Tuple[str, str]]:
    """Label/value pairs shown before the confirmation gate."""
    template = selection.template
    os_label = f"{template.template} ({'fallback' if template.is_fallback else 'primary'})"
    return [
        ("VMID", vmid_label),
        ("Hostname", request.hostname),
        ("OS", f"{template.family.capitalize()} {selection.os_version}"),
        ("Template", os_label),
        ("Storage", f"{selection.storage.container_storage} ({request.disk} GB)"),
        ("Template storage", selection.storage.template_storage),
        ("RAM", f"{request.memory} MB"),
        ("Swap", f"{request.swap} MB"),
        ("CPU", f"{request.cores} core(s)"),
        ("Network", f"DHCP ({request.bridge})"),
        ("Type", request.privilege.value.capitalize()),
        ("Authentication", request.auth.value),
    ]


def render_summary(
    request: ProvisioningRequest,
    selection: ResourceSelection,
    vmid_label: str,
    out: Optional[Console] = None,
):
    """Print the configuration summary table."""
    out = out or console
    table = Table(title="Configuration Summary", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value", style="cyan")
    for label, value in summary_rows(request, selection, vmid_label):
        table.add_row(label, value)
    out.print(table)


def render_completion(outcome, out: Optional[Console] = None):
    """Print container details and management commands after a run."""
    out = out or console
    handle = outcome.handle
    connection = outcome.connection
    vmid = handle.vmid

    title_style = "yellow" if outcome.degraded else "green"
    title = "Container Created (with warnings)" if outcome.degraded else "Container Created Successfully!"
    out.print(Panel.fit(f"[bold]{title}[/bold]", border_style=title_style))

    details = Table(title="Container Details", show_header=False)
    details.add_column("Field", style="bold")
    details.add_column("Value", style="cyan")
    details.add_row("VMID", str(vmid))
    details.add_row("Hostname", handle.hostname)
    details.add_row("IP Address", str(handle.ip_address))
    details.add_row("OS", f"{outcome.selection.template.family.capitalize()} {outcome.selection.os_version}")
    details.add_row("NetBird IP", str(connection.ip))
    details.add_row("NetBird FQDN", str(connection.fqdn))
    out.print(details)

    commands = Table(title="Management", show_header=False)
    commands.add_column("Action", style="bold")
    commands.add_column("Command", style="yellow")
    commands.add_row("Console", f"pct enter {vmid}")
    commands.add_row("SSH", f"ssh root@{handle.ip_address}")
    commands.add_row("Start", f"pct start {vmid}")
    commands.add_row("Stop", f"pct stop {vmid}")
    commands.add_row("Destroy", f"pct destroy {vmid}")
    commands.add_row("NetBird status", f"pct exec {vmid} -- netbird status")
    out.print(commands)

    for warning in outcome.warnings:
        out.print(f"[yellow]Warning:[/yellow] {warning}")


def render_preflight(report, out: Optional[Console] = None):
    """Print the result of a read-only host check."""
    out = out or console
    selection = report.selection
    table = Table(title="Host Check", show_header=False)
    table.add_column("Field", style="bold")
    table.add_column("Value", style="cyan")
    table.add_row("Proxmox VE", report.version)
    table.add_row("Container storage", selection.storage.container_storage)
    table.add_row("Template storage", selection.storage.template_storage)
    table.add_row("Template", selection.template.template)
    table.add_row("OS version", selection.os_version + (" (fallback)" if selection.template.is_fallback else ""))
    table.add_row("Template downloaded", "yes" if report.template_status == ProviderStatus.PRESENT else "no")
    out.print(table)
