"""Proxmox VE command adapter."""

import logging
from pathlib import Path
from typing import Dict, List, Optional

from netspawn.adapters import parsers
from netspawn.utils.command import CommandResult, CommandRunner, run_command


logger = logging.getLogger(__name__)


class ProxmoxHost:
    """Wraps pveversion, pvesh, pvesm, pveam and pct.

    All methods return parsed values. Commands that are expected to fail
    in normal operation (status queries) run unchecked; mutating commands
    raise ``subprocess.CalledProcessError``.
    """

    def __init__(
        self,
        runner: CommandRunner = run_command,
        lxc_config_dir: Path = Path("/etc/pve/lxc"),
        timeout: Optional[int] = 600,
    ):
        self.runner = runner
        self.lxc_config_dir = Path(lxc_config_dir)
        self.timeout = timeout

    # Host facts

    def version(self) -> Optional[str]:
        result = self.runner(["pveversion", "--verbose"], check=False)
        if not result.ok:
            return None
        return parsers.parse_pve_version(result.stdout)

    def next_vmid(self) -> int:
        result = self.runner(["pvesh", "get", "/cluster/nextid"])
        return int(result.stdout.strip().strip('"'))

    def vmid_available(self, vmid: int) -> bool:
        """Ask the cluster whether ``vmid`` is free right now."""
        result = self.runner(
            ["pvesh", "get", "/cluster/nextid", "--vmid", str(vmid)],
            check=False,
        )
        return result.ok

    # Storage and templates

    def storage_names(self, content: Optional[str] = None) -> List[str]:
        cmd = ["pvesm", "status"]
        if content:
            cmd += ["-content", content]
        result = self.runner(cmd, check=False)
        if not result.ok:
            logger.debug(f"Storage query failed: {result.stderr.strip()}")
            return []
        return parsers.parse_storage_names(result.stdout)

    def update_catalog(self) -> bool:
        result = self.runner(["pveam", "update"], check=False, timeout=self.timeout)
        return result.ok

    def available_templates(self, section: str, needle: str) -> List[str]:
        result = self.runner(["pveam", "available", "--section", section], check=False)
        if not result.ok:
            return []
        return parsers.parse_template_ids(result.stdout, needle)

    def template_present(self, storage: str, template: str) -> bool:
        result = self.runner(["pveam", "list", storage], check=False)
        return result.ok and parsers.template_listed(result.stdout, template)

    def download_template(self, storage: str, template: str) -> CommandResult:
        return self.runner(["pveam", "download", storage, template], timeout=self.timeout)

    # Containers

    def create_container(self, vmid: int, volume: str, options: Dict[str, str]) -> CommandResult:
        """Run ``pct create`` with ``options`` as ``--key value`` pairs."""
        cmd = ["pct", "create", str(vmid), volume]
        for key, value in options.items():
            cmd += [f"--{key}", str(value)]
        secrets = [options["password"]] if "password" in options else None
        return self.runner(cmd, timeout=self.timeout, redact=secrets)

    def start_container(self, vmid: int) -> CommandResult:
        return self.runner(["pct", "start", str(vmid)])

    def container_status(self, vmid: int) -> str:
        result = self.runner(["pct", "status", str(vmid)], check=False)
        return result.stdout

    def is_running(self, vmid: int) -> bool:
        return parsers.container_running(self.container_status(vmid))

    def exec(
        self,
        vmid: int,
        command: str,
        check: bool = True,
        capture_output: bool = True,
        redact: Optional[List[str]] = None,
    ) -> CommandResult:
        """Run a shell command inside the container."""
        return self.runner(
            ["pct", "exec", str(vmid), "--", "bash", "-c", command],
            check=check,
            capture_output=capture_output,
            timeout=self.timeout if capture_output else None,
            redact=redact,
        )

    def interface_address(self, vmid: int, interface: str = "eth0") -> Optional[str]:
        result = self.exec(vmid, f"ip -4 addr show {interface}", check=False)
        if not result.ok:
            return None
        return parsers.parse_ipv4(result.stdout)

    # Persisted container configuration

    def config_path(self, vmid: int) -> Path:
        return self.lxc_config_dir / f"{vmid}.conf"

    def read_config(self, vmid: int) -> str:
        path = self.config_path(vmid)
        return path.read_text() if path.exists() else ""

    def append_config(self, vmid: int, text: str) -> None:
        with self.config_path(vmid).open("a") as handle:
            handle.write(text)
