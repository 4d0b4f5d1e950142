"""NetBird client commands run inside a container."""

import logging
import shlex
from typing import List, Optional, Tuple

from netspawn.adapters.proxmox import ProxmoxHost
from netspawn.utils.command import CommandResult


logger = logging.getLogger(__name__)


BASE_PACKAGES = ["curl", "ca-certificates", "gnupg"]
NETBIRD_CONFIG = "/etc/netbird/config.json"


class NetbirdClient:
    """Builds and runs package manager and ``netbird`` commands via ``pct exec``."""

    def __init__(
        self,
        host: ProxmoxHost,
        install_url: str = "https://pkgs.netbird.io/install.sh",
        management_url: Optional[str] = None,
    ):
        self.host = host
        self.install_url = install_url
        self.management_url = management_url

    def _management_args(self) -> str:
        if not self.management_url:
            return ""
        return f" --management-url {shlex.quote(self.management_url)}"

    def install_steps(self) -> List[Tuple[str, str]]:
        """Ordered (description, command) pairs for a fresh install."""
        packages = " ".join(BASE_PACKAGES)
        return [
            (
                "Updating container packages",
                f"apt-get update && apt-get -y upgrade && apt-get install -y {packages}",
            ),
            (
                "Installing NetBird",
                f"curl -fsSL {shlex.quote(self.install_url)} | sh",
            ),
            ("Enabling NetBird service", "systemctl enable netbird"),
            ("Cleaning up", "apt-get -y autoremove && apt-get -y autoclean"),
        ]

    def run(self, vmid: int, command: str, redact: Optional[List[str]] = None) -> CommandResult:
        """Run a command, raising CalledProcessError on a non-zero exit."""
        return self.host.exec(vmid, command, redact=redact)

    def up_with_setup_key(self, vmid: int, setup_key: str) -> CommandResult:
        command = f"netbird up --setup-key {shlex.quote(setup_key)}{self._management_args()}"
        return self.host.exec(vmid, command, redact=[command])

    def login_interactive(self, vmid: int) -> CommandResult:
        """Run ``netbird login`` with output going straight to the terminal.

        The login URL has to reach the operator while the command blocks.
        """
        return self.host.exec(
            vmid,
            f"netbird login{self._management_args()}",
            capture_output=False,
        )

    def up(self, vmid: int) -> CommandResult:
        return self.host.exec(vmid, f"netbird up{self._management_args()}")

    def status(self, vmid: int) -> CommandResult:
        return self.host.exec(vmid, "netbird status", check=False)

    def is_installed(self, vmid: int) -> bool:
        result = self.host.exec(vmid, f"test -f {NETBIRD_CONFIG}", check=False)
        return result.ok

    def upgrade_packages(self, vmid: int) -> CommandResult:
        return self.host.exec(vmid, "apt-get update && apt-get -y upgrade")
