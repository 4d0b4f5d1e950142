"""Host capability probe."""

import logging
import os
import shutil

from netspawn.errors import InsufficientPrivilegeError, NotTargetPlatformError
from netspawn.providers.base import BaseProvider


logger = logging.getLogger(__name__)


class HostProbe(BaseProvider):
    """Checks that we run as root on a Proxmox VE host."""

    name = "host"

    def __init__(self):
        super().__init__()
        self.geteuid = os.geteuid
        self.which = shutil.which
        self.version = None

    def setup(self, registry):
        pass

    def verify_host_environment(self) -> str:
        """Return the Proxmox VE version, or raise if the host is unusable."""
        if self.geteuid() != 0:
            raise InsufficientPrivilegeError("This tool must be run as root")

        if not self.which("pveversion"):
            raise NotTargetPlatformError("This tool must be run on a Proxmox VE host")

        version = self.host.version()
        if not version:
            raise NotTargetPlatformError("Could not determine the Proxmox VE version")

        self.version = version
        logger.info(f"Proxmox VE detected: version {version}")
        return version
