"""Container provider for managing Proxmox LXC containers."""

import logging
import re
import subprocess
import time
from typing import Dict

from netspawn.errors import (
    ConnectivityTimeout,
    IdentifierConflictError,
    InputValidationError,
    LifecycleError,
)
from netspawn.models.container import PENDING, ContainerHandle, ContainerState, MaybePending
from netspawn.models.request import ProvisioningRequest
from netspawn.models.resources import ResourceSelection
from netspawn.providers.base import BaseProvider
from netspawn.utils.retry import poll
from netspawn.utils.templates import TUN_MARKER, render_tun_overrides


logger = logging.getLogger(__name__)

ID_CONFLICT = re.compile(r"already exists", re.IGNORECASE)


def _stderr_tail(error: subprocess.CalledProcessError) -> str:
    lines = (error.stderr or "").strip().splitlines()
    return lines[-1] if lines else f"exit code {error.returncode}"


class ContainerProvider(BaseProvider):
    """Creates, configures and starts one container."""

    name = "container"

    def __init__(self):
        super().__init__()
        self.sleep = time.sleep

    def setup(self, registry):
        pass

    def allocate_identifier(self, request: ProvisioningRequest) -> ContainerHandle:
        """Reserve the pinned id, or take the next free one."""
        if request.vmid is not None:
            if not self.host.vmid_available(request.vmid):
                raise InputValidationError(f"Container ID {request.vmid} is already in use")
            vmid = request.vmid
        else:
            try:
                vmid = self.host.next_vmid()
            except (subprocess.CalledProcessError, ValueError) as e:
                raise LifecycleError(f"Could not allocate a container ID: {e}") from e

        logger.debug(f"Allocated container ID {vmid}")
        return ContainerHandle(
            vmid=vmid,
            hostname=request.hostname,
            privilege=request.privilege,
        )

    def build_options(
        self, request: ProvisioningRequest, selection: ResourceSelection
    ) -> Dict[str, str]:
        """Parameters for ``pct create``, in the order they are passed."""
        defaults = self.config.defaults
        policy = request.privilege.policy
        return {
            "hostname": request.hostname,
            "password": request.password.get_secret_value(),
            "ostype": defaults.ostype,
            "cores": str(request.cores),
            "memory": str(request.memory),
            "swap": str(request.swap),
            "rootfs": f"{selection.storage.container_storage}:{request.disk}",
            "net0": f"name=eth0,bridge={request.bridge},ip=dhcp,type=veth",
            "unprivileged": str(policy.unprivileged_flag),
            "features": policy.features_arg,
            "tags": defaults.tags,
            "onboot": "0",
            "start": "0",
        }

    def create(
        self,
        handle: ContainerHandle,
        request: ProvisioningRequest,
        selection: ResourceSelection,
    ) -> ContainerHandle:
        """Create the container stopped and without autostart."""
        logger.info(f"Creating LXC container (VMID: {handle.vmid})...")
        options = self.build_options(request, selection)

        try:
            self.host.create_container(handle.vmid, selection.template_volume, options)
        except subprocess.CalledProcessError as e:
            handle.fail()
            detail = _stderr_tail(e)
            if ID_CONFLICT.search(e.stderr or ""):
                raise IdentifierConflictError(
                    f"Container ID {handle.vmid} was taken before creation: {detail}"
                ) from e
            raise LifecycleError(f"Failed to create container {handle.vmid}: {detail}") from e

        handle.transition(ContainerState.CREATED)
        logger.info("Container created successfully")
        return handle

    def apply_device_overrides(self, handle: ContainerHandle) -> bool:
        """Append TUN passthrough directives for unprivileged containers.

        Returns True when the block was written by this call.
        """
        if not handle.privilege.policy.device_overrides:
            logger.debug(f"Container {handle.vmid} is privileged, skipping device overrides")
            return False

        logger.info("Configuring TUN device support for NetBird...")
        try:
            if TUN_MARKER in self.host.read_config(handle.vmid):
                logger.info("TUN device configuration already present")
                handle.overrides_applied = True
                return False
            self.host.append_config(handle.vmid, render_tun_overrides(handle.hostname))
        except OSError as e:
            handle.fail()
            raise LifecycleError(
                f"Failed to update {self.host.config_path(handle.vmid)}: {e}"
            ) from e

        handle.overrides_applied = True
        logger.info("TUN device configuration added")
        return True

    def start(self, handle: ContainerHandle) -> ContainerHandle:
        """Start the container and check once it had time to settle.

        A container that does not report running yet is only a warning.
        """
        polling = self.config.polling
        logger.info("Starting container...")
        handle.transition(ContainerState.STARTING)

        try:
            self.host.start_container(handle.vmid)
        except subprocess.CalledProcessError as e:
            handle.fail()
            raise LifecycleError(f"Failed to start container {handle.vmid}: {_stderr_tail(e)}") from e

        self.sleep(polling.start_settle_delay)

        try:
            poll(
                lambda: self.host.is_running(handle.vmid),
                attempts=polling.start_checks,
                interval=polling.start_check_interval,
                description=f"container {handle.vmid} running",
                sleep=self.sleep,
            )
        except ConnectivityTimeout:
            logger.warning("Container may not have started properly")
            return handle

        handle.transition(ContainerState.RUNNING)
        logger.info("Container is running")
        return handle

    def poll_network_address(self, handle: ContainerHandle) -> MaybePending:
        """Wait for a DHCP lease on eth0; PENDING when none shows up in time."""
        polling = self.config.polling
        logger.info("Waiting for network configuration...")
        handle.transition(ContainerState.NETWORK_PENDING)

        try:
            address = poll(
                lambda: self.host.interface_address(handle.vmid),
                attempts=polling.network_attempts,
                interval=polling.network_interval,
                description=f"container {handle.vmid} network address",
                sleep=self.sleep,
            )
        except ConnectivityTimeout:
            logger.warning("Could not determine container IP address")
            handle.ip_address = PENDING
            return PENDING

        handle.ip_address = address
        handle.transition(ContainerState.NETWORK_READY)
        logger.info(f"Container IP: {address}")
        return address
