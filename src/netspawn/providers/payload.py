"""Payload provider installing and connecting the NetBird client."""

import logging
import subprocess
import time
from typing import Optional

from netspawn.adapters import parsers
from netspawn.adapters.netbird import NetbirdClient
from netspawn.errors import ConnectivityTimeout, InstallError
from netspawn.models.container import PENDING, ConnectionResult, ContainerHandle
from netspawn.models.request import AuthMode, ProvisioningRequest
from netspawn.providers.base import BaseProvider
from netspawn.utils.retry import poll


logger = logging.getLogger(__name__)


def _failure_detail(error: subprocess.CalledProcessError) -> str:
    lines = ((error.stderr or "") + (error.stdout or "")).strip().splitlines()
    return lines[-1] if lines else f"exit code {error.returncode}"


class PayloadProvider(BaseProvider):
    """Runs the in-container install and joins the overlay network.

    Failures mark the handle failed and leave the container in place;
    nothing here rolls back.
    """

    name = "payload"

    def __init__(self):
        super().__init__()
        self.netbird: Optional[NetbirdClient] = None
        self.sleep = time.sleep

    def setup(self, registry):
        self.netbird = NetbirdClient(
            self.host,
            install_url=self.config.netbird.install_url,
            management_url=self.config.netbird.management_url,
        )

    def run_update_and_install(self, handle: ContainerHandle) -> None:
        """Update base packages and install the NetBird client."""
        for description, command in self.netbird.install_steps():
            logger.info(f"{description}...")
            try:
                self.netbird.run(handle.vmid, command)
            except subprocess.CalledProcessError as e:
                handle.fail()
                logger.error(f"{description} failed in container {handle.vmid}. Stderr: {e.stderr}")
                raise InstallError(
                    f"{description} failed in container {handle.vmid}: {_failure_detail(e)}"
                ) from e
        logger.info("NetBird installed successfully")

    def authenticate_and_connect(
        self, handle: ContainerHandle, request: ProvisioningRequest
    ) -> ConnectionResult:
        """Join the overlay network and wait for the client to report it."""
        try:
            if request.auth == AuthMode.SETUP_KEY:
                logger.info("Connecting to NetBird with setup key...")
                self.netbird.up_with_setup_key(handle.vmid, request.setup_key.get_secret_value())
            else:
                logger.info("Starting NetBird SSO login, open the URL shown below in a browser")
                self.netbird.login_interactive(handle.vmid)
                logger.info("Connecting to NetBird...")
                self.netbird.up(handle.vmid)
        except subprocess.CalledProcessError as e:
            handle.fail()
            raise InstallError(
                f"NetBird connection failed in container {handle.vmid}: {_failure_detail(e)}"
            ) from e

        return self.wait_for_connection(handle)

    def wait_for_connection(self, handle: ContainerHandle) -> ConnectionResult:
        """Poll ``netbird status``; a pending result when it never connects."""
        polling = self.config.polling
        last_output = {"text": ""}

        def probe():
            text = self.netbird.status(handle.vmid).stdout
            last_output["text"] = text
            status = parsers.parse_netbird_status(text)
            return status if status.connected else None

        try:
            status = poll(
                probe,
                attempts=polling.connect_attempts,
                interval=polling.connect_interval,
                description=f"NetBird connection in container {handle.vmid}",
                sleep=self.sleep,
            )
        except ConnectivityTimeout:
            logger.warning("NetBird connection not confirmed, check 'netbird status' later")
            return ConnectionResult.pending(last_output["text"])

        logger.info(f"NetBird connected: {status.ip or 'address pending'}")
        return ConnectionResult(
            ip=status.ip or PENDING,
            fqdn=status.fqdn or PENDING,
            status_text=last_output["text"],
        )

    def update(self, handle: ContainerHandle) -> None:
        """Upgrade packages in a container that already runs NetBird."""
        if not self.netbird.is_installed(handle.vmid):
            handle.fail()
            raise InstallError(f"No NetBird installation found in container {handle.vmid}")

        logger.info("Updating NetBird container packages...")
        try:
            self.netbird.upgrade_packages(handle.vmid)
        except subprocess.CalledProcessError as e:
            handle.fail()
            raise InstallError(
                f"Update failed in container {handle.vmid}: {_failure_detail(e)}"
            ) from e
        logger.info("Updated successfully")
