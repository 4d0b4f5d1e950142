"""Provisioning pipeline running the stages in order."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Protocol

from netspawn.models.container import PENDING, ConnectionResult, ContainerHandle, ContainerState
from netspawn.models.request import ProvisioningRequest
from netspawn.models.resources import ResourceSelection
from netspawn.providers.base import ProviderStatus
from netspawn.providers.container import ContainerProvider
from netspawn.providers.host import HostProbe
from netspawn.providers.payload import PayloadProvider
from netspawn.providers.registry import ProviderRegistry
from netspawn.providers.storage import ResourceSelector
from netspawn.providers.template import TemplateProvider


logger = logging.getLogger(__name__)


class RequestCollector(Protocol):
    """Anything that turns operator input into a request."""

    def collect(self, selection: ResourceSelection) -> ProvisioningRequest:
        ...


@dataclass
class PreflightReport:
    """Read-only view of what a run would use."""
    version: str
    selection: ResourceSelection
    template_status: ProviderStatus


@dataclass
class ProvisioningOutcome:
    """Everything a finished run produced."""
    request: ProvisioningRequest
    selection: ResourceSelection
    handle: ContainerHandle
    connection: ConnectionResult
    version: str = ""
    warnings: List[str] = field(default_factory=list)
    duration: float = 0.0

    @property
    def degraded(self) -> bool:
        return bool(self.warnings)


class ProvisioningPipeline:
    """Runs probe, selection, template, input, container and payload stages.

    Stops at the first fatal error. Nothing created on the host is removed
    when a later stage fails.
    """

    def __init__(self, registry: ProviderRegistry, collector: Optional[RequestCollector] = None):
        self.registry = registry
        self.collector = collector

    @property
    def host_probe(self) -> HostProbe:
        return self.registry.require("host")

    @property
    def selector(self) -> ResourceSelector:
        return self.registry.require("storage")

    @property
    def templates(self) -> TemplateProvider:
        return self.registry.require("template")

    @property
    def containers(self) -> ContainerProvider:
        return self.registry.require("container")

    @property
    def payload(self) -> PayloadProvider:
        return self.registry.require("payload")

    def preflight(self) -> PreflightReport:
        """Probe the host and select resources without changing anything."""
        version = self.host_probe.verify_host_environment()
        selection = self.selector.select()
        return PreflightReport(
            version=version,
            selection=selection,
            template_status=self.templates.status(selection),
        )

    def run(self) -> ProvisioningOutcome:
        """Execute every stage once."""
        if self.collector is None:
            raise ValueError("A request collector is required to run the pipeline")

        start_time = datetime.now()
        warnings: List[str] = []

        version = self.host_probe.verify_host_environment()

        selection = self.selector.select()
        if selection.template.is_fallback:
            warnings.append(
                f"Primary OS version unavailable, using fallback version {selection.os_version}"
            )
        self.templates.ensure_template(selection)

        request = self.collector.collect(selection)

        containers = self.containers
        handle = containers.allocate_identifier(request)
        containers.create(handle, request, selection)
        containers.apply_device_overrides(handle)

        containers.start(handle)
        if handle.state != ContainerState.RUNNING:
            warnings.append(f"Container {handle.vmid} did not report running after start")

        if containers.poll_network_address(handle) is PENDING:
            warnings.append(f"Container {handle.vmid} has no IP address yet (pending DHCP)")

        self.payload.run_update_and_install(handle)
        connection = self.payload.authenticate_and_connect(handle, request)
        if connection.is_pending:
            warnings.append("NetBird connection not confirmed yet")

        duration = (datetime.now() - start_time).total_seconds()
        logger.info(f"Provisioning of container {handle.vmid} completed in {duration:.2f}s")
        return ProvisioningOutcome(
            request=request,
            selection=selection,
            handle=handle,
            connection=connection,
            version=version,
            warnings=warnings,
            duration=duration,
        )
