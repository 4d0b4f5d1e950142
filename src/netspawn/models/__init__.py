"""Pydantic models and runtime value objects."""

from netspawn.models.config import (
    SpawnConfig,
    DefaultsConfig,
    StorageConfig,
    TemplateConfig,
    PollingConfig,
    NetbirdConfig,
    HostConfig,
)
from netspawn.models.container import (
    PENDING,
    ConnectionResult,
    ContainerHandle,
    ContainerState,
)
from netspawn.models.request import AuthMode, PrivilegeMode, ProvisioningRequest
from netspawn.models.resources import ResourceSelection, StorageSelection, TemplateSelection

__all__ = [
    "SpawnConfig",
    "DefaultsConfig",
    "StorageConfig",
    "TemplateConfig",
    "PollingConfig",
    "NetbirdConfig",
    "HostConfig",
    "PENDING",
    "ConnectionResult",
    "ContainerHandle",
    "ContainerState",
    "AuthMode",
    "PrivilegeMode",
    "ProvisioningRequest",
    "ResourceSelection",
    "StorageSelection",
    "TemplateSelection",
]
