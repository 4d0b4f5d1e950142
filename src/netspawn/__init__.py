"""
NetBird Spawn - NetBird VPN containers on Proxmox VE.

Creates an LXC container on a Proxmox VE host, installs the NetBird client
inside it and joins it to a NetBird network.
"""

__version__ = "1.0.0"

from netspawn.models.config import SpawnConfig
from netspawn.models.request import ProvisioningRequest
from netspawn.models.resources import ResourceSelection

__all__ = [
    "SpawnConfig",
    "ProvisioningRequest",
    "ResourceSelection",
]
