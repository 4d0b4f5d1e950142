"""Adapters turning host tool output into typed values."""

from netspawn.adapters.netbird import NetbirdClient
from netspawn.adapters.proxmox import ProxmoxHost

__all__ = [
    "NetbirdClient",
    "ProxmoxHost",
]
