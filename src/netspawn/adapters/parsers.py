"""Parsers for Proxmox and NetBird command output.

Each function takes the raw text a tool printed and returns a typed value,
so the providers never look at tool output themselves.
"""

import re
from dataclasses import dataclass
from typing import List, Optional


PVE_MANAGER_LINE = re.compile(r"^pve-manager[/:]\s*([0-9][\w.\-~]*)", re.MULTILINE)
INET_ADDRESS = re.compile(r"\binet\s+(\d{1,3}(?:\.\d{1,3}){3})")
NETBIRD_CONNECTED = re.compile(r"^Management:\s*Connected\b", re.MULTILINE)
NETBIRD_IP = re.compile(r"NetBird IP:\s*(\d{1,3}(?:\.\d{1,3}){3})")
NETBIRD_FQDN = re.compile(r"FQDN:[ \t]*(\S+)")
PCT_RUNNING = re.compile(r"^status:\s*running\b", re.MULTILINE)


@dataclass(frozen=True)
class NetbirdStatus:
    """Parsed ``netbird status`` output."""
    connected: bool
    ip: Optional[str] = None
    fqdn: Optional[str] = None


def parse_pve_version(text: str) -> Optional[str]:
    """Extract the pve-manager version from ``pveversion --verbose``.

    Handles both ``pve-manager/8.2.4/faa83925c9641325`` and
    ``pve-manager: 8.2.4 (running version: 8.2.4/...)``.
    """
    match = PVE_MANAGER_LINE.search(text)
    if not match:
        return None
    return match.group(1).split("/")[0]


def parse_storage_names(text: str) -> List[str]:
    """Backend names from ``pvesm status``, header row skipped."""
    names = []
    for line in text.strip().splitlines()[1:]:
        parts = line.split()
        if parts:
            names.append(parts[0])
    return names


def parse_template_ids(text: str, needle: str) -> List[str]:
    """Template ids from ``pveam available`` lines containing ``needle``.

    Lines look like ``system          debian-12-standard_12.7-1_amd64.tar.zst``;
    catalog order is preserved.
    """
    templates = []
    for line in text.splitlines():
        if needle not in line:
            continue
        parts = line.split()
        if len(parts) >= 2:
            templates.append(parts[1])
    return templates


def template_listed(text: str, template: str) -> bool:
    """Whether ``pveam list <storage>`` output mentions the template."""
    return template in text


def parse_ipv4(text: str) -> Optional[str]:
    """First non-loopback IPv4 address in ``ip -4 addr show`` output."""
    for address in INET_ADDRESS.findall(text):
        if not address.startswith("127."):
            return address
    return None


def container_running(text: str) -> bool:
    """Whether ``pct status`` output reports a running container."""
    return bool(PCT_RUNNING.search(text))


def parse_netbird_status(text: str) -> NetbirdStatus:
    """Connection marker, overlay address and FQDN from ``netbird status``.

    Only the management line counts as connected; the peers line reads
    ``0/0 Connected`` while the daemon is still connecting.
    """
    ip_match = NETBIRD_IP.search(text)
    fqdn_match = NETBIRD_FQDN.search(text)
    return NetbirdStatus(
        connected=bool(NETBIRD_CONNECTED.search(text)),
        ip=ip_match.group(1) if ip_match else None,
        fqdn=fqdn_match.group(1) if fqdn_match else None,
    )
