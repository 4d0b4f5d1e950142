"""Shared fixtures: a scripted command runner standing in for the Proxmox host."""

import shlex
import subprocess
from types import SimpleNamespace
from typing import Dict, List, Optional, Sequence, Union

import pytest

from netspawn.adapters.proxmox import ProxmoxHost
from netspawn.cli.prompts import InputSource
from netspawn.models.config import PollingConfig, SpawnConfig
from netspawn.models.request import AuthMode, ProvisioningRequest
from netspawn.models.resources import ResourceSelection, StorageSelection, TemplateSelection
from netspawn.providers.registry import ProviderRegistry
from netspawn.utils.command import CommandResult


PVEVERSION_OUTPUT = """\
proxmox-ve: 8.2.0 (running kernel: 6.8.12-1-pve)
pve-manager: 8.2.4 (running version: 8.2.4/faa83925c9641325)
proxmox-kernel-helper: 8.1.0
"""

PVESM_HEADER = "Name             Type     Status           Total            Used       Available        %"

CATALOG_13_AND_12 = """\
system          almalinux-9-default_20240911_amd64.tar.xz
system          debian-13-standard_13.1-2_amd64.tar.zst
system          debian-12-standard_12.7-1_amd64.tar.zst
system          ubuntu-24.04-standard_24.04-2_amd64.tar.zst
"""

CATALOG_12_ONLY = """\
system          almalinux-9-default_20240911_amd64.tar.xz
system          debian-12-standard_12.7-1_amd64.tar.zst
system          debian-11-standard_11.7-1_amd64.tar.zst
"""

IP_ADDR_OUTPUT = """\
2: eth0@if12: <BROADCAST,MULTICAST,UP,LOWER_UP> mtu 1500 qdisc noqueue state UP group default qlen 1000 link-netnsid 0
    inet 192.168.1.50/24 metric 1024 brd 192.168.1.255 scope global dynamic eth0
       valid_lft 86388sec preferred_lft 86388sec
"""

NETBIRD_CONNECTED = """\
OS: linux/amd64
Daemon version: 0.36.5
CLI version: 0.36.5
Management: Connected
Signal: Connected
Relays: 2/2 Available
Nameservers: 1/1 Available
FQDN: netbird.netbird.cloud
NetBird IP: 100.92.14.7/16
Interface type: Kernel
Quantum resistance: false
Routes: -
Peers count: 0/3 Connected
"""

NETBIRD_CONNECTING = """\
OS: linux/amd64
Daemon version: 0.36.5
CLI version: 0.36.5
Management: Disconnected
Signal: Disconnected
Relays: 0/0 Available
Nameservers: 0/0 Available
FQDN:
NetBird IP: N/A
Interface type: N/A
Quantum resistance: false
Routes: -
Peers count: 0/0 Connected
"""

NETBIRD_DISCONNECTED = """\
Daemon status: NeedsLogin

Run UP command to log in with SSO (interactive login):

 netbird up
"""


def storage_table(*rows: str) -> str:
    lines = [PVESM_HEADER]
    for name in rows:
        lines.append(f"{name:<16} lvmthin  active      1000000000       100000000       900000000   10.00%")
    return "\n".join(lines) + "\n"


Response = Union[CommandResult, List[CommandResult]]


class FakeRunner:
    """Answers commands by substring match on the joined command line.

    The longest matching pattern wins; among equal patterns the latest rule
    wins, so tests can override fixture defaults. A list response is consumed
    one entry per call, repeating the last entry once exhausted. Unmatched
    commands succeed with empty output.
    """

    def __init__(self):
        self.rules: List[tuple] = []
        self.calls: List[List[str]] = []
        self.kwargs: List[Dict] = []

    def on(self, pattern: str, stdout: str = "", returncode: int = 0, stderr: str = "") -> "FakeRunner":
        return self.respond(pattern, CommandResult(returncode=returncode, stdout=stdout, stderr=stderr))

    def respond(self, pattern: str, response: Response) -> "FakeRunner":
        if isinstance(response, list):
            response = list(response)
        self.rules.append((pattern, response))
        return self

    def __call__(self, cmd: Sequence[str], check: bool = True, **kwargs) -> CommandResult:
        self.calls.append(list(cmd))
        self.kwargs.append(kwargs)
        line = shlex.join(cmd)

        result = CommandResult(returncode=0)
        matches = [
            (len(pattern), index, response)
            for index, (pattern, response) in enumerate(self.rules)
            if pattern in line
        ]
        if matches:
            _, _, response = max(matches, key=lambda match: (match[0], match[1]))
            if isinstance(response, list):
                result = response.pop(0) if len(response) > 1 else response[0]
            else:
                result = response

        if check and result.returncode != 0:
            error = subprocess.CalledProcessError(result.returncode, list(cmd))
            error.stdout = result.stdout
            error.stderr = result.stderr
            raise error
        return result

    def called(self, pattern: str) -> List[List[str]]:
        return [cmd for cmd in self.calls if pattern in shlex.join(cmd)]


class ScriptedInput(InputSource):
    """Replays canned answers in order; fails the test when it runs out."""

    def __init__(
        self,
        answers: Optional[List[str]] = None,
        secrets: Optional[List[str]] = None,
        confirms: Optional[List[bool]] = None,
        choices: Optional[List[str]] = None,
    ):
        self.answers = list(answers or [])
        self.secrets = list(secrets or [])
        self.confirms = list(confirms or [])
        self.choices = list(choices or [])
        self.notices: List[str] = []
        self.prompts: List[str] = []

    def ask(self, prompt, default=None):
        self.prompts.append(prompt)
        if not self.answers:
            return default or ""
        answer = self.answers.pop(0)
        return answer if answer != "" else (default or "")

    def ask_secret(self, prompt):
        self.prompts.append(prompt)
        if not self.secrets:
            raise AssertionError(f"No scripted secret left for {prompt!r}")
        return self.secrets.pop(0)

    def confirm(self, prompt, default):
        self.prompts.append(prompt)
        if not self.confirms:
            return default
        return self.confirms.pop(0)

    def choose(self, prompt, choices, default):
        self.prompts.append(prompt)
        if not self.choices:
            return default
        return self.choices.pop(0)

    def notify(self, message):
        self.notices.append(message)


@pytest.fixture
def fast_config():
    """Configuration with every delay set to zero."""
    return SpawnConfig(
        polling=PollingConfig(
            start_settle_delay=0,
            start_check_interval=0,
            network_attempts=3,
            network_interval=0,
            connect_attempts=3,
            connect_interval=0,
        )
    )


@pytest.fixture
def runner():
    return FakeRunner()


@pytest.fixture
def proxmox_runner(runner):
    """A host with local-lvm/local storage, a Debian 13 catalog and a working container."""
    (
        runner
        .on("pveversion", PVEVERSION_OUTPUT)
        .on("pvesh get /cluster/nextid --vmid", "")
        .on("pvesh get /cluster/nextid", "100\n")
        .on("pvesm status -content rootdir", storage_table("local-lvm"))
        .on("pvesm status -content vztmpl", storage_table("local"))
        .on("pvesm status", storage_table("local", "local-lvm"))
        .on("pveam available", CATALOG_13_AND_12)
        .on("pveam list", "NAME                                                         SIZE\n")
        .on("pct status", "status: running\n")
        .on("ip -4 addr show eth0", IP_ADDR_OUTPUT)
        .on("netbird status", NETBIRD_CONNECTED)
    )
    return runner


@pytest.fixture
def scripted():
    """Factory for scripted operator answers."""
    return ScriptedInput


@pytest.fixture
def samples():
    """Captured tool output used across tests."""
    return SimpleNamespace(
        pveversion=PVEVERSION_OUTPUT,
        catalog_13_and_12=CATALOG_13_AND_12,
        catalog_12_only=CATALOG_12_ONLY,
        ip_addr=IP_ADDR_OUTPUT,
        netbird_connected=NETBIRD_CONNECTED,
        netbird_disconnected=NETBIRD_DISCONNECTED,
        netbird_connecting=NETBIRD_CONNECTING,
        storage_table=storage_table,
    )


@pytest.fixture
def registry(proxmox_runner, fast_config, tmp_path):
    """Providers wired to the scripted host, container configs under tmp_path."""
    providers = ProviderRegistry(ProxmoxHost(runner=proxmox_runner, lxc_config_dir=tmp_path))
    providers.initialize(fast_config)
    host_probe = providers.require("host")
    host_probe.geteuid = lambda: 0
    host_probe.which = lambda name: f"/usr/bin/{name}"
    return providers


@pytest.fixture
def selection():
    return ResourceSelection(
        storage=StorageSelection(container_storage="local-lvm", template_storage="local"),
        template=TemplateSelection(template="debian-13-standard_13.1-2_amd64.tar.zst", version="13"),
    )


@pytest.fixture
def make_request():
    """Factory for valid provisioning requests."""
    def factory(**overrides):
        fields = dict(
            hostname="netbird",
            password="abcde",
            cores=1,
            memory=512,
            swap=512,
            disk=4,
            bridge="vmbr0",
            auth=AuthMode.SETUP_KEY,
            setup_key="ABCD-1234",
        )
        fields.update(overrides)
        return ProvisioningRequest(**fields)
    return factory
