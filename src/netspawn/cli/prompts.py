"""Interactive collection of the provisioning request."""

import logging
import subprocess
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple

from pydantic import ValidationError
from rich.console import Console
from rich.prompt import Confirm, Prompt

from netspawn.cli import display
from netspawn.errors import InputValidationError, LifecycleError, UserCancelled
from netspawn.models.config import DefaultsConfig
from netspawn.models.request import (
    MIN_PASSWORD_LENGTH,
    AuthMode,
    PrivilegeMode,
    ProvisioningRequest,
    is_valid_hostname,
)
from netspawn.models.resources import ResourceSelection


logger = logging.getLogger(__name__)


class InputSource(ABC):
    """Where answers come from: a terminal, or a script in tests."""

    @abstractmethod
    def ask(self, prompt: str, default: Optional[str] = None) -> str:
        pass

    @abstractmethod
    def ask_secret(self, prompt: str) -> str:
        pass

    @abstractmethod
    def confirm(self, prompt: str, default: bool) -> bool:
        pass

    @abstractmethod
    def choose(self, prompt: str, choices: List[str], default: str) -> str:
        pass

    @abstractmethod
    def notify(self, message: str) -> None:
        """Tell the operator why an answer was rejected."""
        pass


class RichInputSource(InputSource):
    """Terminal prompts rendered with rich."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or display.console

    def ask(self, prompt, default=None):
        return Prompt.ask(prompt, default=default, console=self.console) or ""

    def ask_secret(self, prompt):
        return Prompt.ask(prompt, password=True, console=self.console)

    def confirm(self, prompt, default):
        return Confirm.ask(prompt, default=default, console=self.console)

    def choose(self, prompt, choices, default):
        return Prompt.ask(prompt, choices=choices, default=default, console=self.console)

    def notify(self, message):
        self.console.print(f"[red]{message}[/red]")


def mask_secret(secret: str) -> str:
    """Show only enough of a secret to recognise it."""
    if len(secret) <= 4:
        return "*" * len(secret)
    return secret[:4] + "*" * (len(secret) - 4)


SummaryRenderer = Callable[[ProvisioningRequest, ResourceSelection, str], Any]


class InputCollector:
    """Builds a ProvisioningRequest from operator answers.

    Mismatched or too short passwords and empty setup keys are re-prompted.
    An invalid hostname, a malformed number or a container ID that is
    already in use abort the run.
    """

    def __init__(
        self,
        source: InputSource,
        defaults: DefaultsConfig,
        next_vmid: Callable[[], int],
        vmid_in_use: Callable[[int], bool],
        summary: SummaryRenderer = display.render_summary,
    ):
        self.source = source
        self.defaults = defaults
        self.next_vmid = next_vmid
        self.vmid_in_use = vmid_in_use
        self.summary = summary

    def collect(self, selection: ResourceSelection) -> ProvisioningRequest:
        """Ask everything, show the summary and wait for confirmation."""
        hostname = self.collect_hostname()
        password = self.collect_password()
        sizing = self.collect_sizing()
        auth, setup_key = self.collect_auth()

        try:
            request = ProvisioningRequest(
                hostname=hostname,
                password=password,
                auth=auth,
                setup_key=setup_key,
                **sizing,
            )
        except ValidationError as e:
            raise InputValidationError(str(e)) from e

        self.confirm(request, selection)
        return request

    def collect_hostname(self) -> str:
        default = self.defaults.hostname
        hostname = self.source.ask("Enter hostname", default=default).strip() or default
        if not is_valid_hostname(hostname):
            raise InputValidationError(
                f"Invalid hostname {hostname!r}: use only letters, numbers and hyphens, "
                "start and end alphanumeric, max 63 characters"
            )
        logger.debug(f"Hostname: {hostname}")
        return hostname

    def collect_password(self) -> str:
        while True:
            password = self.source.ask_secret("Enter root password")
            if len(password) < MIN_PASSWORD_LENGTH:
                self.source.notify(f"Password must be at least {MIN_PASSWORD_LENGTH} characters!")
                continue

            confirmation = self.source.ask_secret("Confirm root password")
            if password != confirmation:
                self.source.notify("Passwords do not match! Please try again.")
                continue

            return password

    def _next_free_vmid(self) -> int:
        try:
            return self.next_vmid()
        except (subprocess.CalledProcessError, ValueError) as e:
            raise LifecycleError(f"Could not determine the next free container ID: {e}") from e

    def _ask_int(self, label: str, default: int) -> int:
        answer = self.source.ask(label, default=str(default)).strip() or str(default)
        if not answer.isdigit() or int(answer) <= 0:
            raise InputValidationError(f"{label} must be a positive integer, got {answer!r}")
        return int(answer)

    def collect_sizing(self) -> Dict[str, Any]:
        defaults = self.defaults
        if not self.source.confirm("Use advanced settings?", default=False):
            return {
                "cores": defaults.cores,
                "memory": defaults.memory,
                "swap": defaults.swap,
                "disk": defaults.disk,
                "bridge": defaults.bridge,
                "vmid": None,
                "privilege": PrivilegeMode.UNPRIVILEGED,
            }

        vmid = self._ask_int("Container ID", self._next_free_vmid())
        if self.vmid_in_use(vmid):
            raise InputValidationError(f"Container ID {vmid} is already in use")

        sizing = {
            "vmid": vmid,
            "cores": self._ask_int("CPU cores", defaults.cores),
            "memory": self._ask_int("RAM in MB", defaults.memory),
            "swap": self._ask_int("Swap in MB", defaults.swap),
            "disk": self._ask_int("Disk size in GB", defaults.disk),
        }
        sizing["bridge"] = self.source.ask("Network bridge", default=defaults.bridge).strip() or defaults.bridge
        sizing["privilege"] = PrivilegeMode(self.source.choose(
            "Container type",
            [mode.value for mode in PrivilegeMode],
            default=PrivilegeMode.UNPRIVILEGED.value,
        ))
        return sizing

    def collect_auth(self) -> Tuple[AuthMode, Optional[str]]:
        auth = AuthMode(self.source.choose(
            "NetBird authentication",
            [mode.value for mode in AuthMode],
            default=AuthMode.SETUP_KEY.value,
        ))
        if auth == AuthMode.SSO:
            return auth, None

        while True:
            setup_key = self.source.ask_secret("NetBird setup key").strip()
            if not setup_key:
                self.source.notify("Setup key cannot be empty!")
                continue
            if self.source.confirm(f"Use setup key {mask_secret(setup_key)}?", default=True):
                return auth, setup_key

    def confirm(self, request: ProvisioningRequest, selection: ResourceSelection) -> None:
        if request.vmid is not None:
            vmid_label = str(request.vmid)
        else:
            vmid_label = f"{self._next_free_vmid()} (next free)"

        self.summary(request, selection, vmid_label)
        if not self.source.confirm("Proceed with container creation?", default=True):
            raise UserCancelled("Container creation cancelled.")
