"""Container runtime models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Union

from netspawn.errors import LifecycleError
from netspawn.models.request import PrivilegeMode


class _Pending:
    """Sentinel for a value the host has not reported yet."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self):
        return "PENDING"

    def __str__(self):
        return "(pending)"

    def __bool__(self):
        return False


PENDING = _Pending()

MaybePending = Union[str, _Pending]


class ContainerState(str, Enum):
    """Lifecycle states of a container handle."""
    UNALLOCATED = "unallocated"
    CREATED = "created"
    STARTING = "starting"
    RUNNING = "running"
    NETWORK_PENDING = "network-pending"
    NETWORK_READY = "network-ready"
    FAILED = "failed"


TERMINAL_STATES: FrozenSet[ContainerState] = frozenset({
    ContainerState.NETWORK_READY,
    ContainerState.FAILED,
})

# STARTING -> NETWORK_PENDING covers a container whose status check lagged
# behind the start call.
ALLOWED_TRANSITIONS: Dict[ContainerState, FrozenSet[ContainerState]] = {
    ContainerState.UNALLOCATED: frozenset({ContainerState.CREATED}),
    ContainerState.CREATED: frozenset({ContainerState.STARTING}),
    ContainerState.STARTING: frozenset({
        ContainerState.RUNNING,
        ContainerState.NETWORK_PENDING,
    }),
    ContainerState.RUNNING: frozenset({ContainerState.NETWORK_PENDING}),
    ContainerState.NETWORK_PENDING: frozenset({ContainerState.NETWORK_READY}),
    ContainerState.NETWORK_READY: frozenset(),
    ContainerState.FAILED: frozenset(),
}


@dataclass
class ContainerHandle:
    """A container id allocated on the host and the state it has reached."""
    vmid: int
    hostname: str
    privilege: PrivilegeMode = PrivilegeMode.UNPRIVILEGED
    state: ContainerState = ContainerState.UNALLOCATED
    ip_address: MaybePending = PENDING
    overrides_applied: bool = False
    history: List[ContainerState] = field(default_factory=list)

    def transition(self, new_state: ContainerState) -> "ContainerHandle":
        """Move to ``new_state`` if the lifecycle allows it."""
        if new_state == ContainerState.FAILED:
            if self.state in TERMINAL_STATES:
                raise LifecycleError(
                    f"Container {self.vmid} cannot fail from terminal state {self.state.value}"
                )
        elif new_state not in ALLOWED_TRANSITIONS[self.state]:
            raise LifecycleError(
                f"Container {self.vmid}: illegal transition "
                f"{self.state.value} -> {new_state.value}"
            )
        self.history.append(self.state)
        self.state = new_state
        return self

    def fail(self) -> "ContainerHandle":
        """Mark the handle failed unless it already reached a terminal state."""
        if self.state not in TERMINAL_STATES:
            self.transition(ContainerState.FAILED)
        return self

    @property
    def is_running(self) -> bool:
        return self.state in (
            ContainerState.RUNNING,
            ContainerState.NETWORK_PENDING,
            ContainerState.NETWORK_READY,
        )


@dataclass
class ConnectionResult:
    """Overlay network state reported by the VPN client."""
    ip: MaybePending = PENDING
    fqdn: MaybePending = PENDING
    status_text: str = ""

    @property
    def is_pending(self) -> bool:
        return self.ip is PENDING

    @classmethod
    def pending(cls, status_text: Optional[str] = None) -> "ConnectionResult":
        return cls(status_text=status_text or "")
