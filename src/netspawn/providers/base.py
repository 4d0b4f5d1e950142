"""Base provider interface."""

from abc import ABC, abstractmethod
from enum import Enum
from typing import TYPE_CHECKING, Optional

from netspawn.adapters.proxmox import ProxmoxHost
from netspawn.models.config import SpawnConfig

if TYPE_CHECKING:
    from netspawn.providers.registry import ProviderRegistry


class ProviderStatus(Enum):
    """Provider resource status."""
    PRESENT = "present"
    ABSENT = "absent"
    ERROR = "error"


class BaseProvider(ABC):
    """Base class for the pipeline stages that talk to the host."""

    name: str = ""

    def __init__(self):
        self.config: Optional[SpawnConfig] = None
        self.host: Optional[ProxmoxHost] = None

    def initialize(self, config: SpawnConfig, registry: "ProviderRegistry") -> None:
        """Attach configuration and the shared host adapter."""
        self.config = config
        self.host = registry.host
        self.setup(registry)

    @abstractmethod
    def setup(self, registry: "ProviderRegistry") -> None:
        """Resolve provider-specific dependencies after initialization."""
        pass
