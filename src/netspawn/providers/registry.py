"""Provider registry for the pipeline stages."""

import logging
from typing import Dict, Type

from netspawn.adapters.proxmox import ProxmoxHost
from netspawn.models.config import SpawnConfig
from netspawn.providers.base import BaseProvider
from netspawn.providers.container import ContainerProvider
from netspawn.providers.host import HostProbe
from netspawn.providers.payload import PayloadProvider
from netspawn.providers.storage import ResourceSelector
from netspawn.providers.template import TemplateProvider


logger = logging.getLogger(__name__)


class ProviderRegistry:
    """Registry holding one provider per stage and the shared host adapter."""

    def __init__(self, host: ProxmoxHost):
        """Initialize provider registry."""
        self.host = host
        self._providers: Dict[str, BaseProvider] = {}
        self._provider_classes: Dict[str, Type[BaseProvider]] = {
            "host": HostProbe,
            "storage": ResourceSelector,
            "template": TemplateProvider,
            "container": ContainerProvider,
            "payload": PayloadProvider,
        }

    def initialize(self, config: SpawnConfig):
        """Initialize all providers with two-pass injection."""
        # Phase 1: Instantiate all providers
        for name, provider_class in self._provider_classes.items():
            try:
                self._providers[name] = provider_class()
            except Exception as e:
                logger.error(f"Failed to instantiate provider {name}: {e}")
                raise

        # Phase 2: Initialize and inject registry
        for name, provider in self._providers.items():
            try:
                provider.initialize(config, self)
                logger.debug(f"Initialized provider: {name}")
            except Exception as e:
                logger.error(f"Failed to initialize provider {name}: {e}")
                raise

    def require(self, name: str) -> BaseProvider:
        """Get a provider by name, failing loudly when it is missing."""
        provider = self._providers.get(name)
        if provider is None:
            raise KeyError(f"Provider not initialized: {name}")
        return provider
