"""Pipeline stage providers for netspawn."""

from netspawn.providers.base import BaseProvider, ProviderStatus
from netspawn.providers.registry import ProviderRegistry

__all__ = [
    "BaseProvider",
    "ProviderStatus",
    "ProviderRegistry",
]
