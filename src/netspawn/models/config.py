"""Configuration models."""

from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator


class DefaultsConfig(BaseModel):
    """Container sizing used unless the operator picks advanced settings."""
    hostname: str = Field(default="netbird")
    cores: int = Field(default=1, gt=0)
    memory: int = Field(default=512, gt=0, description="RAM in MB")
    swap: int = Field(default=512, gt=0, description="Swap in MB")
    disk: int = Field(default=4, gt=0, description="Root disk in GB")
    bridge: str = Field(default="vmbr0")
    ostype: str = Field(default="debian")
    tags: str = Field(default="network;vpn")


class StorageConfig(BaseModel):
    """Storage backend selection."""
    fallback_names: List[str] = Field(
        default_factory=lambda: ["local-lvm", "local-zfs", "local"],
        description="Tried in order when no backend advertises container roots",
    )
    template_default: str = Field(default="local")


class TemplateConfig(BaseModel):
    """OS template selection."""
    family: str = Field(default="debian")
    primary_version: str = Field(default="13")
    fallback_version: str = Field(default="12")
    section: str = Field(default="system")

    def needle(self, version: str) -> str:
        """Catalog substring identifying a template family and major version."""
        return f"{self.family}-{version}"


class PollingConfig(BaseModel):
    """Bounded polling loops, in attempts and seconds."""
    start_settle_delay: float = Field(default=3, ge=0)
    start_checks: int = Field(default=1, ge=1)
    start_check_interval: float = Field(default=1, ge=0)
    network_attempts: int = Field(default=10, ge=1)
    network_interval: float = Field(default=2, ge=0)
    connect_attempts: int = Field(default=10, ge=1)
    connect_interval: float = Field(default=3, ge=0)


class NetbirdConfig(BaseModel):
    """NetBird client installation."""
    install_url: str = Field(default="https://pkgs.netbird.io/install.sh")
    management_url: Optional[str] = Field(
        None, description="Self-hosted management server, passed to login/up"
    )


class HostConfig(BaseModel):
    """Proxmox host paths and limits."""
    lxc_config_dir: str = Field(default="/etc/pve/lxc")
    command_timeout: int = Field(default=600, gt=0)


class SpawnConfig(BaseModel):
    """Main configuration model."""
    log_level: str = Field(default="INFO")
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    template: TemplateConfig = Field(default_factory=TemplateConfig)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    netbird: NetbirdConfig = Field(default_factory=NetbirdConfig)
    host: HostConfig = Field(default_factory=HostConfig)

    model_config = ConfigDict(extra="ignore")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}")
        return v.upper()
