"""Provisioning request models."""

import re
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, SecretStr, field_validator, model_validator


HOSTNAME_PATTERN = re.compile(r"^[A-Za-z0-9]([A-Za-z0-9-]{0,61}[A-Za-z0-9])?$")
MIN_PASSWORD_LENGTH = 5


class PrivilegePolicy(BaseModel):
    """Host-side consequences of a privilege mode."""
    unprivileged_flag: int
    features: Tuple[str, ...]
    device_overrides: bool

    model_config = ConfigDict(frozen=True)

    @property
    def features_arg(self) -> str:
        """Feature list in the form accepted by ``pct create --features``."""
        return ",".join(self.features)


class PrivilegeMode(str, Enum):
    """Container isolation mode."""
    UNPRIVILEGED = "unprivileged"
    PRIVILEGED = "privileged"

    @property
    def policy(self) -> PrivilegePolicy:
        return PRIVILEGE_POLICIES[self]


# Privileged containers already have full device access, and the host
# refuses keyctl for them.
PRIVILEGE_POLICIES: Dict[PrivilegeMode, PrivilegePolicy] = {
    PrivilegeMode.UNPRIVILEGED: PrivilegePolicy(
        unprivileged_flag=1,
        features=("nesting=1", "keyctl=1"),
        device_overrides=True,
    ),
    PrivilegeMode.PRIVILEGED: PrivilegePolicy(
        unprivileged_flag=0,
        features=("nesting=1",),
        device_overrides=False,
    ),
}


class AuthMode(str, Enum):
    """How the NetBird client joins the overlay network."""
    SETUP_KEY = "setup-key"
    SSO = "sso"


def is_valid_hostname(hostname: str) -> bool:
    """Check a hostname against the container hostname rules."""
    return bool(HOSTNAME_PATTERN.match(hostname))


class ProvisioningRequest(BaseModel):
    """Everything the operator decided, collected before any side effect."""
    hostname: str = Field(..., description="Container hostname")
    password: SecretStr = Field(..., description="Root password")
    cores: int = Field(..., gt=0)
    memory: int = Field(..., gt=0, description="RAM in MB")
    swap: int = Field(..., gt=0, description="Swap in MB")
    disk: int = Field(..., gt=0, description="Root disk size in GB")
    bridge: str = Field(..., min_length=1)
    vmid: Optional[int] = Field(None, gt=0, description="Pinned container id")
    privilege: PrivilegeMode = Field(default=PrivilegeMode.UNPRIVILEGED)
    auth: AuthMode = Field(default=AuthMode.SETUP_KEY)
    setup_key: Optional[SecretStr] = None

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("hostname")
    @classmethod
    def validate_hostname(cls, v):
        """Validate hostname."""
        if not is_valid_hostname(v):
            raise ValueError(
                "hostname must use letters, digits and hyphens, start and end "
                "alphanumeric, max 63 characters"
            )
        return v

    @field_validator("password")
    @classmethod
    def validate_password(cls, v):
        """Validate password length."""
        if len(v.get_secret_value()) < MIN_PASSWORD_LENGTH:
            raise ValueError(f"password must be at least {MIN_PASSWORD_LENGTH} characters")
        return v

    @model_validator(mode="after")
    def validate_setup_key(self):
        """A setup key is required exactly when joining by setup key."""
        if self.auth == AuthMode.SETUP_KEY:
            if self.setup_key is None or not self.setup_key.get_secret_value().strip():
                raise ValueError("setup key is required for setup-key authentication")
        return self
