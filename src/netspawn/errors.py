"""Error taxonomy for the provisioning pipeline."""


class ProvisioningError(Exception):
    """Base class for fatal pipeline errors."""
    exit_code = 1


class HostEnvironmentError(ProvisioningError):
    """The host cannot run the pipeline."""


class NotTargetPlatformError(HostEnvironmentError):
    """Not a Proxmox VE host."""


class InsufficientPrivilegeError(HostEnvironmentError):
    """Not running as root."""


class SelectionError(ProvisioningError):
    """No usable storage backend or template."""


class InputValidationError(ProvisioningError):
    """User supplied input that cannot be recovered by re-prompting."""


class TransferError(ProvisioningError):
    """Template download failed."""


class LifecycleError(ProvisioningError):
    """Container create/start failed or an illegal state transition."""


class IdentifierConflictError(LifecycleError):
    """The host rejected the container id because it is already in use."""


class InstallError(ProvisioningError):
    """An in-container command exited non-zero."""


class ConfigError(ProvisioningError):
    """Configuration file is missing or invalid."""


class ConnectivityTimeout(Exception):
    """A bounded poll ran out of attempts.

    Never fatal: every polling site converts it into a warning or a
    pending result.
    """

    def __init__(self, description: str, attempts: int):
        super().__init__(f"{description} not reached after {attempts} attempts")
        self.description = description
        self.attempts = attempts


class UserCancelled(Exception):
    """Operator declined the confirmation gate."""
    exit_code = 0
