"""
Error types raised by the deployment scripts.

Every error carries the step that failed so the entry points can print a
single fatal line and exit non-zero.
"""

from typing import Optional


class DeploymentError(Exception):
    """Base class for all fatal script errors."""

    step = "deployment"

    def __init__(self, message: str, step: Optional[str] = None):
        super().__init__(message)
        if step is not None:
            self.step = step

    def __str__(self):
        return f"[{self.step}] {super().__str__()}"


class ConfigError(DeploymentError):
    """A required configuration value is missing or malformed."""

    step = "config"


class DeployError(DeploymentError):
    """A contract creation transaction failed or reverted."""

    step = "deploy"


class WireError(DeploymentError):
    """A post-deploy configuration call failed or reverted."""

    step = "wire"


class VerifyError(DeploymentError):
    """The block explorer rejected or timed out verifying a contract."""

    step = "verify"


class WalletError(DeploymentError):
    """No wallet is available or no account is connected."""

    step = "wallet"
