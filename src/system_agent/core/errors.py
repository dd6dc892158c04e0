"""
Error types raised by the provisioning core.

Every error carries the step that failed so callers can tell, for example,
a container that was never created from one that was created but not started.
"""

from __future__ import annotations

from typing import Optional


class ProvisioningError(Exception):
    """Base class for all provisioning failures."""

    def __init__(self, message: str, *, step: Optional[str] = None) -> None:
        super().__init__(message)
        self.step = step

    def __str__(self) -> str:
        message = super().__str__()
        if self.step:
            return f"[{self.step}] {message}"
        return message


class RuntimeConnectionError(ProvisioningError):
    """The container runtime could not be reached."""


class NetworkProvisionError(ProvisioningError):
    """Inspecting or creating the managed network failed."""


class SpecValidationError(ProvisioningError, ValueError):
    """A container specification is malformed."""


class ImagePullError(ProvisioningError):
    """An image could not be pulled."""


class ContainerCreateError(ProvisioningError):
    """The runtime refused to create the container."""


class ContainerStartError(ProvisioningError):
    """The container was created but could not be started."""

    def __init__(self, message: str, *, container_id: str, step: Optional[str] = "start") -> None:
        super().__init__(message, step=step)
        self.container_id = container_id


class OperationCancelled(ProvisioningError):
    """The operation context was cancelled or its deadline passed."""


__all__ = [
    "ProvisioningError",
    "RuntimeConnectionError",
    "NetworkProvisionError",
    "SpecValidationError",
    "ImagePullError",
    "ContainerCreateError",
    "ContainerStartError",
    "OperationCancelled",
]
