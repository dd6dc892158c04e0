"""
Core provisioning logic for System Agent.

This module contains the container lifecycle and network provisioning components.
"""

from __future__ import annotations

from system_agent.core.container_manager import ContainerManager
from system_agent.core.context import OperationContext
from system_agent.core.errors import (
    ContainerCreateError,
    ContainerStartError,
    ImagePullError,
    NetworkProvisionError,
    OperationCancelled,
    ProvisioningError,
    RuntimeConnectionError,
    SpecValidationError,
)
from system_agent.core.images import ImagePuller
from system_agent.core.inspector import ContainerInspector
from system_agent.core.lifecycle import ContainerLifecycleManager
from system_agent.core.networks import NetworkProvisioner
from system_agent.core.runtime import RuntimeClient
from system_agent.core.sidecar import LogSidecarBootstrapper
from system_agent.core.specs import (
    ContainerRole,
    ContainerSpec,
    ContainerState,
    ContainerStatus,
    CreateResult,
    NetworkHandle,
    PortMapping,
    PullResult,
    RestartPolicy,
    VolumeBind,
)

__all__ = [
    "ContainerManager",
    "OperationContext",
    "RuntimeClient",
    "ImagePuller",
    "NetworkProvisioner",
    "ContainerInspector",
    "ContainerLifecycleManager",
    "LogSidecarBootstrapper",
    "ContainerRole",
    "ContainerSpec",
    "ContainerState",
    "ContainerStatus",
    "CreateResult",
    "NetworkHandle",
    "PortMapping",
    "PullResult",
    "RestartPolicy",
    "VolumeBind",
    "ProvisioningError",
    "RuntimeConnectionError",
    "NetworkProvisionError",
    "SpecValidationError",
    "ImagePullError",
    "ContainerCreateError",
    "ContainerStartError",
    "OperationCancelled",
]
