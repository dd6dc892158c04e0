"""
System Agent - container and network provisioning for a single host.

This package provides:
- Idempotent provisioning of the managed bridge network
- Container state inspection by name
- Container creation with ports, bind mounts and a static network endpoint
- Optional log shipping through a fluent-bit sidecar container
"""

from __future__ import annotations

__version__ = "1.0.0"

from system_agent.config import Settings
from system_agent.core.container_manager import ContainerManager
from system_agent.core.specs import ContainerSpec, ContainerState
from system_agent.utils.logger import get_logger

__all__ = [
    "ContainerManager",
    "ContainerSpec",
    "ContainerState",
    "Settings",
    "get_logger",
    "__version__",
]
