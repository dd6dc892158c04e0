from __future__ import annotations

from typing import Optional

from system_agent.config import Settings
from system_agent.core.context import OperationContext
from system_agent.core.images import ImagePuller
from system_agent.core.inspector import ContainerInspector
from system_agent.core.lifecycle import ContainerLifecycleManager
from system_agent.core.networks import NetworkProvisioner
from system_agent.core.runtime import RuntimeClient
from system_agent.core.sidecar import LogSidecarBootstrapper
from system_agent.core.specs import ContainerSpec, ContainerState, CreateResult, NetworkHandle, PullResult
from system_agent.utils.logger import logger


class ContainerManager:
    """
    Entry point wiring every provisioning component to one runtime client.

    Holds configuration only; container and network state is always read
    live from the runtime.
    """

    def __init__(self, settings: Settings, client: Optional[RuntimeClient] = None) -> None:
        logger.info("Initializing ContainerManager")
        self.settings = settings
        self.client = client if client is not None else RuntimeClient.from_env(timeout=settings.docker_timeout)

        self.puller = ImagePuller(self.client)
        self.networks = NetworkProvisioner(self.client, settings.network.gateway)
        self.inspector = ContainerInspector(self.client)
        self.lifecycle = ContainerLifecycleManager(
            self.client, self.puller, settings.network.id, settings.logging
        )
        self.sidecar = LogSidecarBootstrapper(
            self.client, self.puller, self.inspector, self.lifecycle, settings.logging
        )

    @property
    def enabled(self) -> bool:
        return self.settings.enabled

    def close(self) -> None:
        self.client.close()

    def pull(self, image: str, ctx: Optional[OperationContext] = None) -> PullResult:
        return self.puller.pull(image, ctx=ctx)

    def ensure_network(self, ctx: Optional[OperationContext] = None) -> NetworkHandle:
        net = self.settings.network
        return self.networks.ensure_network(net.id, net.subnet, ctx=ctx)

    def find(self, name: str, ctx: Optional[OperationContext] = None) -> ContainerState:
        return self.inspector.find(name, ctx=ctx)

    def create_and_start(self, spec: ContainerSpec, ctx: Optional[OperationContext] = None) -> CreateResult:
        return self.lifecycle.create_and_start(spec, ctx=ctx)

    def ensure_log_collector(
        self, container_name: Optional[str] = None, ctx: Optional[OperationContext] = None
    ) -> CreateResult:
        name = container_name or self.settings.logging.collector_hostname
        return self.sidecar.ensure_log_collector(name, ctx=ctx)

    def bootstrap(self, ctx: Optional[OperationContext] = None) -> Optional[NetworkHandle]:
        """Provision the managed network, then the log collector when logging is on."""
        if not self.enabled:
            logger.info("System agent disabled, skipping bootstrap")
            return None

        handle = self.ensure_network(ctx=ctx)
        logger.info(f"Managed network {self.settings.network.id} ready ({handle.id})")

        if self.settings.logging.enabled:
            self.ensure_log_collector(ctx=ctx)
        else:
            logger.info("Log collector disabled")
        return handle


__all__ = ["ContainerManager"]
