from __future__ import annotations

from typing import Optional

from system_agent.core.context import OperationContext
from system_agent.core.errors import NetworkProvisionError, OperationCancelled
from system_agent.core.runtime import RuntimeClient
from system_agent.core.specs import NetworkHandle
from system_agent.utils.logger import logger

NETWORK_DRIVER = "bridge"


class NetworkProvisioner:
    def __init__(self, client: RuntimeClient, gateway: str) -> None:
        self.client = client
        self.gateway = gateway

    def ensure_network(
        self, network_id: str, subnet: str, ctx: Optional[OperationContext] = None
    ) -> NetworkHandle:
        """
        Return the network named ``network_id``, creating it if it cannot be inspected.

        An existing network is reused as-is even when its subnet or gateway differ.
        Any inspect failure, not only "not found", leads to a create attempt.
        """
        try:
            existing = self.client.inspect_network(network_id, ctx=ctx)
            logger.debug(f"Network {network_id} already exists")
            return NetworkHandle(id=existing["Id"])
        except OperationCancelled:
            raise
        except Exception as e:
            logger.warning(f"Could not inspect network {network_id}, creating it: {e}")

        try:
            new_id, warning = self.client.create_network(
                network_id,
                driver=NETWORK_DRIVER,
                subnet=subnet,
                gateway=self.gateway,
                ctx=ctx,
            )
        except OperationCancelled:
            raise
        except Exception as e:
            logger.error(f"Failed to create network {network_id}: {e}")
            raise NetworkProvisionError(
                f"creating network {network_id} ({subnet} via {self.gateway}) failed: {e}",
                step="create-network",
            ) from e

        if warning:
            logger.warning(f"Network {network_id} created with warning: {warning}")
        logger.info(f"Created network {network_id} ({new_id})")
        return NetworkHandle(id=new_id, warning=warning)


__all__ = ["NetworkProvisioner", "NETWORK_DRIVER"]
