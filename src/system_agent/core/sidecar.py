from __future__ import annotations

from typing import Optional

from system_agent.config import LoggingConfig
from system_agent.core.context import OperationContext
from system_agent.core.errors import OperationCancelled
from system_agent.core.images import ImagePuller
from system_agent.core.inspector import ContainerInspector
from system_agent.core.lifecycle import ContainerLifecycleManager
from system_agent.core.runtime import RuntimeClient
from system_agent.core.specs import ContainerRole, ContainerSpec, CreateResult, RestartPolicy
from system_agent.utils.logger import logger

COLLECTOR_USER = "0:0"


class LogSidecarBootstrapper:
    """
    Provisions the log collector every other container ships its logs to.

    Any existing instance is force-removed first, so there is at most one
    collector and every bootstrap restarts it; logs are not shipped while it
    is being replaced.
    """

    def __init__(
        self,
        client: RuntimeClient,
        puller: ImagePuller,
        inspector: ContainerInspector,
        lifecycle: ContainerLifecycleManager,
        logging_config: LoggingConfig,
    ) -> None:
        self.client = client
        self.puller = puller
        self.inspector = inspector
        self.lifecycle = lifecycle
        self.logging_config = logging_config

    def collector_spec(self, container_name: str) -> ContainerSpec:
        cfg = self.logging_config
        return ContainerSpec(
            image=cfg.collector_image,
            name=container_name,
            user=COLLECTOR_USER,
            restart_policy=RestartPolicy.ALWAYS,
            ip_address=cfg.collector_ip,
            ports=(),
            volumes=[f"{cfg.collector_config_path}:{cfg.collector_config_path}"],
            environment=(),
            commands=["-c", cfg.collector_config_path],
            role=ContainerRole.LOG_COLLECTOR,
        )

    def _remove_stale(self, container_name: str, ctx: Optional[OperationContext]) -> None:
        state = self.inspector.find(container_name, ctx=ctx)
        if not state.exists:
            return
        logger.info(f"Removing existing log collector {container_name} ({state.status.value}, {state.container_id})")
        try:
            self.client.remove_container(state.container_id, force=True, ctx=ctx)
        except OperationCancelled:
            raise
        except Exception as e:
            logger.warning(f"Failed to remove log collector {state.container_id}: {e}")

    def ensure_log_collector(self, container_name: str, ctx: Optional[OperationContext] = None) -> CreateResult:
        spec = self.collector_spec(container_name)
        # pull before removing the old instance to keep the logging gap short
        self.puller.pull(spec.image, ctx=ctx)
        self._remove_stale(container_name, ctx)
        result = self.lifecycle.create_and_start(spec, ctx=ctx, pull=False)
        logger.info(f"Log collector {container_name} running as {result.container_id}")
        return result


__all__ = ["LogSidecarBootstrapper"]
