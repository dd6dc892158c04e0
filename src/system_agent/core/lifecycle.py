from __future__ import annotations

from typing import Any, Dict, List, Optional

from docker.errors import APIError
from docker.types import LogConfig, Mount
from docker.utils import parse_repository_tag

from system_agent.config import LoggingConfig
from system_agent.core.context import OperationContext
from system_agent.core.errors import ContainerCreateError, ContainerStartError
from system_agent.core.images import ImagePuller
from system_agent.core.runtime import RuntimeClient
from system_agent.core.specs import ContainerRole, ContainerSpec, CreateResult
from system_agent.utils.logger import logger

# every container that needs sources must put them under /app
WORKING_DIR = "/app"
LABEL_KEY = "managed-by"
LABEL_VALUE = "system-agent"
ROLE_LABEL = "system-agent.role"


class ContainerLifecycleManager:
    """
    Creates and starts containers attached to the managed network.

    A failed start leaves the created container in place; ``ContainerStartError``
    carries its id so the caller can remove it, retry the start, or leave it.
    Two callers creating the same name concurrently are not serialized here;
    the runtime's name uniqueness decides which one fails.
    """

    def __init__(
        self,
        client: RuntimeClient,
        puller: ImagePuller,
        network_id: str,
        logging_config: LoggingConfig,
    ) -> None:
        self.client = client
        self.puller = puller
        self.network_id = network_id
        self.logging_config = logging_config

    def _is_collector(self, spec: ContainerSpec) -> bool:
        if spec.role is ContainerRole.LOG_COLLECTOR:
            return True
        # any tag or digest of the collector repository
        repository, _ = parse_repository_tag(spec.image)
        collector_repository, _ = parse_repository_tag(self.logging_config.collector_image)
        return repository == collector_repository

    def build_log_config(self, spec: ContainerSpec) -> Optional[LogConfig]:
        """fluentd driver aimed at the collector, or None for the runtime default."""
        cfg = self.logging_config
        if not cfg.enabled or self._is_collector(spec):
            return None
        return LogConfig(
            type="fluentd",
            config={
                "fluentd-address": f"tcp://{cfg.collector_ip}:{cfg.collector_port}",
                "tag": cfg.log_tag,
            },
        )

    def build_create_kwargs(self, spec: ContainerSpec) -> Dict[str, Any]:
        port_bindings = {p.exposed: str(p.host_port) for p in spec.ports}
        mounts: List[Mount] = [
            Mount(target=v.container_path, source=v.host_path, type="bind") for v in spec.volumes
        ]

        host_config = self.client.host_config(
            mounts=mounts,
            port_bindings=port_bindings,
            restart_policy={"Name": spec.restart_policy.value},
            log_config=self.build_log_config(spec),
            network_mode=self.network_id,
        )
        networking_config = self.client.networking_config(
            self.network_id,
            aliases=[spec.name],
            ipv4_address=spec.ip_address or None,
        )

        return {
            "command": list(spec.commands) or None,
            "hostname": spec.name,
            "user": spec.user or None,
            "detach": False,
            "stdin_open": True,
            "tty": False,
            "ports": [(p.container_port, p.protocol) for p in spec.ports],
            "environment": list(spec.environment),
            "working_dir": WORKING_DIR,
            "labels": {LABEL_KEY: LABEL_VALUE, ROLE_LABEL: spec.role.value},
            "host_config": host_config,
            "networking_config": networking_config,
        }

    def create_and_start(
        self, spec: ContainerSpec, ctx: Optional[OperationContext] = None, *, pull: bool = True
    ) -> CreateResult:
        """Pull (unless the caller already did), create, then start ``spec``."""
        logger.info(f"Creating container {spec.name} from image {spec.image}")
        if pull:
            # a failed pull is reported by the create call if the image is really missing
            self.puller.pull(spec.image, ctx=ctx)

        kwargs = self.build_create_kwargs(spec)
        logger.debug(f"Container config for {spec.name}: {kwargs}")

        try:
            container_id, warnings = self.client.create_container(spec.image, name=spec.name, ctx=ctx, **kwargs)
        except APIError as e:
            logger.error(f"Failed to create container {spec.name}: {e}")
            raise ContainerCreateError(f"creating container {spec.name} failed: {e}", step="create") from e

        for warning in warnings:
            logger.warning(f"Container {spec.name}: {warning}")

        try:
            self.client.start_container(container_id, ctx=ctx)
        except APIError as e:
            logger.error(f"Container {container_id} ({spec.name}) created but failed to start: {e}")
            raise ContainerStartError(
                f"starting container {spec.name} failed: {e}", container_id=container_id
            ) from e

        logger.info(f"Container {container_id} ({spec.name}) started at {spec.ip_address or 'auto'}")
        return CreateResult(container_id=container_id, warnings=warnings)


__all__ = ["ContainerLifecycleManager", "WORKING_DIR", "LABEL_KEY", "ROLE_LABEL"]
