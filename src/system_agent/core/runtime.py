"""
Adapter over the docker low-level API.

``RuntimeClient`` is the one long-lived, shared resource of the core. It adds
no locking of its own; concurrent calls rely on the thread safety of the
underlying ``requests`` session used by docker-py.
"""

from __future__ import annotations

from typing import Any, Dict, Iterator, List, Optional, Tuple

import docker
import requests
from docker.errors import DockerException
from docker.types import IPAMConfig, IPAMPool

from system_agent.core.context import OperationContext, check
from system_agent.core.errors import RuntimeConnectionError
from system_agent.utils.logger import get_logger

logger = get_logger("system-agent.runtime")

_TRANSPORT_ERRORS = (requests.exceptions.ConnectionError, requests.exceptions.Timeout)


class RuntimeClient:
    def __init__(self, api: Any, *, owner: Any = None) -> None:
        self.api = api
        self._owner = owner

    @classmethod
    def from_env(cls, timeout: int = 60) -> "RuntimeClient":
        """Connect using DOCKER_HOST / DOCKER_TLS_VERIFY / DOCKER_CERT_PATH."""
        try:
            client = docker.from_env(timeout=timeout)
            client.ping()
        except (DockerException, *_TRANSPORT_ERRORS) as e:
            logger.error(f"Cannot connect to Docker daemon: {e}")
            raise RuntimeConnectionError(f"cannot connect to Docker daemon: {e}", step="connect") from e
        logger.info("Docker client initialized successfully")
        return cls(client.api, owner=client)

    def _call(self, step: str, ctx: Optional[OperationContext], fn, *args, **kwargs):
        check(ctx, step)
        try:
            return fn(*args, **kwargs)
        except _TRANSPORT_ERRORS as e:
            raise RuntimeConnectionError(f"runtime unreachable: {e}", step=step) from e

    def close(self) -> None:
        target = self._owner if self._owner is not None else self.api
        close = getattr(target, "close", None)
        if close is not None:
            close()

    # ---------- networks ----------
    def inspect_network(self, network_id: str, ctx: Optional[OperationContext] = None) -> Dict[str, Any]:
        return self._call("inspect-network", ctx, self.api.inspect_network, network_id)

    def create_network(
        self,
        name: str,
        *,
        driver: str,
        subnet: str,
        gateway: str,
        options: Optional[Dict[str, str]] = None,
        ctx: Optional[OperationContext] = None,
    ) -> Tuple[str, Optional[str]]:
        ipam = IPAMConfig(pool_configs=[IPAMPool(subnet=subnet, gateway=gateway)])
        resp = self._call(
            "create-network", ctx, self.api.create_network,
            name, driver=driver, options=options or None, ipam=ipam,
        )
        return resp["Id"], resp.get("Warning") or None

    # ---------- containers ----------
    def list_containers(
        self,
        *,
        all: bool = False,
        name: Optional[str] = None,
        ctx: Optional[OperationContext] = None,
    ) -> List[Dict[str, Any]]:
        filters = {"name": name} if name else None
        return self._call("list-containers", ctx, self.api.containers, all=all, filters=filters)

    def pull_image(self, image: str, ctx: Optional[OperationContext] = None) -> Iterator[Dict[str, Any]]:
        """Stream decoded pull progress messages; errors arrive as ``{"error": ...}`` items."""
        return self._call("pull", ctx, self.api.pull, image, stream=True, decode=True)

    def host_config(self, **kwargs: Any) -> Dict[str, Any]:
        return self.api.create_host_config(**kwargs)

    def networking_config(self, network_id: str, **endpoint: Any) -> Dict[str, Any]:
        return self.api.create_networking_config({network_id: self.api.create_endpoint_config(**endpoint)})

    def create_container(
        self, image: str, *, name: str, ctx: Optional[OperationContext] = None, **kwargs: Any
    ) -> Tuple[str, List[str]]:
        resp = self._call("create", ctx, self.api.create_container, image, name=name, **kwargs)
        return resp["Id"], list(resp.get("Warnings") or [])

    def start_container(self, container_id: str, ctx: Optional[OperationContext] = None) -> None:
        self._call("start", ctx, self.api.start, container_id)

    def remove_container(
        self, container_id: str, *, force: bool = False, ctx: Optional[OperationContext] = None
    ) -> None:
        self._call("remove", ctx, self.api.remove_container, container_id, force=force)


__all__ = ["RuntimeClient"]
