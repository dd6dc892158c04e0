from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from system_agent.core.context import OperationContext
from system_agent.core.runtime import RuntimeClient
from system_agent.core.specs import ContainerState
from system_agent.utils.logger import logger

# states docker lists without all=True
RUNNING_STATES = ("running", "paused", "restarting")


def _first_name(entry: Dict[str, Any]) -> Optional[str]:
    names = entry.get("Names") or []
    return names[0] if names else None


class ContainerInspector:
    """Resolves a container name to its live state on the runtime."""

    def __init__(self, client: RuntimeClient) -> None:
        self.client = client

    def find(self, name: str, ctx: Optional[OperationContext] = None) -> ContainerState:
        wanted = f"/{name}"
        entries = self.client.list_containers(all=True, name=f"^{re.escape(wanted)}$", ctx=ctx)
        matches = [e for e in entries if _first_name(e) == wanted]

        if any("State" not in e for e in matches):
            return self._scan(wanted, ctx)

        for entry in matches:
            if entry["State"] in RUNNING_STATES:
                return ContainerState.running(entry["Id"])
        if matches:
            return ContainerState.stopped(matches[0]["Id"])
        logger.debug(f"Container {name} not found")
        return ContainerState.absent()

    def _scan(self, wanted: str, ctx: Optional[OperationContext]) -> ContainerState:
        # running containers first, then everything
        running: List[Dict[str, Any]] = self.client.list_containers(all=False, ctx=ctx)
        for entry in running:
            if _first_name(entry) == wanted:
                return ContainerState.running(entry["Id"])
        for entry in self.client.list_containers(all=True, ctx=ctx):
            if _first_name(entry) == wanted:
                return ContainerState.stopped(entry["Id"])
        return ContainerState.absent()


__all__ = ["ContainerInspector", "RUNNING_STATES"]
