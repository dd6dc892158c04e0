"""
Main entry point for System Agent.

Loads settings from the environment and provisions the managed network and,
when enabled, the log collector.
"""

from __future__ import annotations

import sys
from typing import Optional

from pydantic import ValidationError

from system_agent.config import Settings
from system_agent.core.container_manager import ContainerManager
from system_agent.core.context import OperationContext
from system_agent.core.errors import ProvisioningError
from system_agent.utils.logger import logger


def run(settings: Optional[Settings] = None, ctx: Optional[OperationContext] = None) -> int:
    """
    Bootstrap the host.

    Returns:
        Exit code (0 for success, 1 when provisioning failed).
    """
    logger.info("Starting System Agent...")

    try:
        settings = settings or Settings.from_env()
    except ValidationError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    if not settings.enabled:
        logger.info("System agent disabled, nothing to do")
        return 0

    try:
        manager = ContainerManager(settings)
    except ProvisioningError as e:
        logger.error(f"Cannot start System Agent: {e}")
        return 1

    try:
        manager.bootstrap(ctx=ctx)
    except ProvisioningError as e:
        logger.error(f"Bootstrap failed: {e}")
        return 1
    finally:
        manager.close()

    logger.info("System Agent bootstrap complete")
    return 0


if __name__ == "__main__":
    sys.exit(run())
