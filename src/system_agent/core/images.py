from __future__ import annotations

from typing import Optional

from system_agent.core.context import OperationContext, check
from system_agent.core.errors import OperationCancelled
from system_agent.core.runtime import RuntimeClient
from system_agent.core.specs import PullResult
from system_agent.utils.logger import logger


class ImagePuller:
    """Pulls images and reports the outcome instead of raising it."""

    def __init__(self, client: RuntimeClient) -> None:
        self.client = client

    def pull(self, image: str, ctx: Optional[OperationContext] = None) -> PullResult:
        logger.info(f"Pulling image {image}...")
        try:
            for chunk in self.client.pull_image(image, ctx=ctx):
                check(ctx, "pull")
                if isinstance(chunk, dict) and chunk.get("error"):
                    logger.warning(f"Failed to pull image {image}: {chunk['error']}")
                    return PullResult(image, error=str(chunk["error"]))
        except OperationCancelled:
            raise
        except Exception as e:
            logger.warning(f"Failed to pull image {image}: {e}")
            return PullResult(image, error=str(e))
        logger.info(f"Successfully pulled image {image}")
        return PullResult(image)


__all__ = ["ImagePuller"]
