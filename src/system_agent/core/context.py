from __future__ import annotations

import threading
import time
from typing import Optional

from system_agent.core.errors import OperationCancelled


class OperationContext:
    """
    Cancellation handle passed through provisioning calls.

    Checked before every runtime round-trip and between image pull progress
    messages. Any other call already in flight is bounded by the docker
    client's transport timeout, not by this context.
    """

    def __init__(self, timeout: Optional[float] = None) -> None:
        self._cancelled = threading.Event()
        self._deadline = time.monotonic() + timeout if timeout is not None else None

    def cancel(self) -> None:
        self._cancelled.set()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def check(self, step: str) -> None:
        if self._cancelled.is_set():
            raise OperationCancelled("operation cancelled", step=step)
        if self._deadline is not None and time.monotonic() >= self._deadline:
            raise OperationCancelled("operation deadline exceeded", step=step)


def check(ctx: Optional[OperationContext], step: str) -> None:
    if ctx is not None:
        ctx.check(step)


__all__ = ["OperationContext", "check"]
