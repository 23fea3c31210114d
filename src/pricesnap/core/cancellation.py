# -*- coding: utf-8 -*-
"""
src/pricesnap/core/cancellation.py

Cooperative cancellation for the pipeline's suspension points.

One token is issued per capture cycle (and per conversion). Long-running
calls wrap their awaitable in `CancellationToken.run`, which resolves with
`Cancelled` as soon as the token is cancelled, even if the underlying worker
thread is still busy. Whatever that worker produces afterwards is discarded.
"""

import asyncio
import logging
from typing import Awaitable, Optional, TypeVar

from ..errors import Cancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CancellationToken:
    """
    A one-shot cancellation flag that can be awaited.

    Must be used from a single event loop thread.
    """

    def __init__(self, label: str = ""):
        self.label = label
        self._event = asyncio.Event()
        self._reason: Optional[str] = None

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    @property
    def reason(self) -> Optional[str]:
        return self._reason

    def cancel(self, reason: str = "cancelled") -> None:
        if self._event.is_set():
            return
        self._reason = reason
        self._event.set()
        logger.debug(f"Token '{self.label}' cancelled ({reason}).")

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise Cancelled(self._reason or "cancelled")

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Awaits `awaitable` unless the token is cancelled first.

        Args:
            awaitable: A coroutine or future to race against the token.

        Returns:
            The awaitable's result.

        Raises:
            Cancelled: If the token was cancelled before or while waiting.
        """
        task = asyncio.ensure_future(awaitable)
        if self._event.is_set():
            task.cancel()
            raise Cancelled(self._reason or "cancelled")

        waiter = asyncio.ensure_future(self._event.wait())
        try:
            await asyncio.wait({task, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            if not waiter.done():
                waiter.cancel()
            if not task.done():
                task.cancel()

        # Completion and cancellation can land in the same loop iteration;
        # the token decides.
        if self._event.is_set():
            if task.done() and not task.cancelled() and task.exception() is not None:
                logger.debug(f"Dropping late error from '{self.label}': {task.exception()}")
            raise Cancelled(self._reason or "cancelled")
        return task.result()
