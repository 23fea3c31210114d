# -*- coding: utf-8 -*-
"""
src/pricesnap/utils/async_loop.py

Runs an asyncio event loop on a background thread so the Qt event loop on
the main thread never waits on OCR or network calls.
"""

import asyncio
import logging
import threading
from concurrent.futures import Future
from typing import Any, Callable, Coroutine, Optional

logger = logging.getLogger(__name__)


class AsyncLoopThread:
    """A daemon thread owning one event loop."""

    def __init__(self, name: str = "pricesnap-loop"):
        self.loop = asyncio.new_event_loop()
        self._thread = threading.Thread(target=self._run, name=name, daemon=True)

    def _run(self):
        asyncio.set_event_loop(self.loop)
        self.loop.run_forever()

    def start(self):
        self._thread.start()

    def submit(self, coro: Coroutine) -> Future:
        """Schedules a coroutine on the loop; errors are logged."""
        future = asyncio.run_coroutine_threadsafe(coro, self.loop)
        future.add_done_callback(self._log_failure)
        return future

    def call(self, func: Callable[..., Any], *args) -> None:
        """Runs a plain function on the loop thread."""
        self.loop.call_soon_threadsafe(func, *args)

    def run_sync(self, func: Callable[..., Any], *args, timeout: Optional[float] = 5.0) -> Any:
        """Runs a plain function on the loop thread and waits for its result."""

        async def _invoke():
            return func(*args)

        return asyncio.run_coroutine_threadsafe(_invoke(), self.loop).result(timeout)

    def stop(self):
        if self.loop.is_running():
            self.loop.call_soon_threadsafe(self.loop.stop)
        self._thread.join(timeout=5.0)
        if not self.loop.is_running():
            self.loop.close()

    @staticmethod
    def _log_failure(future: Future):
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            logger.error(f"Background task failed: {error}", exc_info=error)
