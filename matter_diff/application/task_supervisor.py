"""Background task supervisor: runs fire-and-forget work after the response, logging every failure."""

import asyncio
import logging
from typing import Awaitable, Set

logger = logging.getLogger(__name__)


class BackgroundTaskSupervisor:
    """
    Holds strong references to spawned tasks until they finish. Task exceptions are logged and
    never re-raised into the request path. With inline=True work is awaited in place instead.
    """

    def __init__(self, inline: bool = False) -> None:
        self._inline = inline
        self._tasks: Set[asyncio.Task] = set()

    @property
    def pending_count(self) -> int:
        return len(self._tasks)

    async def spawn(self, work: Awaitable, name: str) -> None:
        """Schedule work. Returns once scheduled, or once finished when running inline."""
        if self._inline:
            try:
                await work
            except Exception as e:
                logger.error("background_task_failed", extra={"task": name, "error": str(e)}, exc_info=True)
            return
        task = asyncio.create_task(work, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)

    def _on_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("background_task_cancelled", extra={"task": task.get_name()})
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "background_task_failed",
                extra={"task": task.get_name(), "error": str(exc)},
                exc_info=(type(exc), exc, exc.__traceback__),
            )

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for pending tasks; cancel whatever is still running after timeout."""
        if not self._tasks:
            return
        pending = set(self._tasks)
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
