"""Async processor - best-effort deferred tasks off the request path."""

import asyncio
import inspect
import time
from collections.abc import Callable
from typing import Any

from loguru import logger

from carbot.errors import ValidationError, validate_seconds
from carbot.models.tasks import ScheduledTask
from settings import SCHEDULER_MAX_PENDING, SCHEDULER_MAX_WAIT


class AsyncProcessor:
    """Cooperative drain loop for delayed, fire-and-forget tasks.

    At most one drain loop runs at a time. It sleeps until the earliest
    deadline (never longer than `max_wait`) or until a new task is enqueued,
    then launches every ready task concurrently. A failing task is logged and
    dropped; it never stops the loop or its siblings. There is no retry and
    no cancellation.
    """

    def __init__(
        self,
        max_wait: float = SCHEDULER_MAX_WAIT,
        max_pending: int | None = SCHEDULER_MAX_PENDING,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_wait = max_wait
        self.max_pending = max_pending
        self._clock = clock
        self._queue: list[ScheduledTask] = []
        self._processing = False
        self._worker: asyncio.Task | None = None
        self._wakeup: asyncio.Event | None = None
        self._stats = {
            "enqueued": 0,
            "dropped": 0,
            "completed": 0,
            "failed": 0,
        }
        logger.debug("AsyncProcessor: max_wait={}s, max_pending={}", max_wait, max_pending or "unbounded")

    @property
    def processing(self) -> bool:
        return self._processing

    @property
    def pending(self) -> int:
        return len(self._queue)

    @property
    def stats(self) -> dict[str, Any]:
        return {"pending": len(self._queue), "processing": self._processing, **self._stats}

    def enqueue(self, task: Callable[[], Any], delay: float = 0.0) -> None:
        """Schedule `task` to run after `delay` seconds. Needs a running loop."""
        if not callable(task):
            raise ValidationError(f"Deferred task is not callable: {task!r}")
        validate_seconds(delay, "delay")
        loop = asyncio.get_running_loop()

        if self.max_pending is not None and len(self._queue) >= self.max_pending:
            self._stats["dropped"] += 1
            logger.warning("Deferred queue full ({}), dropping task", self.max_pending)
            return

        item = ScheduledTask(task=task, scheduled_for=self._clock() + delay)
        self._queue.append(item)
        self._stats["enqueued"] += 1
        logger.debug("Deferred task {} scheduled in {}s", item.name, delay)

        if self._processing:
            self._wakeup.set()
        else:
            self._processing = True
            self._wakeup = asyncio.Event()
            self._worker = loop.create_task(self._process_queue())

    async def join(self) -> None:
        """Wait until the pending set is drained."""
        while self._worker is not None and not self._worker.done():
            await asyncio.shield(self._worker)

    async def _process_queue(self) -> None:
        try:
            while self._queue:
                now = self._clock()
                ready = [item for item in self._queue if item.is_ready(now)]

                if not ready:
                    earliest = min(item.scheduled_for for item in self._queue)
                    self._wakeup.clear()
                    try:
                        await asyncio.wait_for(self._wakeup.wait(), timeout=min(earliest - now, self.max_wait))
                    except asyncio.TimeoutError:
                        pass
                    continue

                self._queue = [item for item in self._queue if not item.is_ready(now)]
                logger.debug("Dispatching {} deferred tasks ({} pending)", len(ready), len(self._queue))
                await asyncio.gather(*(self._run(item) for item in ready))
        finally:
            self._processing = False

    async def _run(self, item: ScheduledTask) -> None:
        try:
            result = item.task()
            if inspect.isawaitable(result):
                await result
        except asyncio.CancelledError:
            current = asyncio.current_task()
            if current is not None and current.cancelling():
                raise
            self._stats["failed"] += 1
            logger.warning("Async task {} was cancelled", item.name)
        except Exception:
            self._stats["failed"] += 1
            logger.exception("Async task {} failed", item.name)
        else:
            self._stats["completed"] += 1
