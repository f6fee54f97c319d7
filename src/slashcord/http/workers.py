from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Optional, Protocol, TypeVar

from slashcord.errors import ClientClosedError

logger = logging.getLogger(__name__)

T = TypeVar("T")

Work = Callable[[], Awaitable[T]]

_Item = Optional[tuple[Callable[[], Awaitable[Any]], "asyncio.Future[Any]"]]


class WorkerContext(Protocol):
    """
    Where request work runs.

    The executor only submits units of work and gets futures back; ordering guarantees
    belong to the concrete context.
    """

    def submit(self, work: Work[T]) -> asyncio.Future[T]:
        """Queue ``work`` and return a future resolved with its result or exception."""

    async def shutdown(self, *, wait: bool = True) -> None:
        """Stop accepting work. With ``wait`` queued work still completes."""


class QueueWorkerPool:
    """
    An asyncio queue drained by a fixed number of worker tasks.

    With the default single worker, work runs strictly in submission order and never
    overlaps. With more workers there is no ordering across submissions; callers that
    need ordering must await one future before submitting the next.

    Must be used from a running event loop; the queue and workers are created on the
    first submit and stay bound to that loop.
    """

    def __init__(self, workers: int = 1) -> None:
        if workers < 1:
            raise ValueError(f"workers must be at least 1, got {workers}")
        self._worker_count = workers
        self._queue: Optional[asyncio.Queue[_Item]] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._tasks: list[asyncio.Task[None]] = []
        self._closed = False

    @property
    def workers(self) -> int:
        return self._worker_count

    @property
    def closed(self) -> bool:
        return self._closed

    def submit(self, work: Work[T]) -> asyncio.Future[T]:
        if self._closed:
            raise ClientClosedError("Worker pool is shut down; no new work is accepted.")
        loop = asyncio.get_running_loop()
        if self._loop is not None and self._loop is not loop:
            raise RuntimeError("Worker pool is bound to another event loop; create a new client for this one.")
        queue = self._ensure_started(loop)
        future: asyncio.Future[T] = loop.create_future()
        queue.put_nowait((work, future))
        return future

    def _ensure_started(self, loop: asyncio.AbstractEventLoop) -> asyncio.Queue[_Item]:
        if self._queue is None:
            self._loop = loop
            self._queue = asyncio.Queue()
            self._tasks = [
                loop.create_task(self._run(self._queue), name=f"slashcord-worker-{index}")
                for index in range(self._worker_count)
            ]
            logger.debug("http.workers_started count=%s", self._worker_count)
        return self._queue

    async def _run(self, queue: asyncio.Queue[_Item]) -> None:
        while True:
            item = await queue.get()
            try:
                if item is None:
                    return
                work, future = item
                if future.done():
                    # Cancelled by the caller before it started.
                    continue
                await self._settle(work, future)
            finally:
                queue.task_done()

    @staticmethod
    async def _settle(work: Callable[[], Awaitable[Any]], future: asyncio.Future[Any]) -> None:
        # The work gets its own task so a failure's traceback never references this worker's frame.
        async def call() -> Any:
            return await work()

        task = asyncio.ensure_future(call())
        try:
            await asyncio.wait((task,))
        except asyncio.CancelledError:
            task.cancel()
            future.cancel()
            await asyncio.wait((task,))
            raise

        if task.cancelled():
            future.cancel()
            return
        exc = task.exception()
        if future.done():
            return
        if exc is not None:
            future.set_exception(exc)
        else:
            future.set_result(task.result())

    async def shutdown(self, *, wait: bool = True) -> None:
        if self._closed and not self._tasks:
            return
        self._closed = True
        tasks, self._tasks = self._tasks, []
        if not tasks or self._queue is None:
            return
        if self._loop is not asyncio.get_running_loop():
            # The owning loop is gone along with its workers.
            logger.debug("http.workers_abandoned count=%s", len(tasks))
            return

        if wait:
            for _ in tasks:
                self._queue.put_nowait(None)
            await asyncio.gather(*tasks)
        else:
            while not self._queue.empty():
                item = self._queue.get_nowait()
                self._queue.task_done()
                if item is not None:
                    item[1].cancel()
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
        logger.debug("http.workers_stopped count=%s wait=%s", len(tasks), wait)
