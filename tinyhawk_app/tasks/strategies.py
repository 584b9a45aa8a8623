"""
Background task executors using Strategy Pattern.

Click recording is fire-and-forget: the redirect hands a coroutine to
an executor and returns. Every coroutine runs inside an error boundary
that logs and swallows failures, so background work can never reach a
response or crash the process.

- AsyncioTaskExecutor: detached asyncio tasks (production)
- InlineTaskExecutor: awaits each task in submit() (tests, deterministic)
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from typing import Any, Coroutine, Set

logger = logging.getLogger(__name__)


async def run_guarded(coro: Coroutine[Any, Any, Any], name: str) -> None:
    """Await ``coro``; log and swallow anything it raises except cancellation."""
    try:
        await coro
    except asyncio.CancelledError:
        logger.info("Background task %s cancelled", name)
        raise
    except Exception:
        logger.exception("Background task %s failed", name)


class TaskExecutor(ABC):
    """Abstract base class for background executors."""

    @abstractmethod
    async def submit(self, coro: Coroutine[Any, Any, Any], name: str = "background") -> None:
        """
        Hand a coroutine to the executor.

        Args:
            coro: Coroutine to run; the executor takes ownership
            name: Label used in logs
        """
        pass

    async def drain(self) -> None:
        """Wait until every submitted task has finished."""
        return None

    async def shutdown(self) -> None:
        """Stop accepting work and abandon anything still pending."""
        return None

    @property
    def pending(self) -> int:
        return 0


class AsyncioTaskExecutor(TaskExecutor):
    """
    Runs each coroutine as an independent asyncio task.

    Strong references are kept until a task finishes so the event loop
    cannot garbage-collect it mid-flight.
    """

    def __init__(self):
        self._tasks: Set[asyncio.Task] = set()
        self._closed = False

    async def submit(self, coro: Coroutine[Any, Any, Any], name: str = "background") -> None:
        if self._closed:
            logger.warning("Executor is shut down, dropping task %s", name)
            coro.close()
            return
        task = asyncio.create_task(run_guarded(coro, name), name=name)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        self._closed = True
        if not self._tasks:
            return
        logger.info("Abandoning %d pending background task(s)", len(self._tasks))
        for task in list(self._tasks):
            task.cancel()
        await asyncio.gather(*list(self._tasks), return_exceptions=True)

    @property
    def pending(self) -> int:
        return len(self._tasks)


class InlineTaskExecutor(TaskExecutor):
    """
    Awaits each coroutine before submit() returns.

    Same error boundary as the asyncio executor, so tests see the final
    state of background work without sleeping or polling.
    """

    async def submit(self, coro: Coroutine[Any, Any, Any], name: str = "background") -> None:
        await run_guarded(coro, name)
