"""
Factory for creating background task executors.
"""

import logging
from enum import Enum

from .strategies import TaskExecutor, AsyncioTaskExecutor, InlineTaskExecutor

logger = logging.getLogger(__name__)


class ExecutorBackend(Enum):
    """Available executor backends"""
    ASYNCIO = "asyncio"
    INLINE = "inline"


class TaskExecutorFactory:
    """Simple factory for creating executor instances."""

    @classmethod
    def create(cls, backend: ExecutorBackend) -> TaskExecutor:
        """
        Create an executor.

        Args:
            backend: Type of executor (from enum)

        Returns:
            TaskExecutor instance
        """
        if backend == ExecutorBackend.ASYNCIO:
            logger.info("Asyncio task executor initialized")
            return AsyncioTaskExecutor()

        if backend == ExecutorBackend.INLINE:
            logger.info("Inline task executor initialized")
            return InlineTaskExecutor()

        raise ValueError(f"Unknown executor backend: {backend}")
