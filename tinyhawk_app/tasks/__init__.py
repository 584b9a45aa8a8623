"""
Background task module for click recording.
Implements Strategy Pattern for flexible executors.
"""

from .strategies import TaskExecutor, AsyncioTaskExecutor, InlineTaskExecutor, run_guarded
from .factory import TaskExecutorFactory, ExecutorBackend

__all__ = [
    "TaskExecutor",
    "AsyncioTaskExecutor",
    "InlineTaskExecutor",
    "run_guarded",
    "TaskExecutorFactory",
    "ExecutorBackend",
]
