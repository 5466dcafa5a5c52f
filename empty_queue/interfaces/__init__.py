"""Abstract interfaces for infrastructure abstraction."""

from empty_queue.interfaces.schedule_block_repository import IScheduleBlockRepository
from empty_queue.interfaces.task_repository import ITaskRepository

__all__ = [
    "IScheduleBlockRepository",
    "ITaskRepository",
]
