"""
Task repository interface.

Defines the contract for task persistence operations used by the schedule
engine. Implementations: SQLite
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional
from uuid import UUID

from empty_queue.models.enums import TaskQueue, TaskStatus
from empty_queue.models.task import Task, TaskAssignmentUpdate, TaskCreate
from empty_queue.utils.datetime_utils import ensure_utc


def is_assigned_on_date(
    task: Task,
    date_key: str,
    day_start: datetime,
    day_end: datetime,
) -> bool:
    """
    Decide whether an assigned task belongs to the given day.

    A task matches when any of these holds:
    - its scheduled_date_key equals ``date_key``;
    - it has no date key (legacy row) and scheduled_start falls in
      [day_start, day_end);
    - it has neither a date key nor a scheduled_start (fully legacy row).

    The two legacy branches can be dropped once every row carries a date key.
    """
    if task.scheduled_block_id is None:
        return False
    if task.scheduled_date_key:
        return task.scheduled_date_key == date_key
    if task.scheduled_start is None:
        return True
    start = ensure_utc(task.scheduled_start)
    return day_start <= start < day_end


class ITaskRepository(ABC):
    """Abstract interface for task persistence."""

    @abstractmethod
    async def create(self, task: TaskCreate) -> Task:
        """
        Create a new task.

        Task CRUD belongs to the surrounding application; this exists so that
        collaborators and fixtures can seed the store.
        """
        pass

    @abstractmethod
    async def get(self, task_id: UUID) -> Optional[Task]:
        """
        Get a task by ID.

        Returns:
            Task if found, None otherwise
        """
        pass

    @abstractmethod
    async def list_by_profile(
        self,
        profile_id: str,
        status: Optional[TaskStatus] = None,
        queue: Optional[TaskQueue] = None,
    ) -> list[Task]:
        """List a profile's tasks ordered by queue position, then creation time."""
        pass

    @abstractmethod
    async def list_assigned_for_date(self, profile_id: str, date_key: str) -> list[Task]:
        """
        List tasks placed in any block on the given day.

        Must apply the same rule as ``is_assigned_on_date``.
        """
        pass

    @abstractmethod
    async def update_assignment(self, task_id: UUID, assignment: TaskAssignmentUpdate) -> Task:
        """
        Set the four assignment fields in one write.

        Raises:
            NotFoundError: If the task does not exist
        """
        pass

    @abstractmethod
    async def clear_assignment(self, task_id: UUID) -> Task:
        """
        Clear the four assignment fields in one write.

        Raises:
            NotFoundError: If the task does not exist
        """
        pass

    @abstractmethod
    async def clear_block_assignments(self, block_id: UUID) -> int:
        """Clear assignments pointing at a block. Returns the number of tasks touched."""
        pass
