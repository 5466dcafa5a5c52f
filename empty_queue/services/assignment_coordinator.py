"""
Assignment coordinator.

Places a task into a block instance (or takes it out again), deriving the
instance window and date key and enforcing ownership and deep-block
occupancy before anything is written.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Callable, Optional
from uuid import UUID

from empty_queue.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from empty_queue.core.logger import setup_logger
from empty_queue.interfaces.schedule_block_repository import IScheduleBlockRepository
from empty_queue.interfaces.task_repository import ITaskRepository
from empty_queue.models.enums import BlockType
from empty_queue.models.schedule import ScheduleBlock
from empty_queue.models.task import Task, TaskAssignmentUpdate
from empty_queue.services.conflict_guard import ConflictGuard
from empty_queue.services.recurrence_resolver import resolve_instance
from empty_queue.utils.datetime_utils import (
    UTC,
    ensure_utc,
    local_date,
    normalize_date_key,
    now_utc,
    to_date_key,
)

logger = setup_logger(__name__)


class AssignmentCoordinator:
    """Orchestrates assign/unassign of tasks to block instances."""

    def __init__(
        self,
        block_repo: IScheduleBlockRepository,
        task_repo: ITaskRepository,
        tz: tzinfo = UTC,
        clock: Callable[[], datetime] = now_utc,
        guard: Optional[ConflictGuard] = None,
    ):
        self.block_repo = block_repo
        self.task_repo = task_repo
        self.tz = tz
        self.clock = clock
        self.guard = guard or ConflictGuard(task_repo)

    async def assign(
        self,
        block_id: UUID,
        task_id: UUID,
        explicit_start: Optional[datetime] = None,
        explicit_end: Optional[datetime] = None,
        explicit_date_key: Optional[str] = None,
    ) -> Task:
        """
        Assign a task to the instance of a block.

        Raises:
            NotFoundError: If the block or the task does not exist
            ForbiddenError: If task and block belong to different profiles
            ConflictError: If the deep instance already holds a pending task
        """
        block = await self.block_repo.get(block_id)
        if not block:
            raise NotFoundError(f"ScheduleBlock {block_id} not found")
        task = await self.task_repo.get(task_id)
        if not task:
            raise NotFoundError(f"Task {task_id} not found")

        if task.profile_id != block.profile_id:
            raise ForbiddenError(
                "Task and block belong to different profiles",
                details={"task_profile_id": task.profile_id, "block_profile_id": block.profile_id},
            )

        start, end = self._resolve_window(block, task, explicit_start, explicit_end)
        date_key = normalize_date_key(explicit_date_key) or to_date_key(start, self.tz)

        if block.type == BlockType.DEEP:
            occupied = await self.guard.check_deep_occupancy(block, date_key, excluding_task_id=task.id)
            if occupied:
                logger.warning(f"Rejected task {task.id}: deep block {block.id} is taken on {date_key}")
                raise ConflictError(
                    "This deep work block already has a task for that day",
                    details={"block_id": str(block.id), "date_key": date_key},
                )

        updated = await self.task_repo.update_assignment(
            task.id,
            TaskAssignmentUpdate(block_id=block.id, start=start, end=end, date_key=date_key),
        )
        logger.info(f"Assigned task {task.id} to block {block.id} on {date_key}")
        return updated

    async def unassign(self, task_id: UUID) -> Task:
        """
        Clear a task's assignment. Unassigning an unassigned task is a no-op.

        Raises:
            NotFoundError: If the task does not exist
        """
        task = await self.task_repo.get(task_id)
        if not task:
            raise NotFoundError(f"Task {task_id} not found")

        cleared = await self.task_repo.clear_assignment(task.id)
        if task.is_scheduled:
            logger.info(f"Unassigned task {task.id} from block {task.scheduled_block_id}")
        return cleared

    def _resolve_window(
        self,
        block: ScheduleBlock,
        task: Task,
        explicit_start: Optional[datetime],
        explicit_end: Optional[datetime],
    ) -> tuple[datetime, datetime]:
        """Explicit window when valid, otherwise the block instance on the reference date."""
        explicit_start = ensure_utc(explicit_start)
        explicit_end = ensure_utc(explicit_end)
        if explicit_start and explicit_end and explicit_end > explicit_start:
            return explicit_start, explicit_end

        reference = task.scheduled_start or explicit_start or self.clock()
        instance = resolve_instance(block, local_date(reference, self.tz), self.tz)
        return instance.start, instance.end
