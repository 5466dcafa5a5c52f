"""
Conflict guard.

Range validation for block writes and the one-task-per-deep-instance rule
for assignments.
"""

from __future__ import annotations

from typing import Optional
from uuid import UUID

from empty_queue.core.exceptions import ValidationError
from empty_queue.core.logger import setup_logger
from empty_queue.interfaces.task_repository import ITaskRepository
from empty_queue.models.enums import BlockType
from empty_queue.models.schedule import ScheduleBlock
from empty_queue.utils.minutes import clamp_range, is_finite_minute

logger = setup_logger(__name__)


def validate_minute_range(start: object, end: object) -> tuple[int, int]:
    """
    Validate a proposed minute range and return its clamped form.

    Raises:
        ValidationError: If a bound is missing or non-finite, or end <= start
    """
    if not is_finite_minute(start) or not is_finite_minute(end):
        raise ValidationError(
            "Block minutes must be finite numbers",
            details={"start_minute_of_day": start, "end_minute_of_day": end},
        )
    if end <= start:
        raise ValidationError(
            "Block end must be after its start",
            details={"start_minute_of_day": start, "end_minute_of_day": end},
        )
    return clamp_range(start, end)


class ConflictGuard:
    """Occupancy checks run at assignment time."""

    def __init__(self, task_repo: ITaskRepository):
        self.task_repo = task_repo

    async def check_deep_occupancy(
        self,
        block: ScheduleBlock,
        date_key: str,
        excluding_task_id: Optional[UUID] = None,
    ) -> bool:
        """
        Return True if another pending task already sits in this deep block
        on ``date_key``. Admin blocks are never occupied.
        """
        if block.type != BlockType.DEEP:
            return False

        assigned = await self.task_repo.list_assigned_for_date(block.profile_id, date_key)
        occupants = [
            task
            for task in assigned
            if task.scheduled_block_id == block.id
            and task.is_pending
            and task.id != excluding_task_id
        ]
        if occupants:
            logger.debug(
                f"Deep block {block.id} on {date_key} occupied by {[str(t.id) for t in occupants]}"
            )
        return bool(occupants)
