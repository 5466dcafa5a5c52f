"""
Unit tests for range validation and deep-block occupancy.
"""

import math
from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from empty_queue.core.exceptions import ValidationError
from empty_queue.models.enums import BlockType, TaskQueue, TaskStatus
from empty_queue.models.schedule import ScheduleBlock, WeeklyRecurrence
from empty_queue.models.task import Task
from empty_queue.services.conflict_guard import ConflictGuard, validate_minute_range

NOW = datetime(2025, 3, 10, 8, 0, tzinfo=timezone.utc)


def _block(block_type: BlockType = BlockType.DEEP) -> ScheduleBlock:
    return ScheduleBlock(
        id=uuid4(),
        profile_id="profile-alice",
        type=block_type,
        start_minute_of_day=540,
        end_minute_of_day=600,
        recurrence=WeeklyRecurrence(),
        created_at=NOW,
        updated_at=NOW,
    )


def _assigned(block: ScheduleBlock, status: TaskStatus = TaskStatus.PENDING) -> Task:
    return Task(
        id=uuid4(),
        profile_id=block.profile_id,
        title="Write report",
        queue=TaskQueue.DEEP,
        status=status,
        scheduled_block_id=block.id,
        scheduled_date_key="2025-03-10",
        created_at=NOW,
        updated_at=NOW,
    )


def test_validate_minute_range_clamps_valid_input():
    assert validate_minute_range(540, 600) == (540, 600)
    assert validate_minute_range(1430, 1500) == (1425, 1440)


@pytest.mark.parametrize(
    "start,end",
    [
        (600, 540),
        (540, 540),
        (None, 600),
        (540, math.nan),
        (math.inf, 600),
    ],
)
def test_validate_minute_range_rejects(start, end):
    with pytest.raises(ValidationError):
        validate_minute_range(start, end)


@pytest.mark.asyncio
async def test_admin_blocks_are_never_occupied():
    task_repo = AsyncMock()
    guard = ConflictGuard(task_repo)

    occupied = await guard.check_deep_occupancy(_block(BlockType.ADMIN), "2025-03-10")

    assert occupied is False
    task_repo.list_assigned_for_date.assert_not_called()


@pytest.mark.asyncio
async def test_deep_block_with_pending_task_is_occupied():
    block = _block()
    task_repo = AsyncMock()
    task_repo.list_assigned_for_date.return_value = [_assigned(block)]

    occupied = await ConflictGuard(task_repo).check_deep_occupancy(block, "2025-03-10")

    assert occupied is True
    task_repo.list_assigned_for_date.assert_awaited_once_with(block.profile_id, "2025-03-10")


@pytest.mark.asyncio
async def test_task_does_not_conflict_with_itself():
    block = _block()
    occupant = _assigned(block)
    task_repo = AsyncMock()
    task_repo.list_assigned_for_date.return_value = [occupant]

    occupied = await ConflictGuard(task_repo).check_deep_occupancy(
        block, "2025-03-10", excluding_task_id=occupant.id
    )

    assert occupied is False


@pytest.mark.asyncio
async def test_completed_or_foreign_tasks_do_not_occupy():
    block = _block()
    other_block = _block()
    task_repo = AsyncMock()
    task_repo.list_assigned_for_date.return_value = [
        _assigned(block, status=TaskStatus.COMPLETED),
        _assigned(other_block),
    ]

    occupied = await ConflictGuard(task_repo).check_deep_occupancy(block, "2025-03-10")

    assert occupied is False
