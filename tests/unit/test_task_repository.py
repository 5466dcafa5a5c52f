"""
Unit tests for Task repository.
"""

from datetime import date, datetime, timezone
from uuid import uuid4
from zoneinfo import ZoneInfo

import pytest

from empty_queue.core.exceptions import NotFoundError
from empty_queue.infrastructure.local.task_repository import SqliteTaskRepository
from empty_queue.interfaces.task_repository import is_assigned_on_date
from empty_queue.models.enums import TaskQueue, TaskStatus
from empty_queue.models.task import Task, TaskAssignmentUpdate, TaskCreate
from empty_queue.utils.datetime_utils import day_bounds

UTC = timezone.utc
DAY_START, DAY_END = day_bounds(date(2025, 3, 10))


def _task(**overrides) -> Task:
    now = datetime(2025, 3, 1, tzinfo=UTC)
    data = dict(
        id=uuid4(),
        profile_id="profile-alice",
        title="Task",
        queue=TaskQueue.DEEP,
        scheduled_block_id=uuid4(),
        created_at=now,
        updated_at=now,
    )
    data.update(overrides)
    return Task(**data)


def test_is_assigned_on_date_matches_date_key():
    assert is_assigned_on_date(_task(scheduled_date_key="2025-03-10"), "2025-03-10", DAY_START, DAY_END)
    assert not is_assigned_on_date(_task(scheduled_date_key="2025-03-11"), "2025-03-10", DAY_START, DAY_END)


def test_date_key_wins_over_start():
    task = _task(
        scheduled_date_key="2025-03-11",
        scheduled_start=datetime(2025, 3, 10, 9, 0, tzinfo=UTC),
    )
    assert not is_assigned_on_date(task, "2025-03-10", DAY_START, DAY_END)


def test_legacy_task_matches_by_start_time():
    inside = _task(scheduled_start=datetime(2025, 3, 10, 9, 0, tzinfo=UTC))
    outside = _task(scheduled_start=datetime(2025, 3, 11, 0, 0, tzinfo=UTC))

    assert is_assigned_on_date(inside, "2025-03-10", DAY_START, DAY_END)
    assert not is_assigned_on_date(outside, "2025-03-10", DAY_START, DAY_END)


def test_legacy_task_without_start_matches_any_day():
    assert is_assigned_on_date(_task(), "2025-03-10", DAY_START, DAY_END)


def test_unassigned_task_never_matches():
    task = _task(scheduled_block_id=None, scheduled_date_key="2025-03-10")
    assert not is_assigned_on_date(task, "2025-03-10", DAY_START, DAY_END)


@pytest.mark.asyncio
async def test_create_and_get_task(task_repo, profile_id):
    """Test creating a task."""
    created = await task_repo.create(
        TaskCreate(profile_id=profile_id, title="Deep work", queue=TaskQueue.DEEP)
    )

    assert created.id is not None
    assert created.status == TaskStatus.PENDING
    assert created.scheduled_block_id is None

    retrieved = await task_repo.get(created.id)
    assert retrieved is not None
    assert retrieved.title == "Deep work"
    assert await task_repo.get(uuid4()) is None


@pytest.mark.asyncio
async def test_list_by_profile_filters(task_repo, profile_id, other_profile_id):
    """Test listing tasks with status and queue filters."""
    await task_repo.create(TaskCreate(profile_id=profile_id, title="B", queue=TaskQueue.DEEP, order=1))
    await task_repo.create(TaskCreate(profile_id=profile_id, title="A", queue=TaskQueue.DEEP, order=0))
    await task_repo.create(TaskCreate(profile_id=profile_id, title="Mail", queue=TaskQueue.ADMIN))
    await task_repo.create(
        TaskCreate(profile_id=profile_id, title="Done", queue=TaskQueue.DEEP, status=TaskStatus.COMPLETED)
    )
    await task_repo.create(TaskCreate(profile_id=other_profile_id, title="Other", queue=TaskQueue.DEEP))

    deep_pending = await task_repo.list_by_profile(
        profile_id, status=TaskStatus.PENDING, queue=TaskQueue.DEEP
    )
    assert [t.title for t in deep_pending] == ["A", "B"]

    everything = await task_repo.list_by_profile(profile_id)
    assert len(everything) == 4


@pytest.mark.asyncio
async def test_list_assigned_for_date_applies_both_matching_rules(task_repo, profile_id):
    """Date-keyed and legacy rows are returned by the same rule as is_assigned_on_date."""
    block_id = uuid4()

    def create(title, **fields):
        return task_repo.create(
            TaskCreate(profile_id=profile_id, title=title, queue=TaskQueue.DEEP, **fields)
        )

    await create(
        "keyed",
        scheduled_block_id=block_id,
        scheduled_start=datetime(2025, 3, 10, 9, 0, tzinfo=UTC),
        scheduled_date_key="2025-03-10",
    )
    await create(
        "keyed other day",
        scheduled_block_id=block_id,
        scheduled_start=datetime(2025, 3, 10, 9, 0, tzinfo=UTC),
        scheduled_date_key="2025-03-11",
    )
    await create(
        "legacy inside",
        scheduled_block_id=block_id,
        scheduled_start=datetime(2025, 3, 10, 13, 0, tzinfo=UTC),
    )
    await create(
        "legacy outside",
        scheduled_block_id=block_id,
        scheduled_start=datetime(2025, 3, 11, 9, 0, tzinfo=UTC),
    )
    await create("legacy no start", scheduled_block_id=block_id)
    await create("unassigned", scheduled_date_key="2025-03-10")

    tasks = await task_repo.list_assigned_for_date(profile_id, "2025-03-10")

    assert {t.title for t in tasks} == {"keyed", "legacy inside", "legacy no start"}


@pytest.mark.asyncio
async def test_legacy_matching_uses_schedule_timezone(session_factory, profile_id):
    repo = SqliteTaskRepository(session_factory=session_factory, tz=ZoneInfo("Asia/Tokyo"))
    # 2025-03-10 23:30 UTC is 2025-03-11 08:30 in Tokyo
    await repo.create(
        TaskCreate(
            profile_id=profile_id,
            title="legacy",
            queue=TaskQueue.ADMIN,
            scheduled_block_id=uuid4(),
            scheduled_start=datetime(2025, 3, 10, 23, 30, tzinfo=UTC),
        )
    )

    assert await repo.list_assigned_for_date(profile_id, "2025-03-10") == []
    assert len(await repo.list_assigned_for_date(profile_id, "2025-03-11")) == 1


@pytest.mark.asyncio
async def test_update_and_clear_assignment(task_repo, profile_id):
    """Test the four assignment fields are written and cleared together."""
    task = await task_repo.create(TaskCreate(profile_id=profile_id, title="T", queue=TaskQueue.DEEP))
    block_id = uuid4()

    assigned = await task_repo.update_assignment(
        task.id,
        TaskAssignmentUpdate(
            block_id=block_id,
            start=datetime(2025, 3, 10, 9, 0, tzinfo=UTC),
            end=datetime(2025, 3, 10, 10, 0, tzinfo=UTC),
            date_key="2025-03-10",
        ),
    )
    assert assigned.scheduled_block_id == block_id
    assert assigned.scheduled_start == datetime(2025, 3, 10, 9, 0, tzinfo=UTC)
    assert assigned.scheduled_end == datetime(2025, 3, 10, 10, 0, tzinfo=UTC)
    assert assigned.scheduled_date_key == "2025-03-10"

    cleared = await task_repo.clear_assignment(task.id)
    assert cleared.scheduled_block_id is None
    assert cleared.scheduled_start is None
    assert cleared.scheduled_end is None
    assert cleared.scheduled_date_key is None


@pytest.mark.asyncio
async def test_assignment_of_missing_task_raises(task_repo):
    with pytest.raises(NotFoundError):
        await task_repo.clear_assignment(uuid4())


@pytest.mark.asyncio
async def test_clear_block_assignments(task_repo, profile_id):
    block_id = uuid4()
    for i in range(2):
        await task_repo.create(
            TaskCreate(
                profile_id=profile_id,
                title=f"T{i}",
                queue=TaskQueue.ADMIN,
                scheduled_block_id=block_id,
                scheduled_date_key="2025-03-10",
            )
        )
    keep = await task_repo.create(
        TaskCreate(
            profile_id=profile_id,
            title="Elsewhere",
            queue=TaskQueue.ADMIN,
            scheduled_block_id=uuid4(),
            scheduled_date_key="2025-03-10",
        )
    )

    touched = await task_repo.clear_block_assignments(block_id)

    assert touched == 2
    remaining = await task_repo.list_assigned_for_date(profile_id, "2025-03-10")
    assert [t.id for t in remaining] == [keep.id]
