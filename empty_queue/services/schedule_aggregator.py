"""
Schedule aggregator.

Builds the day view: every block instance for a date with its tasks, plus
the tasks still available for scheduling.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date, datetime, tzinfo
from typing import Callable, Optional
from uuid import UUID

from empty_queue.core.logger import setup_logger
from empty_queue.interfaces.schedule_block_repository import IScheduleBlockRepository
from empty_queue.interfaces.task_repository import ITaskRepository
from empty_queue.models.enums import TaskQueue, TaskStatus
from empty_queue.models.schedule import BlockInstance, DayView
from empty_queue.models.task import Task
from empty_queue.services.recurrence_resolver import resolve_instances, sort_by_scheduled_start
from empty_queue.utils.datetime_utils import (
    UTC,
    day_bounds,
    ensure_utc,
    now_utc,
    parse_date_key,
    to_date_key,
)

logger = setup_logger(__name__)


class ScheduleAggregator:
    """Read-only composition of resolver, stores and unscheduled rules."""

    def __init__(
        self,
        block_repo: IScheduleBlockRepository,
        task_repo: ITaskRepository,
        tz: tzinfo = UTC,
        clock: Callable[[], datetime] = now_utc,
    ):
        self.block_repo = block_repo
        self.task_repo = task_repo
        self.tz = tz
        self.clock = clock

    async def build_day_view(self, profile_id: str, day: date) -> DayView:
        """Assemble instances and unscheduled tasks for ``profile_id`` on ``day``."""
        date_key = to_date_key(day)
        blocks = await self.block_repo.list_by_profile(profile_id)
        instances = resolve_instances(blocks, day, self.tz)

        assigned = await self.task_repo.list_assigned_for_date(profile_id, date_key)
        by_block: dict[UUID, list[Task]] = defaultdict(list)
        for task in assigned:
            by_block[task.scheduled_block_id].append(task)
        for instance in instances:
            instance.tasks = sort_by_scheduled_start(by_block.get(instance.block_id, []))

        unscheduled = await self._unscheduled(profile_id)
        logger.debug(
            f"Day view {profile_id} {date_key}: {len(instances)} instance(s), "
            f"{len(assigned)} assigned, {len(unscheduled)} unscheduled"
        )
        view = DayView(date_key=date_key, instances=instances, unscheduled=unscheduled)
        running = current_instance(view, self.clock(), self.tz)
        if running is not None:
            view.current_block_id = running.block_id
        return view

    async def _unscheduled(self, profile_id: str) -> list[Task]:
        """
        Pending deep tasks (all of them, even when placed) followed by pending
        admin tasks that have no block.
        """
        pending = await self.task_repo.list_by_profile(profile_id, status=TaskStatus.PENDING)
        deep = [task for task in pending if task.queue == TaskQueue.DEEP]
        admin = [
            task
            for task in pending
            if task.queue == TaskQueue.ADMIN and task.scheduled_block_id is None
        ]
        return deep + admin


def current_instance(view: DayView, now: datetime, tz: tzinfo = UTC) -> Optional[BlockInstance]:
    """
    The instance running at ``now``, if ``now`` falls on the view's day.

    Boundaries are half-open: an instance ending at 10:00 is not current at 10:00.
    """
    day_start, day_end = day_bounds(parse_date_key(view.date_key), tz)
    now = ensure_utc(now)
    if not (day_start <= now < day_end):
        return None
    for instance in view.instances:
        if ensure_utc(instance.start) <= now < ensure_utc(instance.end):
            return instance
    return None
