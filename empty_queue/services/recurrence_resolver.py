"""
Recurrence resolution.

Decides whether a stored block occurs on a date and materializes the
occurrence as a BlockInstance. Everything here is a pure function of its
arguments.
"""

from __future__ import annotations

from datetime import date, datetime, tzinfo
from typing import Iterable, Sequence

from empty_queue.core.logger import setup_logger
from empty_queue.models.schedule import (
    BlockInstance,
    OneOffRecurrence,
    ScheduleBlock,
    WeeklyRecurrence,
)
from empty_queue.models.task import Task
from empty_queue.utils.datetime_utils import (
    UTC,
    at_minute,
    day_bounds,
    ensure_utc,
    minutes_between,
    to_date_key,
)
from empty_queue.utils.minutes import (
    DEFAULT_BLOCK_DURATION_MINUTES,
    DEFAULT_BLOCK_START_MINUTE,
    clamp_range,
    is_finite_minute,
)

logger = setup_logger(__name__)


def applies(block: ScheduleBlock, day: date, tz: tzinfo = UTC) -> bool:
    """Return True if the block occurs on ``day``."""
    recurrence = block.recurrence
    if isinstance(recurrence, OneOffRecurrence):
        day_start, day_end = day_bounds(day, tz)
        return ensure_utc(recurrence.start) < day_end and ensure_utc(recurrence.end) > day_start

    if isinstance(recurrence, WeeklyRecurrence):
        if not recurrence.days_of_week:
            return True
        return day.weekday() in recurrence.days_of_week

    return False


def resolve_minute_range(block: ScheduleBlock, day: date, tz: tzinfo = UTC) -> tuple[int, int]:
    """
    Resolve the block's minute range on ``day``.

    Order of preference: stored minute fields, then the one-off timestamps
    projected onto ``day``, then the 09:00 / 60 minute default window.
    The result is always clamped.
    """
    start = block.start_minute_of_day
    end = block.end_minute_of_day
    if is_finite_minute(start) and is_finite_minute(end):
        return clamp_range(start, end)

    recurrence = block.recurrence
    if isinstance(recurrence, OneOffRecurrence):
        day_start, _ = day_bounds(day, tz)
        projected_start = minutes_between(day_start, recurrence.start)
        projected_end = minutes_between(day_start, recurrence.end)
        return clamp_range(projected_start, projected_end)

    logger.debug(f"Block {block.id} has no resolvable range; using default window")
    return clamp_range(
        DEFAULT_BLOCK_START_MINUTE,
        DEFAULT_BLOCK_START_MINUTE + DEFAULT_BLOCK_DURATION_MINUTES,
    )


def resolve_instance(
    block: ScheduleBlock,
    day: date,
    tz: tzinfo = UTC,
    tasks: Iterable[Task] = (),
) -> BlockInstance:
    """Materialize ``block`` on ``day``."""
    start_minute, end_minute = resolve_minute_range(block, day, tz)
    return BlockInstance(
        block_id=block.id,
        profile_id=block.profile_id,
        type=block.type,
        title=block.title,
        notes=block.notes,
        is_recurring=block.is_recurring,
        date_key=to_date_key(day),
        start=at_minute(day, start_minute, tz),
        end=at_minute(day, end_minute, tz),
        start_minute_of_day=start_minute,
        end_minute_of_day=end_minute,
        tasks=sort_by_scheduled_start(tasks),
    )


def resolve_instances(
    blocks: Sequence[ScheduleBlock],
    day: date,
    tz: tzinfo = UTC,
) -> list[BlockInstance]:
    """Instances of every applicable block, earliest first."""
    instances = [resolve_instance(block, day, tz) for block in blocks if applies(block, day, tz)]
    instances.sort(key=lambda instance: (instance.start_minute_of_day, instance.end_minute_of_day))
    return instances


def sort_by_scheduled_start(tasks: Iterable[Task]) -> list[Task]:
    """Order tasks by scheduled_start; tasks without one go last."""
    far_future = datetime.max.replace(tzinfo=UTC)
    return sorted(
        tasks,
        key=lambda task: ensure_utc(task.scheduled_start) if task.scheduled_start else far_future,
    )
