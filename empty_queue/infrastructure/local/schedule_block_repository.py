"""
SQLite implementation of schedule block repository.
"""

from __future__ import annotations

from datetime import tzinfo
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import select

from empty_queue.core.exceptions import NotFoundError
from empty_queue.core.logger import setup_logger
from empty_queue.infrastructure.local.database import (
    ScheduleBlockORM,
    get_session_factory,
    utcnow_naive,
)
from empty_queue.infrastructure.local.task_repository import unassign_block_tasks
from empty_queue.interfaces.schedule_block_repository import IScheduleBlockRepository
from empty_queue.models.enums import BlockType
from empty_queue.models.schedule import (
    OneOffRecurrence,
    ScheduleBlock,
    ScheduleBlockCreate,
    ScheduleBlockUpdate,
    WeeklyRecurrence,
)
from empty_queue.services.conflict_guard import validate_minute_range
from empty_queue.utils.datetime_utils import (
    UTC,
    at_minute,
    day_bounds,
    ensure_utc,
    local_date,
    minutes_between,
    to_naive_utc,
)

logger = setup_logger(__name__)


class SqliteScheduleBlockRepository(IScheduleBlockRepository):
    """SQLite implementation of schedule block repository."""

    def __init__(self, session_factory=None, tz: tzinfo = UTC):
        self._session_factory = session_factory or get_session_factory()
        self._tz = tz

    def _orm_to_model(self, orm: ScheduleBlockORM) -> ScheduleBlock:
        """Convert ORM object to Pydantic model."""
        if orm.is_recurring:
            recurrence = WeeklyRecurrence(days_of_week=orm.days_of_week or None)
        else:
            recurrence = OneOffRecurrence(start=ensure_utc(orm.start), end=ensure_utc(orm.end))
        return ScheduleBlock(
            id=UUID(orm.id),
            profile_id=orm.profile_id,
            type=BlockType(orm.type),
            title=orm.title,
            notes=orm.notes,
            start_minute_of_day=orm.start_minute_of_day,
            end_minute_of_day=orm.end_minute_of_day,
            recurrence=recurrence,
            created_at=ensure_utc(orm.created_at),
            updated_at=ensure_utc(orm.updated_at),
        )

    def _project_one_off(self, recurrence: OneOffRecurrence) -> tuple[float, float]:
        """Minutes of a one-off block relative to the local day it starts on."""
        day_start, _ = day_bounds(local_date(recurrence.start, self._tz), self._tz)
        return (
            minutes_between(day_start, recurrence.start),
            minutes_between(day_start, recurrence.end),
        )

    def _apply_recurrence(self, orm: ScheduleBlockORM, recurrence) -> None:
        if isinstance(recurrence, OneOffRecurrence):
            orm.is_recurring = False
            orm.days_of_week = None
            orm.start = to_naive_utc(recurrence.start)
            orm.end = to_naive_utc(recurrence.end)
        else:
            orm.is_recurring = True
            orm.days_of_week = recurrence.days_of_week or None
            orm.start = None
            orm.end = None

    async def _get_orm(self, session, block_id: UUID) -> Optional[ScheduleBlockORM]:
        result = await session.execute(
            select(ScheduleBlockORM).where(ScheduleBlockORM.id == str(block_id))
        )
        return result.scalar_one_or_none()

    async def create(self, profile_id: str, data: ScheduleBlockCreate) -> ScheduleBlock:
        """Create a block with a validated, clamped minute range."""
        if data.start_minute_of_day is not None:
            start, end = data.start_minute_of_day, data.end_minute_of_day
        else:
            # Only one-off blocks may omit minutes (checked by the model)
            start, end = self._project_one_off(data.recurrence)
        start_minute, end_minute = validate_minute_range(start, end)

        async with self._session_factory() as session:
            orm = ScheduleBlockORM(
                id=str(uuid4()),
                profile_id=profile_id,
                type=data.type.value,
                title=data.title,
                notes=data.notes,
                start_minute_of_day=start_minute,
                end_minute_of_day=end_minute,
            )
            self._apply_recurrence(orm, data.recurrence)
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            logger.info(
                f"Created {data.type.value} block {orm.id} for {profile_id} "
                f"[{start_minute}, {end_minute})"
            )
            return self._orm_to_model(orm)

    async def get(self, block_id: UUID) -> Optional[ScheduleBlock]:
        """Get a block by ID."""
        async with self._session_factory() as session:
            orm = await self._get_orm(session, block_id)
            return self._orm_to_model(orm) if orm else None

    async def list_by_profile(self, profile_id: str) -> list[ScheduleBlock]:
        """List every block owned by a profile."""
        async with self._session_factory() as session:
            result = await session.execute(
                select(ScheduleBlockORM)
                .where(ScheduleBlockORM.profile_id == profile_id)
                .order_by(ScheduleBlockORM.start_minute_of_day.asc())
            )
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def update(self, block_id: UUID, update: ScheduleBlockUpdate) -> ScheduleBlock:
        """Update a block; the stored range stays valid after every write."""
        minutes: Optional[tuple[int, int]] = None
        if update.start_minute_of_day is not None:
            minutes = validate_minute_range(update.start_minute_of_day, update.end_minute_of_day)

        async with self._session_factory() as session:
            orm = await self._get_orm(session, block_id)
            if not orm:
                raise NotFoundError(f"ScheduleBlock {block_id} not found")

            if update.type is not None:
                orm.type = update.type.value
            if "title" in update.model_fields_set:
                orm.title = update.title.strip() if update.title else None
            if "notes" in update.model_fields_set:
                orm.notes = update.notes.strip() if update.notes else None

            if update.recurrence is not None:
                self._apply_recurrence(orm, update.recurrence)
                if minutes is None and isinstance(update.recurrence, OneOffRecurrence):
                    minutes = validate_minute_range(*self._project_one_off(update.recurrence))

            if minutes is not None:
                orm.start_minute_of_day, orm.end_minute_of_day = minutes
                if not orm.is_recurring and orm.start is not None:
                    # Keep one-off timestamps on the day the block already sits on
                    day = local_date(ensure_utc(orm.start), self._tz)
                    orm.start = to_naive_utc(at_minute(day, minutes[0], self._tz))
                    orm.end = to_naive_utc(at_minute(day, minutes[1], self._tz))

            orm.updated_at = utcnow_naive()
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def delete(self, block_id: UUID) -> bool:
        """Delete a block and clear task assignments pointing at it, in one commit."""
        async with self._session_factory() as session:
            orm = await self._get_orm(session, block_id)
            if not orm:
                return False

            cleared = await unassign_block_tasks(session, block_id)
            await session.delete(orm)
            await session.commit()
            logger.info(f"Deleted block {block_id}; cleared {cleared} assignment(s)")
            return True
