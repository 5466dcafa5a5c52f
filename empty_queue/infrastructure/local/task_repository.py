"""
SQLite implementation of Task repository.
"""

from __future__ import annotations

from datetime import tzinfo
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import and_, or_, select, update

from empty_queue.core.exceptions import NotFoundError
from empty_queue.infrastructure.local.database import TaskORM, get_session_factory, utcnow_naive
from empty_queue.interfaces.task_repository import ITaskRepository
from empty_queue.models.enums import TaskQueue, TaskStatus
from empty_queue.models.task import Task, TaskAssignmentUpdate, TaskCreate
from empty_queue.utils.datetime_utils import (
    UTC,
    day_bounds,
    ensure_utc,
    parse_date_key,
    to_naive_utc,
)


class SqliteTaskRepository(ITaskRepository):
    """SQLite implementation of task repository."""

    def __init__(self, session_factory=None, tz: tzinfo = UTC):
        """
        Initialize repository.

        Args:
            session_factory: Optional session factory (for testing)
            tz: Timezone that defines calendar days for legacy matching
        """
        self._session_factory = session_factory or get_session_factory()
        self._tz = tz

    def _orm_to_model(self, orm: TaskORM) -> Task:
        """Convert ORM object to Pydantic model."""
        return Task(
            id=UUID(orm.id),
            profile_id=orm.profile_id,
            title=orm.title,
            description=orm.description,
            queue=TaskQueue(orm.queue),
            status=TaskStatus(orm.status),
            order=orm.order or 0,
            scheduled_block_id=UUID(orm.scheduled_block_id) if orm.scheduled_block_id else None,
            scheduled_start=ensure_utc(orm.scheduled_start),
            scheduled_end=ensure_utc(orm.scheduled_end),
            scheduled_date_key=orm.scheduled_date_key or None,
            created_at=ensure_utc(orm.created_at),
            updated_at=ensure_utc(orm.updated_at),
        )

    def _assigned_on_date_clause(self, date_key: str):
        """SQL form of ``is_assigned_on_date``."""
        day_start, day_end = day_bounds(parse_date_key(date_key), self._tz)
        no_key = or_(TaskORM.scheduled_date_key.is_(None), TaskORM.scheduled_date_key == "")
        return and_(
            TaskORM.scheduled_block_id.is_not(None),
            or_(
                TaskORM.scheduled_date_key == date_key,
                and_(
                    no_key,
                    TaskORM.scheduled_start >= to_naive_utc(day_start),
                    TaskORM.scheduled_start < to_naive_utc(day_end),
                ),
                and_(
                    no_key,
                    TaskORM.scheduled_start.is_(None),
                ),
            ),
        )

    async def _get_orm(self, session, task_id: UUID) -> TaskORM:
        result = await session.execute(select(TaskORM).where(TaskORM.id == str(task_id)))
        orm = result.scalar_one_or_none()
        if not orm:
            raise NotFoundError(f"Task {task_id} not found")
        return orm

    async def create(self, task: TaskCreate) -> Task:
        """Create a new task."""
        async with self._session_factory() as session:
            orm = TaskORM(
                id=str(uuid4()),
                profile_id=task.profile_id,
                title=task.title,
                description=task.description,
                queue=task.queue.value,
                status=task.status.value,
                order=task.order,
                scheduled_block_id=str(task.scheduled_block_id) if task.scheduled_block_id else None,
                scheduled_start=to_naive_utc(task.scheduled_start),
                scheduled_end=to_naive_utc(task.scheduled_end),
                scheduled_date_key=task.scheduled_date_key,
            )
            session.add(orm)
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def get(self, task_id: UUID) -> Optional[Task]:
        """Get a task by ID."""
        async with self._session_factory() as session:
            result = await session.execute(select(TaskORM).where(TaskORM.id == str(task_id)))
            orm = result.scalar_one_or_none()
            return self._orm_to_model(orm) if orm else None

    async def list_by_profile(
        self,
        profile_id: str,
        status: Optional[TaskStatus] = None,
        queue: Optional[TaskQueue] = None,
    ) -> list[Task]:
        """List a profile's tasks."""
        async with self._session_factory() as session:
            conditions = [TaskORM.profile_id == profile_id]
            if status is not None:
                conditions.append(TaskORM.status == status.value)
            if queue is not None:
                conditions.append(TaskORM.queue == queue.value)

            query = (
                select(TaskORM)
                .where(and_(*conditions))
                .order_by(TaskORM.order.asc(), TaskORM.created_at.asc())
            )
            result = await session.execute(query)
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def list_assigned_for_date(self, profile_id: str, date_key: str) -> list[Task]:
        """List tasks placed in any block on the given day."""
        async with self._session_factory() as session:
            query = (
                select(TaskORM)
                .where(
                    and_(
                        TaskORM.profile_id == profile_id,
                        self._assigned_on_date_clause(date_key),
                    )
                )
                .order_by(TaskORM.scheduled_start.asc())
            )
            result = await session.execute(query)
            return [self._orm_to_model(orm) for orm in result.scalars().all()]

    async def update_assignment(self, task_id: UUID, assignment: TaskAssignmentUpdate) -> Task:
        """Set the four assignment fields in one commit."""
        async with self._session_factory() as session:
            orm = await self._get_orm(session, task_id)
            orm.scheduled_block_id = str(assignment.block_id)
            orm.scheduled_start = to_naive_utc(assignment.start)
            orm.scheduled_end = to_naive_utc(assignment.end)
            orm.scheduled_date_key = assignment.date_key
            orm.updated_at = utcnow_naive()
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def clear_assignment(self, task_id: UUID) -> Task:
        """Clear the four assignment fields in one commit."""
        async with self._session_factory() as session:
            orm = await self._get_orm(session, task_id)
            orm.scheduled_block_id = None
            orm.scheduled_start = None
            orm.scheduled_end = None
            orm.scheduled_date_key = None
            orm.updated_at = utcnow_naive()
            await session.commit()
            await session.refresh(orm)
            return self._orm_to_model(orm)

    async def clear_block_assignments(self, block_id: UUID) -> int:
        """Clear assignments pointing at a block."""
        async with self._session_factory() as session:
            cleared = await unassign_block_tasks(session, block_id)
            await session.commit()
            return cleared


async def unassign_block_tasks(session, block_id: UUID) -> int:
    """
    Clear the assignment fields of every task placed in a block.

    Runs inside the caller's session; the caller commits.
    """
    result = await session.execute(
        update(TaskORM)
        .where(TaskORM.scheduled_block_id == str(block_id))
        .values(
            scheduled_block_id=None,
            scheduled_start=None,
            scheduled_end=None,
            scheduled_date_key=None,
            updated_at=utcnow_naive(),
        )
    )
    return result.rowcount or 0
