"""
Task model definitions.

Only the fields the schedule engine reads or writes are modelled here; the
rest of the task lifecycle (completion rewards, reordering) lives elsewhere.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, Field

from empty_queue.models.enums import TaskQueue, TaskStatus


class TaskBase(BaseModel):
    """Base task fields shared across create/read."""

    title: str = Field(..., min_length=1, max_length=500, description="Task title")
    description: Optional[str] = Field(None, max_length=2000)
    queue: TaskQueue = Field(..., description="deep or admin queue")
    order: int = Field(0, description="Position within the queue")


class TaskCreate(TaskBase):
    """Schema for creating a task (used by collaborators and fixtures)."""

    profile_id: str = Field(..., min_length=1, description="Assigned household profile")
    status: TaskStatus = TaskStatus.PENDING
    scheduled_block_id: Optional[UUID] = None
    scheduled_start: Optional[datetime] = None
    scheduled_end: Optional[datetime] = None
    scheduled_date_key: Optional[str] = None


class TaskAssignmentUpdate(BaseModel):
    """The four assignment fields, always written together."""

    block_id: UUID
    start: datetime
    end: datetime
    date_key: str = Field(..., pattern=r"^\d{4}-\d{2}-\d{2}$")


class Task(TaskBase):
    """Complete task model with scheduling fields."""

    id: UUID
    profile_id: str = Field(..., description="Assigned household profile")
    status: TaskStatus = Field(TaskStatus.PENDING)
    scheduled_block_id: Optional[UUID] = Field(
        None, description="Block the task is placed in (weak reference)"
    )
    scheduled_start: Optional[datetime] = None
    scheduled_end: Optional[datetime] = None
    scheduled_date_key: Optional[str] = Field(
        None, description="YYYY-MM-DD; missing on legacy records"
    )
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

    @property
    def is_pending(self) -> bool:
        return self.status == TaskStatus.PENDING

    @property
    def is_scheduled(self) -> bool:
        return self.scheduled_block_id is not None
