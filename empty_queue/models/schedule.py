"""
Schedule block models.

A block is a persisted time window with a work mode. It either repeats
weekly or happens once; an instance is the derived occurrence of a block on
one calendar date.
"""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Literal, Optional, Union
from uuid import UUID

from pydantic import BaseModel, Field, computed_field, field_validator, model_validator

from empty_queue.models.enums import BlockType
from empty_queue.models.task import Task
from empty_queue.utils.datetime_utils import ensure_utc


class WeeklyRecurrence(BaseModel):
    """Repeats every week on the listed weekdays (every day if none listed)."""

    kind: Literal["weekly"] = "weekly"
    days_of_week: Optional[list[int]] = Field(
        None, description="0=Monday ... 6=Sunday; empty or null means every day"
    )

    @field_validator("days_of_week")
    @classmethod
    def validate_days(cls, value: Optional[list[int]]) -> Optional[list[int]]:
        if value is None:
            return None
        for day in value:
            if day < 0 or day > 6:
                raise ValueError("days_of_week entries must be between 0 and 6")
        return sorted(set(value))


class OneOffRecurrence(BaseModel):
    """Happens once, on the days overlapped by [start, end)."""

    kind: Literal["one_off"] = "one_off"
    start: datetime
    end: datetime

    @field_validator("start", "end")
    @classmethod
    def normalize_utc(cls, value: datetime) -> datetime:
        """Naive timestamps are UTC."""
        return ensure_utc(value)

    @model_validator(mode="after")
    def validate_order(self):
        if self.end <= self.start:
            raise ValueError("end must be after start")
        return self


Recurrence = Annotated[
    Union[WeeklyRecurrence, OneOffRecurrence],
    Field(discriminator="kind"),
]


class ScheduleBlockBase(BaseModel):
    """Base block fields shared across create/read."""

    type: BlockType
    title: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = Field(None, max_length=2000)


class ScheduleBlockCreate(ScheduleBlockBase):
    """Schema for creating a block."""

    start_minute_of_day: Optional[int] = None
    end_minute_of_day: Optional[int] = None
    recurrence: Recurrence = Field(default_factory=WeeklyRecurrence)

    @field_validator("title", "notes")
    @classmethod
    def strip_text(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        return value.strip() or None

    @model_validator(mode="after")
    def validate_minutes(self):
        has_start = self.start_minute_of_day is not None
        has_end = self.end_minute_of_day is not None
        if has_start != has_end:
            raise ValueError("start_minute_of_day and end_minute_of_day go together")
        if not has_start and isinstance(self.recurrence, WeeklyRecurrence):
            raise ValueError("recurring blocks need start_minute_of_day and end_minute_of_day")
        return self


class ScheduleBlockUpdate(BaseModel):
    """Schema for updating a block. Minute fields are written as a pair."""

    type: Optional[BlockType] = None
    title: Optional[str] = Field(None, max_length=200)
    notes: Optional[str] = Field(None, max_length=2000)
    start_minute_of_day: Optional[int] = None
    end_minute_of_day: Optional[int] = None
    recurrence: Optional[Recurrence] = None

    @model_validator(mode="after")
    def validate_minutes(self):
        if (self.start_minute_of_day is None) != (self.end_minute_of_day is None):
            raise ValueError("start_minute_of_day and end_minute_of_day go together")
        return self


class ScheduleBlock(ScheduleBlockBase):
    """Persisted block."""

    id: UUID
    profile_id: str
    start_minute_of_day: Optional[int] = Field(
        None, description="Minutes since midnight; null on legacy rows"
    )
    end_minute_of_day: Optional[int] = None
    recurrence: Recurrence = Field(default_factory=WeeklyRecurrence)
    created_at: datetime
    updated_at: datetime

    @computed_field
    @property
    def is_recurring(self) -> bool:
        return isinstance(self.recurrence, WeeklyRecurrence)


class BlockInstance(BaseModel):
    """Occurrence of a block on one calendar date. Never persisted."""

    block_id: UUID
    profile_id: str
    type: BlockType
    title: Optional[str] = None
    notes: Optional[str] = None
    is_recurring: bool
    date_key: str
    start: datetime
    end: datetime
    start_minute_of_day: int
    end_minute_of_day: int
    tasks: list[Task] = Field(default_factory=list)

    @computed_field
    @property
    def duration_minutes(self) -> int:
        return self.end_minute_of_day - self.start_minute_of_day


class DayView(BaseModel):
    """Everything the schedule screen needs for one day."""

    date_key: str
    instances: list[BlockInstance] = Field(default_factory=list)
    unscheduled: list[Task] = Field(default_factory=list)
    current_block_id: Optional[UUID] = Field(
        None, description="Block running right now; only set when the view is for today"
    )


class AssignTaskRequest(BaseModel):
    """Body of an assignment request."""

    task_id: UUID
    start: Optional[datetime] = None
    end: Optional[datetime] = None
    date_key: Optional[str] = None
