"""Pydantic models (schemas) for the application."""

from empty_queue.models.enums import BlockType, TaskQueue, TaskStatus
from empty_queue.models.task import Task, TaskAssignmentUpdate, TaskCreate
from empty_queue.models.schedule import (
    AssignTaskRequest,
    BlockInstance,
    DayView,
    OneOffRecurrence,
    ScheduleBlock,
    ScheduleBlockCreate,
    ScheduleBlockUpdate,
    WeeklyRecurrence,
)

__all__ = [
    # Enums
    "BlockType",
    "TaskQueue",
    "TaskStatus",
    # Task
    "Task",
    "TaskCreate",
    "TaskAssignmentUpdate",
    # Schedule
    "ScheduleBlock",
    "ScheduleBlockCreate",
    "ScheduleBlockUpdate",
    "WeeklyRecurrence",
    "OneOffRecurrence",
    "BlockInstance",
    "DayView",
    "AssignTaskRequest",
]
