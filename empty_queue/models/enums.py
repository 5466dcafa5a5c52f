"""
Enum definitions for the application.

These enums are used across models and provide type-safe status/mode values.
Values are lowercase because they travel over the wire unchanged.
"""

from enum import Enum


class BlockType(str, Enum):
    """
    Work mode of a schedule block.

    DEEP = focus block, holds at most one task per day
    ADMIN = batch block, holds any number of tasks
    """

    DEEP = "deep"
    ADMIN = "admin"


class TaskQueue(str, Enum):
    """Queue a task belongs to."""

    DEEP = "deep"
    ADMIN = "admin"


class TaskStatus(str, Enum):
    """Task status."""

    PENDING = "pending"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    ARCHIVED = "archived"


class ResizeEdge(str, Enum):
    """Block edge grabbed by a resize handle."""

    START = "start"
    END = "end"


class ResizeStatus(str, Enum):
    """Outcome of a finished resize interaction."""

    UNCHANGED = "unchanged"
    COMMITTED = "committed"
    FAILED = "failed"
    CANCELLED = "cancelled"
