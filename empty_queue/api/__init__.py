"""API routers."""

from empty_queue.api import schedule

__all__ = [
    "schedule",
]
