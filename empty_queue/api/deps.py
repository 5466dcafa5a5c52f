"""
Dependency injection for API endpoints.

This module provides FastAPI dependencies that inject the correct
infrastructure implementations based on environment configuration.
"""

from functools import lru_cache
from typing import Annotated

from fastapi import Depends

from empty_queue.core.config import get_settings
from empty_queue.interfaces.schedule_block_repository import IScheduleBlockRepository
from empty_queue.interfaces.task_repository import ITaskRepository
from empty_queue.services.assignment_coordinator import AssignmentCoordinator
from empty_queue.services.schedule_aggregator import ScheduleAggregator


# ===========================================
# Repository Dependencies
# ===========================================


@lru_cache()
def get_schedule_block_repository() -> IScheduleBlockRepository:
    """Get schedule block repository instance."""
    settings = get_settings()
    from empty_queue.infrastructure.local.schedule_block_repository import (
        SqliteScheduleBlockRepository,
    )
    return SqliteScheduleBlockRepository(tz=settings.schedule_tz)


@lru_cache()
def get_task_repository() -> ITaskRepository:
    """Get task repository instance."""
    settings = get_settings()
    from empty_queue.infrastructure.local.task_repository import SqliteTaskRepository
    return SqliteTaskRepository(tz=settings.schedule_tz)


# ===========================================
# Service Dependencies
# ===========================================


def get_assignment_coordinator(
    block_repo: IScheduleBlockRepository = Depends(get_schedule_block_repository),
    task_repo: ITaskRepository = Depends(get_task_repository),
) -> AssignmentCoordinator:
    """Get AssignmentCoordinator instance."""
    return AssignmentCoordinator(block_repo, task_repo, tz=get_settings().schedule_tz)


def get_schedule_aggregator(
    block_repo: IScheduleBlockRepository = Depends(get_schedule_block_repository),
    task_repo: ITaskRepository = Depends(get_task_repository),
) -> ScheduleAggregator:
    """Get ScheduleAggregator instance."""
    return ScheduleAggregator(block_repo, task_repo, tz=get_settings().schedule_tz)


# ===========================================
# Type Aliases for Dependency Injection
# ===========================================

BlockRepo = Annotated[IScheduleBlockRepository, Depends(get_schedule_block_repository)]
Coordinator = Annotated[AssignmentCoordinator, Depends(get_assignment_coordinator)]
Aggregator = Annotated[ScheduleAggregator, Depends(get_schedule_aggregator)]
