"""
Schedule API endpoints.

Day view, block create/update/delete, and task assignment.
"""

from datetime import date
from uuid import UUID

from fastapi import APIRouter, HTTPException, Query, status

from empty_queue.api.deps import Aggregator, BlockRepo, Coordinator
from empty_queue.core.exceptions import (
    AuthorizationError,
    ConflictError,
    EmptyQueueError,
    NotFoundError,
    ValidationError,
)
from empty_queue.models.schedule import (
    AssignTaskRequest,
    DayView,
    ScheduleBlock,
    ScheduleBlockCreate,
    ScheduleBlockUpdate,
)
from empty_queue.models.task import Task

router = APIRouter()

_STATUS_BY_ERROR: list[tuple[type[EmptyQueueError], int]] = [
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (AuthorizationError, status.HTTP_403_FORBIDDEN),
    (ConflictError, status.HTTP_409_CONFLICT),
    (ValidationError, status.HTTP_422_UNPROCESSABLE_ENTITY),
]


def to_http_exception(exc: EmptyQueueError) -> HTTPException:
    """Map a domain error to an HTTP error that keeps its kind visible."""
    status_code = status.HTTP_400_BAD_REQUEST
    for error_type, code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = code
            break
    return HTTPException(
        status_code=status_code,
        detail={"code": exc.code, "message": exc.message},
    )


@router.get("", response_model=DayView)
async def get_day_view(
    aggregator: Aggregator,
    profile_id: str = Query(..., min_length=1),
    day: date = Query(..., alias="date", description="YYYY-MM-DD"),
):
    """Block instances and unscheduled tasks for one profile and day."""
    return await aggregator.build_day_view(profile_id, day)


@router.post("/blocks", response_model=ScheduleBlock, status_code=status.HTTP_201_CREATED)
async def create_block(
    payload: ScheduleBlockCreate,
    repo: BlockRepo,
    profile_id: str = Query(..., min_length=1),
):
    """Create a block for a profile."""
    try:
        return await repo.create(profile_id, payload)
    except EmptyQueueError as e:
        raise to_http_exception(e)


@router.patch("/blocks/{block_id}", response_model=ScheduleBlock)
async def update_block(
    block_id: UUID,
    payload: ScheduleBlockUpdate,
    repo: BlockRepo,
):
    """Update a block (used by edit dialogs and resize commits)."""
    try:
        return await repo.update(block_id, payload)
    except EmptyQueueError as e:
        raise to_http_exception(e)


@router.delete("/blocks/{block_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_block(
    block_id: UUID,
    repo: BlockRepo,
):
    """Delete a block and unassign its tasks."""
    deleted = await repo.delete(block_id)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail={"code": NotFoundError.code, "message": f"ScheduleBlock {block_id} not found"},
        )


@router.post("/blocks/{block_id}/assign", response_model=Task)
async def assign_task(
    block_id: UUID,
    payload: AssignTaskRequest,
    coordinator: Coordinator,
):
    """Place a task into a block instance."""
    try:
        return await coordinator.assign(
            block_id,
            payload.task_id,
            explicit_start=payload.start,
            explicit_end=payload.end,
            explicit_date_key=payload.date_key,
        )
    except EmptyQueueError as e:
        raise to_http_exception(e)


@router.post("/tasks/{task_id}/unassign", response_model=Task)
async def unassign_task(
    task_id: UUID,
    coordinator: Coordinator,
):
    """Take a task out of its block."""
    try:
        return await coordinator.unassign(task_id)
    except EmptyQueueError as e:
        raise to_http_exception(e)
