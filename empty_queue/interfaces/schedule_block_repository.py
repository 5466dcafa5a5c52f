"""
Schedule block repository interface.

Defines the contract for block persistence operations.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from empty_queue.models.schedule import ScheduleBlock, ScheduleBlockCreate, ScheduleBlockUpdate


class IScheduleBlockRepository(ABC):
    """Abstract interface for schedule block persistence."""

    @abstractmethod
    async def create(self, profile_id: str, data: ScheduleBlockCreate) -> ScheduleBlock:
        """
        Create a block for a profile.

        The stored minute range always satisfies the day-range and minimum
        duration invariant.

        Raises:
            ValidationError: If the minute range is malformed or inverted
        """
        pass

    @abstractmethod
    async def get(self, block_id: UUID) -> Optional[ScheduleBlock]:
        """Get a block by ID."""
        pass

    @abstractmethod
    async def list_by_profile(self, profile_id: str) -> list[ScheduleBlock]:
        """List every block owned by a profile."""
        pass

    @abstractmethod
    async def update(self, block_id: UUID, update: ScheduleBlockUpdate) -> ScheduleBlock:
        """
        Update a block.

        Raises:
            NotFoundError: If the block does not exist
            ValidationError: If the minute range is malformed or inverted
        """
        pass

    @abstractmethod
    async def delete(self, block_id: UUID) -> bool:
        """
        Delete a block and clear every task assignment that points at it.

        Returns:
            False if the block did not exist
        """
        pass
