"""
Shared pytest fixtures.
"""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from empty_queue.infrastructure.local.database import Base
from empty_queue.infrastructure.local.schedule_block_repository import (
    SqliteScheduleBlockRepository,
)
from empty_queue.infrastructure.local.task_repository import SqliteTaskRepository


@pytest.fixture
async def session_factory():
    """In-memory SQLite shared by every session of one test."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    await engine.dispose()


@pytest.fixture
def profile_id() -> str:
    return "profile-alice"


@pytest.fixture
def other_profile_id() -> str:
    return "profile-bob"


@pytest.fixture
def block_repo(session_factory) -> SqliteScheduleBlockRepository:
    return SqliteScheduleBlockRepository(session_factory=session_factory)


@pytest.fixture
def task_repo(session_factory) -> SqliteTaskRepository:
    return SqliteTaskRepository(session_factory=session_factory)
