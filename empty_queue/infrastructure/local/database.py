"""
SQLite database configuration and ORM models.

This module defines the SQLAlchemy ORM models and database initialization.
Timestamps are stored as naive UTC.
"""

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Integer,
    String,
    Text,
)
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine
from sqlalchemy.orm import DeclarativeBase, sessionmaker

from empty_queue.core.config import get_settings
from empty_queue.utils.datetime_utils import now_utc


def utcnow_naive() -> datetime:
    """Current UTC time without tzinfo, as SQLite stores it."""
    return now_utc().replace(tzinfo=None)


class Base(DeclarativeBase):
    """SQLAlchemy declarative base."""

    pass


# ===========================================
# ORM Models
# ===========================================


class ScheduleBlockORM(Base):
    """Schedule block ORM model."""

    __tablename__ = "schedule_blocks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    profile_id = Column(String(255), nullable=False, index=True)
    type = Column(String(10), nullable=False)
    title = Column(String(200), nullable=True)
    notes = Column(Text, nullable=True)
    # Null on legacy rows; always written on create/update
    start_minute_of_day = Column(Integer, nullable=True)
    end_minute_of_day = Column(Integer, nullable=True)
    is_recurring = Column(Boolean, default=True, nullable=False)
    days_of_week = Column(JSON, nullable=True)
    # One-off blocks only
    start = Column("start_at", DateTime, nullable=True)
    end = Column("end_at", DateTime, nullable=True)
    created_at = Column(DateTime, default=utcnow_naive)
    updated_at = Column(DateTime, default=utcnow_naive, onupdate=utcnow_naive)


class TaskORM(Base):
    """Task ORM model (scheduling columns plus the basics)."""

    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid4()))
    profile_id = Column(String(255), nullable=False, index=True)
    title = Column(String(500), nullable=False)
    description = Column(Text, nullable=True)
    queue = Column(String(10), nullable=False, index=True)
    status = Column(String(20), default="pending", index=True)
    order = Column(Integer, default=0)
    # Weak reference: no foreign key, cleared by block deletion
    scheduled_block_id = Column(String(36), nullable=True, index=True)
    scheduled_start = Column(DateTime, nullable=True, index=True)
    scheduled_end = Column(DateTime, nullable=True)
    scheduled_date_key = Column(String(10), nullable=True, index=True)
    created_at = Column(DateTime, default=utcnow_naive)
    updated_at = Column(DateTime, default=utcnow_naive, onupdate=utcnow_naive)


# ===========================================
# Database Session Management
# ===========================================


def get_engine():
    """Get async engine instance."""
    settings = get_settings()
    return create_async_engine(settings.DATABASE_URL, echo=False)


def get_session_factory(engine=None):
    """Get async session factory."""
    engine = engine or get_engine()
    return sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_db(engine=None):
    """Initialize database tables."""
    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
