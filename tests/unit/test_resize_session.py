"""
Unit tests for the resize state machine.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest

from empty_queue.core.exceptions import ResizeStateError, ValidationError
from empty_queue.models.enums import BlockType, ResizeEdge, ResizeStatus
from empty_queue.models.schedule import ScheduleBlock, WeeklyRecurrence
from empty_queue.services.resize_session import (
    IDLE,
    Committing,
    Idle,
    MinuteRange,
    ResizeController,
    ResizeSession,
    Resizing,
    begin_resize,
    cancel,
    finish_commit,
    mark_in_flight,
    release,
    update_preview,
)

ORIGINAL = MinuteRange(540, 600)


def _stored_block(block_id, update):
    now = datetime(2025, 3, 10, tzinfo=timezone.utc)
    return ScheduleBlock(
        id=block_id,
        profile_id="profile-alice",
        type=BlockType.DEEP,
        start_minute_of_day=update.start_minute_of_day,
        end_minute_of_day=update.end_minute_of_day,
        recurrence=WeeklyRecurrence(),
        created_at=now,
        updated_at=now,
    )


def _store():
    update_block = AsyncMock()
    update_block.side_effect = _stored_block
    return update_block


def test_end_edge_preview_snaps_and_keeps_minimum():
    state = begin_resize(IDLE, uuid4(), ResizeEdge.END, ORIGINAL)

    assert update_preview(state, 612).preview == MinuteRange(540, 615)
    assert update_preview(state, 500).preview == MinuteRange(540, 555)
    assert update_preview(state, 2000).preview == MinuteRange(540, 1440)


def test_start_edge_preview_snaps_and_keeps_minimum():
    state = begin_resize(IDLE, uuid4(), ResizeEdge.START, ORIGINAL)

    assert update_preview(state, 503).preview == MinuteRange(510, 600)
    assert update_preview(state, 598).preview == MinuteRange(585, 600)
    assert update_preview(state, -40).preview == MinuteRange(0, 600)


def test_preview_ignores_unusable_pointer():
    state = begin_resize(IDLE, uuid4(), ResizeEdge.END, ORIGINAL)
    assert update_preview(state, None) == state
    assert update_preview(IDLE, 700) is IDLE


def test_release_without_change_goes_idle():
    state = begin_resize(IDLE, uuid4(), ResizeEdge.END, ORIGINAL)
    assert release(update_preview(state, 600)) is IDLE


def test_release_with_change_queues_commit():
    block_id = uuid4()
    state = update_preview(begin_resize(IDLE, block_id, ResizeEdge.END, ORIGINAL), 660)

    committing = release(state)

    assert committing == Committing(block_id=block_id, original=ORIGINAL, target=MinuteRange(540, 660))


def test_cannot_begin_while_not_idle():
    state = begin_resize(IDLE, uuid4(), ResizeEdge.END, ORIGINAL)
    with pytest.raises(ResizeStateError):
        begin_resize(state, state.block_id, ResizeEdge.START, ORIGINAL)


def test_cancel_keeps_in_flight_commit():
    queued = Committing(block_id=uuid4(), original=ORIGINAL, target=MinuteRange(540, 660))
    in_flight = Committing(
        block_id=queued.block_id, original=ORIGINAL, target=queued.target, in_flight=True
    )

    assert cancel(queued) is IDLE
    assert cancel(in_flight) is in_flight


@pytest.mark.asyncio
async def test_previews_never_touch_store_and_commit_writes_once():
    block_id = uuid4()
    update_block = _store()
    session = ResizeSession(block_id, update_block)

    session.press(ResizeEdge.END, ORIGINAL)
    for minute in (610, 625, 640, 655, 672):
        session.move(minute)
    assert session.display_range(ORIGINAL) == MinuteRange(540, 675)
    update_block.assert_not_called()

    outcome = await session.finish()

    update_block.assert_awaited_once()
    called_id, payload = update_block.await_args.args
    assert called_id == block_id
    assert (payload.start_minute_of_day, payload.end_minute_of_day) == (540, 675)
    assert outcome.status == ResizeStatus.COMMITTED
    assert outcome.range == MinuteRange(540, 675)
    assert isinstance(session.state, Idle)


@pytest.mark.asyncio
async def test_unchanged_release_does_not_write():
    update_block = _store()
    session = ResizeSession(uuid4(), update_block)

    session.press(ResizeEdge.START, ORIGINAL)
    session.move(544)
    outcome = await session.finish()

    assert outcome.status == ResizeStatus.UNCHANGED
    update_block.assert_not_called()


@pytest.mark.asyncio
async def test_cancel_before_commit_does_not_write():
    update_block = _store()
    session = ResizeSession(uuid4(), update_block)

    session.press(ResizeEdge.END, ORIGINAL)
    session.move(700)
    session.cancel()
    outcome = await session.commit()

    assert outcome.status == ResizeStatus.CANCELLED
    assert session.display_range(ORIGINAL) == ORIGINAL
    update_block.assert_not_called()


@pytest.mark.asyncio
async def test_failed_commit_reverts_to_original():
    update_block = AsyncMock(side_effect=ValidationError("Block end must be after its start"))
    session = ResizeSession(uuid4(), update_block)

    session.press(ResizeEdge.END, ORIGINAL)
    session.move(720)
    outcome = await session.finish()

    update_block.assert_awaited_once()
    assert outcome.status == ResizeStatus.FAILED
    assert outcome.range == ORIGINAL
    assert outcome.error_code == "validation_error"
    assert isinstance(session.state, Idle)


@pytest.mark.asyncio
async def test_controller_refuses_new_resize_while_saving():
    block_id = uuid4()
    update_block = _store()
    controller = ResizeController(update_block)

    session = controller.begin(block_id, ResizeEdge.END, ORIGINAL)
    session.move(660)
    assert session.release() is True
    assert controller.session(block_id).busy

    with pytest.raises(ResizeStateError):
        controller.begin(block_id, ResizeEdge.START, ORIGINAL)

    await session.commit()
    assert not controller.session(block_id).busy
    assert isinstance(controller.begin(block_id, ResizeEdge.START, ORIGINAL).state, Resizing)


@pytest.mark.asyncio
async def test_teardown_cancels_queued_commit():
    block_id = uuid4()
    update_block = _store()
    controller = ResizeController(update_block)

    session = controller.begin(block_id, ResizeEdge.END, ORIGINAL)
    session.move(660)
    session.release()
    controller.teardown(block_id)

    outcome = await session.commit()

    assert outcome.status == ResizeStatus.CANCELLED
    update_block.assert_not_called()


@pytest.mark.asyncio
async def test_cancel_during_in_flight_commit_is_ignored():
    block_id = uuid4()
    session = None

    async def update_block(called_id, update):
        session.cancel()
        assert session.busy
        return _stored_block(called_id, update)

    session = ResizeSession(block_id, update_block)
    session.press(ResizeEdge.END, ORIGINAL)
    session.move(660)

    outcome = await session.finish()

    assert outcome.status == ResizeStatus.COMMITTED
    assert outcome.range == MinuteRange(540, 660)


def test_commit_transitions_require_a_queued_commit():
    queued = Committing(block_id=uuid4(), original=ORIGINAL, target=MinuteRange(540, 660))

    sent = mark_in_flight(queued)
    assert sent.in_flight
    assert finish_commit(sent) is IDLE

    with pytest.raises(ResizeStateError):
        mark_in_flight(sent)
    with pytest.raises(ResizeStateError):
        finish_commit(queued)
    with pytest.raises(ResizeStateError):
        mark_in_flight(IDLE)
