"""
Interactive block resizing.

A resize runs Idle -> Resizing -> Committing -> Idle. Pointer moves only
change a transient preview; the block store is written once, on release,
and only if the range actually changed. Losing pointer capture or tearing
down the view cancels without writing.

The transition functions are pure and toolkit independent. ResizeSession
drives them for one block and owns the single commit call;
ResizeController keeps one session per block.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Awaitable, Callable, Optional, Union
from uuid import UUID

from empty_queue.core.exceptions import EmptyQueueError, ResizeStateError
from empty_queue.core.logger import setup_logger
from empty_queue.models.enums import ResizeEdge, ResizeStatus
from empty_queue.models.schedule import BlockInstance, ScheduleBlock, ScheduleBlockUpdate
from empty_queue.utils.minutes import (
    MIN_BLOCK_DURATION_MINUTES,
    MINUTES_IN_DAY,
    clamp_range,
    snap_to_quarter_hour,
)

logger = setup_logger(__name__)

UpdateBlock = Callable[[UUID, ScheduleBlockUpdate], Awaitable[ScheduleBlock]]


@dataclass(frozen=True)
class MinuteRange:
    """Half-open minute-of-day range [start, end)."""

    start: int
    end: int

    @classmethod
    def of(cls, instance: BlockInstance) -> "MinuteRange":
        return cls(instance.start_minute_of_day, instance.end_minute_of_day)


@dataclass(frozen=True)
class Idle:
    """No handle grabbed and nothing waiting to be saved."""


@dataclass(frozen=True)
class Resizing:
    """A handle is held; only the preview moves."""

    block_id: UUID
    edge: ResizeEdge
    original: MinuteRange
    preview: MinuteRange


@dataclass(frozen=True)
class Committing:
    """Released with a changed range; ``in_flight`` once the store call is sent."""

    block_id: UUID
    original: MinuteRange
    target: MinuteRange
    in_flight: bool = False


ResizeState = Union[Idle, Resizing, Committing]

IDLE = Idle()


@dataclass(frozen=True)
class ResizeOutcome:
    """Result of one resize, with the range the block should be drawn at."""

    status: ResizeStatus
    range: Optional[MinuteRange] = None
    error_code: Optional[str] = None
    message: Optional[str] = None


# ===========================================
# Transitions
# ===========================================


def begin_resize(
    state: ResizeState,
    block_id: UUID,
    edge: ResizeEdge,
    original: MinuteRange,
) -> Resizing:
    """Grab a handle. Only allowed while idle."""
    if not isinstance(state, Idle):
        raise ResizeStateError(
            f"Block {block_id} cannot be resized right now",
            details={"state": type(state).__name__},
        )
    return Resizing(block_id=block_id, edge=edge, original=original, preview=original)


def update_preview(state: ResizeState, pointer_minute: Optional[float]) -> ResizeState:
    """
    Move the grabbed edge to the snapped pointer minute, keeping at least
    MIN_BLOCK_DURATION_MINUTES to the fixed opposite edge.
    """
    if not isinstance(state, Resizing):
        return state
    snapped = snap_to_quarter_hour(pointer_minute)
    if snapped is None:
        return state

    fixed = state.original
    if state.edge == ResizeEdge.START:
        start = min(max(snapped, 0), fixed.end - MIN_BLOCK_DURATION_MINUTES)
        preview = MinuteRange(start, fixed.end)
    else:
        end = max(min(snapped, MINUTES_IN_DAY), fixed.start + MIN_BLOCK_DURATION_MINUTES)
        preview = MinuteRange(fixed.start, end)
    return replace(state, preview=preview)


def release(state: ResizeState) -> ResizeState:
    """Let go of the handle: queue a commit if the range changed."""
    if not isinstance(state, Resizing):
        return state
    if state.preview == state.original:
        return IDLE
    start, end = clamp_range(state.preview.start, state.preview.end)
    return Committing(block_id=state.block_id, original=state.original, target=MinuteRange(start, end))


def cancel(state: ResizeState) -> ResizeState:
    """Drop the preview. A commit already sent cannot be recalled."""
    if isinstance(state, Resizing):
        return IDLE
    if isinstance(state, Committing) and not state.in_flight:
        return IDLE
    return state


def mark_in_flight(state: ResizeState) -> Committing:
    """The store call for a queued commit has been sent."""
    if not isinstance(state, Committing) or state.in_flight:
        raise ResizeStateError(
            "No queued commit to send",
            details={"state": type(state).__name__},
        )
    return replace(state, in_flight=True)


def finish_commit(state: ResizeState) -> Idle:
    """The store call returned (either way); back to idle."""
    if not isinstance(state, Committing) or not state.in_flight:
        raise ResizeStateError(
            "No commit in flight",
            details={"state": type(state).__name__},
        )
    return IDLE


# ===========================================
# Drivers
# ===========================================


class ResizeSession:
    """Resize interaction for a single block."""

    def __init__(self, block_id: UUID, update_block: UpdateBlock):
        self.block_id = block_id
        self._update_block = update_block
        self.state: ResizeState = IDLE
        self._cancelled = False

    @property
    def busy(self) -> bool:
        """True while a commit is queued or in flight."""
        return isinstance(self.state, Committing)

    def display_range(self, persisted: MinuteRange) -> MinuteRange:
        """Range to draw: the live preview, the pending target, or the stored range."""
        if isinstance(self.state, Resizing):
            return self.state.preview
        if isinstance(self.state, Committing):
            return self.state.target
        return persisted

    def press(self, edge: ResizeEdge, original: MinuteRange) -> None:
        self.state = begin_resize(self.state, self.block_id, edge, original)
        self._cancelled = False

    def move(self, pointer_minute: Optional[float]) -> None:
        self.state = update_preview(self.state, pointer_minute)

    def release(self) -> bool:
        """Returns True if a commit was queued."""
        self.state = release(self.state)
        return isinstance(self.state, Committing)

    def cancel(self) -> None:
        """Pointer capture lost or the view was torn down."""
        before = self.state
        self.state = cancel(self.state)
        if self.state is not before:
            self._cancelled = True
            logger.debug(f"Resize of block {self.block_id} cancelled")

    async def commit(self) -> ResizeOutcome:
        """
        Send the queued commit, if any. At most one update per release.

        Store errors revert to the original range and are reported in the
        outcome; anything else propagates after the state is reset.
        """
        state = self.state
        if not isinstance(state, Committing):
            status = ResizeStatus.CANCELLED if self._cancelled else ResizeStatus.UNCHANGED
            return ResizeOutcome(status=status)
        self.state = mark_in_flight(state)
        try:
            block = await self._update_block(
                self.block_id,
                ScheduleBlockUpdate(
                    start_minute_of_day=state.target.start,
                    end_minute_of_day=state.target.end,
                ),
            )
        except EmptyQueueError as exc:
            logger.warning(f"Resize of block {self.block_id} failed: {exc.message}")
            return ResizeOutcome(
                status=ResizeStatus.FAILED,
                range=state.original,
                error_code=exc.code,
                message=exc.message,
            )
        finally:
            self.state = finish_commit(self.state)

        committed = MinuteRange(block.start_minute_of_day, block.end_minute_of_day)
        logger.info(f"Resized block {self.block_id} to [{committed.start}, {committed.end})")
        return ResizeOutcome(status=ResizeStatus.COMMITTED, range=committed)

    async def finish(self) -> ResizeOutcome:
        """Pointer released: queue and send the commit in one step."""
        self.release()
        return await self.commit()


class ResizeController:
    """Per-block resize sessions for one schedule view."""

    def __init__(self, update_block: UpdateBlock):
        self._update_block = update_block
        self._sessions: dict[UUID, ResizeSession] = {}

    def session(self, block_id: UUID) -> ResizeSession:
        if block_id not in self._sessions:
            self._sessions[block_id] = ResizeSession(block_id, self._update_block)
        return self._sessions[block_id]

    def begin(self, block_id: UUID, edge: ResizeEdge, original: MinuteRange) -> ResizeSession:
        """
        Start resizing a block.

        Raises:
            ResizeStateError: If the block's previous commit is still pending
        """
        session = self.session(block_id)
        if session.busy:
            raise ResizeStateError(f"Block {block_id} is still saving")
        session.press(edge, original)
        return session

    def teardown(self, block_id: UUID) -> None:
        """The block's instance left the view."""
        session = self._sessions.get(block_id)
        if session is not None:
            session.cancel()
