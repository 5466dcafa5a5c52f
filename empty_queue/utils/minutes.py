"""
Minute-of-day arithmetic.

All schedule ranges are expressed as integer minutes since local midnight,
in the closed interval [0, MINUTES_IN_DAY].
"""

from __future__ import annotations

import math
from typing import Optional

MINUTES_IN_DAY = 24 * 60
MIN_BLOCK_DURATION_MINUTES = 15
SNAP_MINUTES = 15

# Window used when a block carries neither minute fields nor timestamps
DEFAULT_BLOCK_START_MINUTE = 9 * 60
DEFAULT_BLOCK_DURATION_MINUTES = 60


def is_finite_minute(value: object) -> bool:
    """True for real numbers that are neither NaN nor infinite."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def clamp_range(start: float, end: float) -> tuple[int, int]:
    """
    Clamp a minute range so that it fits in one day and lasts at least
    MIN_BLOCK_DURATION_MINUTES.

    ``start`` is clamped into [0, 1440 - 15] first, then ``end`` into
    [start + 15, 1440]. The function is idempotent.
    """
    clamped_start = max(0, min(int(start), MINUTES_IN_DAY - MIN_BLOCK_DURATION_MINUTES))
    clamped_end = max(clamped_start + MIN_BLOCK_DURATION_MINUTES, min(int(end), MINUTES_IN_DAY))
    return clamped_start, clamped_end


def snap_to_quarter_hour(minute: Optional[float]) -> Optional[int]:
    """Round to the nearest multiple of 15 (halves round up) after clamping into the day."""
    if minute is None or not is_finite_minute(minute):
        return None
    clamped = max(0.0, min(float(minute), float(MINUTES_IN_DAY)))
    return int(math.floor(clamped / SNAP_MINUTES + 0.5)) * SNAP_MINUTES


def minute_from_offset(offset: Optional[float], minute_height: float = 1.0) -> Optional[float]:
    """
    Convert a vertical pointer offset on the day canvas into a minute.

    ``minute_height`` is the number of pixels per minute.
    """
    if offset is None or not is_finite_minute(offset) or minute_height <= 0:
        return None
    raw = offset / minute_height
    return max(0.0, min(raw, float(MINUTES_IN_DAY)))


def selection_to_range(anchor: int, current: int) -> Optional[tuple[int, int]]:
    """
    Turn a drag selection into a block draft range.

    The lower bound is floored and the upper bound ceiled to the snap grid.
    Returns None when the selection is shorter than the minimum duration.
    """
    low = math.floor(min(anchor, current) / SNAP_MINUTES) * SNAP_MINUTES
    high = math.ceil(max(anchor, current) / SNAP_MINUTES) * SNAP_MINUTES
    low = max(0, low)
    high = min(MINUTES_IN_DAY, high)
    if high - low < MIN_BLOCK_DURATION_MINUTES:
        return None
    return low, high
