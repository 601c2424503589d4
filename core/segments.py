"""
Shift segment processing for HorasCalc application.
Contains functions for splitting shifts at clock boundaries and removing rest periods.
"""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable, Iterator, List, NamedTuple, Optional, Union

from core.time_utils import minutes_between, next_boundary

logger = logging.getLogger(__name__)


# =============================================================================
# Segment and Rest Types
# =============================================================================

class Segment(NamedTuple):
    """A piece of a shift that never crosses 06:00, 21:00 or midnight."""
    start: datetime
    end: datetime

    @property
    def minutes(self) -> float:
        return minutes_between(self.start, self.end)


class RestWindow(NamedTuple):
    """Explicit rest interval inside the shift."""
    start: datetime
    end: datetime

    @property
    def minutes(self) -> float:
        return minutes_between(self.start, self.end)


class CountdownRest(NamedTuple):
    """Rest minutes discounted from the end of the shift backwards."""
    minutes: int


class AutoRest(NamedTuple):
    """Rest window placed at the shift midpoint when the shift is long enough."""
    threshold_minutes: int
    rest_minutes: int


RestSpec = Optional[Union[RestWindow, CountdownRest, AutoRest]]


# =============================================================================
# Boundary Segmenter
# =============================================================================

def split_into_segments(start: datetime, end: datetime) -> Iterator[Segment]:
    """
    Split [start, end) into consecutive segments at 06:00, 21:00 and midnight.

    The result is a generator; call again to iterate a second time.
    """
    cursor = start
    while cursor < end:
        boundary = next_boundary(cursor)
        segment_end = boundary if boundary < end else end
        yield Segment(cursor, segment_end)
        cursor = segment_end


def total_minutes(segments: Iterable[Segment]) -> float:
    """Sum of segment durations in minutes."""
    return sum(seg.minutes for seg in segments)


# =============================================================================
# Rest Remover
# =============================================================================

def apply_rest_countdown(segments: Iterable[Segment], rest_minutes: float) -> List[Segment]:
    """
    Discount rest minutes starting from the last segment and moving backwards.

    Each segment's end is pulled back by whatever rest is still pending;
    segments left with no duration are dropped.
    """
    adjusted = list(segments)
    remaining = rest_minutes

    for i in range(len(adjusted) - 1, -1, -1):
        if remaining <= 0:
            break
        seg = adjusted[i]
        deduction = min(seg.minutes, remaining)
        new_end = seg.end - timedelta(minutes=deduction)
        remaining -= deduction

        if new_end <= seg.start:
            del adjusted[i]
        else:
            adjusted[i] = Segment(seg.start, new_end)

    return adjusted


def apply_rest_window(segments: Iterable[Segment], window: RestWindow) -> List[Segment]:
    """
    Remove the part of every segment that overlaps the rest window.

    A segment untouched by the window is kept as is, a partial overlap trims it,
    a window strictly inside splits it in two and a segment fully covered is dropped.
    """
    result: List[Segment] = []

    for seg in segments:
        overlap_start = max(seg.start, window.start)
        overlap_end = min(seg.end, window.end)

        if overlap_start >= overlap_end:
            result.append(seg)
            continue

        # Part before the rest
        if seg.start < overlap_start:
            result.append(Segment(seg.start, overlap_start))
        # Part after the rest
        if overlap_end < seg.end:
            result.append(Segment(overlap_end, seg.end))

    return result


def compute_auto_rest_window(
    start: datetime,
    end: datetime,
    threshold_minutes: float,
    rest_minutes: float
) -> Optional[RestWindow]:
    """
    Build a rest window centred on the shift midpoint.

    Returns None when the shift is shorter than the threshold. The window is
    clamped so it never leaves the shift bounds.
    """
    shift_minutes = minutes_between(start, end)
    if shift_minutes < threshold_minutes or rest_minutes <= 0:
        return None

    duration = min(rest_minutes, shift_minutes)
    # Whole minutes keep the window aligned to the shift's minute resolution
    offset = int((shift_minutes - duration) // 2)
    rest_start = start + timedelta(minutes=offset)
    rest_end = rest_start + timedelta(minutes=duration)

    if rest_end > end:
        rest_end = end
        rest_start = max(start, end - timedelta(minutes=duration))

    return RestWindow(rest_start, rest_end)


def apply_rest(
    segments: Iterable[Segment],
    rest: RestSpec,
    start: datetime,
    end: datetime
) -> List[Segment]:
    """Remove rest from the segment list according to the given rest spec."""
    if rest is None:
        return list(segments)

    if isinstance(rest, CountdownRest):
        if rest.minutes <= 0:
            return list(segments)
        return apply_rest_countdown(segments, rest.minutes)

    if isinstance(rest, AutoRest):
        window = compute_auto_rest_window(start, end, rest.threshold_minutes, rest.rest_minutes)
        if window is None:
            logger.debug(f"Shift {start} - {end} below auto rest threshold {rest.threshold_minutes}")
            return list(segments)
        logger.debug(f"Auto rest window {window.start} - {window.end}")
        return apply_rest_window(segments, window)

    if isinstance(rest, RestWindow):
        return apply_rest_window(segments, rest)

    raise TypeError(f"Unsupported rest spec: {rest!r}")
