"""
Busy interval normalisation: filtering, merging and clipping.
"""

from typing import Iterable, List

from pendulum import DateTime

from .models import BusyInterval


def drop_invalid(intervals: Iterable[BusyInterval]) -> List[BusyInterval]:
    """Discard zero-length and inverted intervals."""
    return [interval for interval in intervals if interval.is_valid()]


def merge_intervals(intervals: Iterable[BusyInterval]) -> List[BusyInterval]:
    """
    Merge overlapping or adjacent busy intervals.

    The result is sorted by start and pairwise disjoint. A merged interval
    keeps the id and title of its earliest member.

    Example: [09:00-10:00, 09:30-11:00, 11:00-12:00] -> [09:00-12:00]
    """
    sorted_intervals = sorted(intervals, key=lambda interval: interval.start)
    if not sorted_intervals:
        return []

    merged: List[BusyInterval] = [sorted_intervals[0]]

    for current in sorted_intervals[1:]:
        last = merged[-1]

        if current.start <= last.end:
            if current.end > last.end:
                merged[-1] = BusyInterval(
                    start=last.start,
                    end=current.end,
                    source_id=last.source_id,
                    title=last.title,
                )
        else:
            merged.append(current)

    return merged


def clip_intervals(
    intervals: Iterable[BusyInterval],
    window_start: DateTime,
    window_end: DateTime,
) -> List[BusyInterval]:
    """
    Intersect every interval with ``[window_start, window_end]``.

    Intervals entirely outside the window are dropped.
    """
    clipped: List[BusyInterval] = []

    for interval in intervals:
        if not interval.overlaps(window_start, window_end):
            continue
        clipped.append(
            BusyInterval(
                start=max(interval.start, window_start),
                end=min(interval.end, window_end),
                source_id=interval.source_id,
                title=interval.title,
            )
        )

    return clipped


def find_conflicts(
    start: DateTime,
    end: DateTime,
    intervals: Iterable[BusyInterval],
) -> List[BusyInterval]:
    """Return the busy intervals that overlap a proposed meeting window."""
    return sorted(
        (interval for interval in drop_invalid(intervals) if interval.overlaps(start, end)),
        key=lambda interval: interval.start,
    )


def total_minutes(intervals: Iterable[BusyInterval]) -> int:
    return sum(interval.duration_minutes() for interval in intervals)
