"""
Availability aggregation across a multi-day window.
"""

import logging
from functools import partial
from typing import Callable, Iterator, List, Sequence

from pendulum import DateTime

from .intervals import clip_intervals, drop_invalid, merge_intervals, total_minutes
from .models import (
    AvailabilityResult,
    BusyInterval,
    EngineSettings,
    FreeSlot,
    TimeWindowRequest,
)
from .slot_calculator import SlotCalculator
from .zoned import (
    DEFAULT_WORKDAY_END,
    DEFAULT_WORKDAY_START,
    add_civil_days,
    civil_parts_of,
    start_of_day,
    time_on_date,
)

logger = logging.getLogger(__name__)

SATURDAY = 6
SUNDAY = 0


def is_weekend(day: DateTime, timezone: str) -> bool:
    """True when ``day`` falls on Saturday or Sunday in ``timezone``."""
    return civil_parts_of(day, timezone).weekday in (SATURDAY, SUNDAY)


class CivilDayRange:
    """
    Finite, restartable sequence of civil days covering ``[start, end]``.

    Each item is the civil midnight of a day. Iterating twice yields the same
    days; an optional predicate drops days from the sequence.
    """

    def __init__(
        self,
        start: DateTime,
        end: DateTime,
        timezone: str,
        skip: Callable[[DateTime], bool] | None = None,
    ):
        self.start = start
        self.end = end
        self.timezone = timezone
        self.skip = skip

    def __iter__(self) -> Iterator[DateTime]:
        day = start_of_day(self.start, self.timezone)
        while day <= self.end:
            if self.skip is None or not self.skip(day):
                yield day
            # Re-anchor on midnight so DST days do not drift the wall clock.
            day = start_of_day(add_civil_days(day, 1, self.timezone), self.timezone)


class AvailabilityCalculator:
    """
    Produces an ``AvailabilityResult`` from a window request and busy data.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        slot_calculator: SlotCalculator | None = None,
    ):
        self.settings = settings or EngineSettings()
        self.slot_calculator = slot_calculator or SlotCalculator()

    def days(self, request: TimeWindowRequest) -> CivilDayRange:
        """Civil days of the request, weekends removed when excluded."""
        skip = None
        if request.exclude_weekends:
            skip = partial(is_weekend, timezone=request.timezone)
        return CivilDayRange(request.start, request.end, request.timezone, skip=skip)

    def working_window(self, day: DateTime, request: TimeWindowRequest):
        """
        Working window for ``day``, clipped to the requested range.

        Returns a ``(start, end)`` pair, or None when nothing remains.
        """
        tz = request.timezone
        window_start = time_on_date(day, request.working_hours.start, tz, DEFAULT_WORKDAY_START)
        window_end = time_on_date(day, request.working_hours.end, tz, DEFAULT_WORKDAY_END)

        window_start = max(window_start, request.start)
        window_end = min(window_end, request.end)

        if window_end <= window_start:
            return None
        return window_start, window_end

    def compute(
        self,
        request: TimeWindowRequest,
        busy_intervals: Sequence[BusyInterval],
    ) -> AvailabilityResult:
        """
        Compute free slots and the busy summary for a request.

        Args:
            request: Normalized window request
            busy_intervals: Raw busy intervals, possibly overlapping

        Returns:
            AvailabilityResult with at most ``max_slots`` slots; totals cover
            every slot found.
        """
        valid_busy = drop_invalid(busy_intervals)
        merged_busy = merge_intervals(valid_busy)

        all_slots: List[FreeSlot] = []
        for day in self.days(request):
            window = self.working_window(day, request)
            if window is None:
                continue
            day_start, day_end = window
            day_busy = clip_intervals(merged_busy, day_start, day_end)
            all_slots.extend(
                self.slot_calculator.find_day_slots(day_start, day_end, day_busy)
            )

        if request.duration_minutes > self.slot_calculator.coarse.minutes:
            all_slots = [
                slot for slot in all_slots
                if slot.duration_minutes >= request.duration_minutes
            ]

        all_slots.sort(key=lambda slot: slot.start)

        range_busy = [
            interval for interval in merged_busy
            if interval.overlaps(request.start, request.end)
        ]
        meeting_count = sum(
            1 for interval in valid_busy
            if interval.overlaps(request.start, request.end)
        )

        logger.debug(
            "Found %d slots across %s - %s (%d busy intervals)",
            len(all_slots), request.start, request.end, len(range_busy),
        )

        return AvailabilityResult(
            slots=tuple(all_slots[: self.settings.max_slots]),
            busy_slots=tuple(range_busy),
            total_free_minutes=sum(slot.duration_minutes for slot in all_slots),
            total_busy_minutes=total_minutes(range_busy),
            range=request.range,
            timezone=request.timezone,
            duration_minutes=request.duration_minutes,
            working_hours=request.working_hours,
            exclude_weekends=request.exclude_weekends,
            meeting_count=meeting_count,
            total_slots_found=len(all_slots),
        )


def compute_availability(
    request: TimeWindowRequest,
    busy_intervals: Sequence[BusyInterval],
    settings: EngineSettings | None = None,
) -> AvailabilityResult:
    """Convenience wrapper around ``AvailabilityCalculator.compute``."""
    return AvailabilityCalculator(settings=settings).compute(request, busy_intervals)
