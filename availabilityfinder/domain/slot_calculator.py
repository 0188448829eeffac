"""
Core business logic for calculating free slots inside one working window.

This is pure domain logic without any external dependencies (no API calls,
no database, no I/O).
"""

from datetime import timedelta
from typing import List, Sequence, Set

from pendulum import DateTime

from .models import BusyInterval, FreeSlot, Granularity, TimeRange


class SlotCalculator:
    """
    Calculates free slots for a single day's working window.

    Algorithm:
    1. Walk the merged busy intervals with a cursor starting at the window open
    2. Every gap of at least the required duration becomes a slot
    3. The cursor jumps to the end of each busy interval
    4. The remainder up to the window close is checked last

    ``find_day_slots`` runs this twice (60 and 30 minutes) and keeps the
    30-minute results only for gaps too small to host a 60-minute slot.
    """

    def __init__(
        self,
        coarse: Granularity = Granularity.SIXTY_MINUTES,
        fine: Granularity = Granularity.THIRTY_MINUTES,
    ):
        self.coarse = coarse
        self.fine = fine

    def find_gaps(
        self,
        day_start: DateTime,
        day_end: DateTime,
        busy: Sequence[BusyInterval],
        required_minutes: int,
        granularity: Granularity,
    ) -> List[FreeSlot]:
        """
        Find every gap of at least ``required_minutes`` in the window.

        Args:
            day_start: Opening of the working window
            day_end: Close of the working window
            busy: Merged busy intervals clipped to the window
            required_minutes: Minimum gap length (inclusive)
            granularity: Tag given to the produced slots

        Returns:
            Chronological list of FreeSlot objects
        """
        required = timedelta(minutes=required_minutes)
        slots: List[FreeSlot] = []
        cursor = day_start

        for interval in sorted(busy, key=lambda b: b.start):
            if interval.start > cursor and interval.start - cursor >= required:
                slots.append(
                    FreeSlot(
                        time_range=TimeRange(start=cursor, end=interval.start),
                        granularity=granularity,
                    )
                )
            cursor = max(cursor, interval.end)

        if day_end > cursor and day_end - cursor >= required:
            slots.append(
                FreeSlot(
                    time_range=TimeRange(start=cursor, end=day_end),
                    granularity=granularity,
                )
            )

        return slots

    def find_day_slots(
        self,
        day_start: DateTime,
        day_end: DateTime,
        busy: Sequence[BusyInterval],
    ) -> List[FreeSlot]:
        """
        Combine the coarse and fine passes for one day.

        Every coarse slot is kept. A fine slot is kept only if it is shorter
        than the coarse granularity and does not start where a coarse slot
        starts. Only starts are compared, not full overlap.
        """
        coarse_slots = self.find_gaps(
            day_start, day_end, busy, self.coarse.minutes, self.coarse
        )
        fine_slots = self.find_gaps(
            day_start, day_end, busy, self.fine.minutes, self.fine
        )

        taken_starts: Set[DateTime] = {slot.start for slot in coarse_slots}
        small_gaps = [
            slot for slot in fine_slots
            if slot.duration_minutes < self.coarse.minutes
            and slot.start not in taken_starts
        ]

        return sorted(coarse_slots + small_gaps, key=lambda slot: slot.start)
