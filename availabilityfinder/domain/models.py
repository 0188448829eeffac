"""
Domain models for availability requests, busy intervals and free slots.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Tuple

from pendulum import DateTime

from .zoned import (
    DEFAULT_WORKDAY_END,
    DEFAULT_WORKDAY_START,
    add_civil_days,
    start_of_day,
)


class Granularity(str, Enum):
    """Slot size bucket a free slot was evaluated against."""
    SIXTY_MINUTES = "60min"
    THIRTY_MINUTES = "30min"

    @property
    def minutes(self) -> int:
        return 60 if self is Granularity.SIXTY_MINUTES else 30


@dataclass(frozen=True)
class TimeRange:
    """
    Represents an immutable time range with start and end datetime.

    Invariant: start must be before end.
    """
    start: DateTime
    end: DateTime

    def __post_init__(self):
        if self.start >= self.end:
            raise ValueError(f"Start time {self.start} must be before end time {self.end}")

    def duration_minutes(self) -> int:
        """Return the duration in minutes."""
        return int((self.end - self.start).total_seconds() / 60)


@dataclass(frozen=True)
class BusyInterval:
    """
    A time range already occupied by a calendar event.

    Unlike ``TimeRange`` this does not validate ordering on construction;
    inverted or empty intervals are filtered out before merging.
    """
    start: DateTime
    end: DateTime
    source_id: str = ""
    title: str = "Busy"

    def duration_minutes(self) -> int:
        return int((self.end - self.start).total_seconds() / 60)

    def is_valid(self) -> bool:
        return self.end > self.start

    def overlaps(self, start: DateTime, end: DateTime) -> bool:
        return self.start < end and self.end > start

    def to_dict(self, timezone: str) -> Dict[str, Any]:
        return {
            "id": self.source_id,
            "title": self.title,
            "start": self.start.in_timezone(timezone).isoformat(),
            "end": self.end.in_timezone(timezone).isoformat(),
        }


@dataclass(frozen=True)
class FreeSlot:
    """
    Represents a found available time slot.
    """
    time_range: TimeRange
    granularity: Granularity

    @property
    def start(self) -> DateTime:
        return self.time_range.start

    @property
    def end(self) -> DateTime:
        return self.time_range.end

    @property
    def duration_minutes(self) -> int:
        return self.time_range.duration_minutes()

    def format_display(self, timezone: str) -> str:
        """
        Format the slot for display.
        Format: Weekday, YYYY-MM-DD | HH:mm - HH:mm (N min)
        """
        start = self.start.in_timezone(timezone)
        end = self.end.in_timezone(timezone)
        return (
            f"{start.format('dddd, YYYY-MM-DD')} | "
            f"{start.format('HH:mm')} - {end.format('HH:mm')} ({self.duration_minutes} min)"
        )

    def to_dict(self, timezone: str) -> Dict[str, Any]:
        return {
            "start": self.start.in_timezone(timezone).isoformat(),
            "end": self.end.in_timezone(timezone).isoformat(),
            "durationMinutes": self.duration_minutes,
            "granularity": self.granularity.value,
        }


@dataclass(frozen=True)
class WorkingHours:
    """
    Civil working window applied to every searched day.
    """
    start: str = DEFAULT_WORKDAY_START
    end: str = DEFAULT_WORKDAY_END


@dataclass(frozen=True)
class TimeWindowRequest:
    """
    A concrete availability request, either explicit or inferred from text.

    Build instances through ``TimeWindowRequest.normalized`` so the window
    invariants (end after start, bounded length) hold.
    """
    start: DateTime
    end: DateTime
    timezone: str
    duration_minutes: int = 60
    working_hours: WorkingHours = field(default_factory=WorkingHours)
    exclude_weekends: bool = True

    @classmethod
    def normalized(
        cls,
        start: DateTime,
        end: DateTime,
        timezone: str,
        max_range_days: int = 30,
        **kwargs: Any,
    ) -> "TimeWindowRequest":
        """
        Build a request whose window is non-empty and bounded.

        A window with ``end <= start`` is pushed to the start of the next
        civil day; a window longer than ``max_range_days`` is clamped.
        """
        if end <= start:
            end = add_civil_days(start_of_day(start, timezone), 1, timezone)
        limit = add_civil_days(start, max_range_days, timezone)
        if end > limit:
            end = limit
        return cls(start=start, end=end, timezone=timezone, **kwargs)

    @property
    def range(self) -> TimeRange:
        return TimeRange(start=self.start, end=self.end)


@dataclass(frozen=True)
class EngineSettings:
    """
    Explicit configuration handed to the engine.

    Read once at process start by the outer layer; the engine never looks at
    the environment itself.
    """
    default_duration_minutes: int = 60
    min_duration_minutes: int = 15
    max_duration_minutes: int = 240
    working_hours: WorkingHours = field(default_factory=WorkingHours)
    exclude_weekends: bool = True
    max_slots: int = 25
    max_range_days: int = 30

    def clamp_duration(self, minutes: int) -> int:
        return max(self.min_duration_minutes, min(self.max_duration_minutes, int(minutes)))


@dataclass(frozen=True)
class AvailabilityResult:
    """
    Computed availability for one request. Never persisted.
    """
    slots: Tuple[FreeSlot, ...]
    busy_slots: Tuple[BusyInterval, ...]
    total_free_minutes: int
    total_busy_minutes: int
    range: TimeRange
    timezone: str
    duration_minutes: int
    working_hours: WorkingHours
    exclude_weekends: bool
    meeting_count: int = 0
    total_slots_found: int = 0

    def to_dict(self) -> Dict[str, Any]:
        """Serialize into the camelCase payload consumed by tool handlers."""
        return {
            "availableSlots": [slot.to_dict(self.timezone) for slot in self.slots],
            "totalAvailableSlots": len(self.slots),
            "busySlots": [busy.to_dict(self.timezone) for busy in self.busy_slots],
            "summary": {
                "totalFreeMinutes": self.total_free_minutes,
                "totalBusyMinutes": self.total_busy_minutes,
                "totalFreeHours": round(self.total_free_minutes / 60, 1),
                "totalBusyHours": round(self.total_busy_minutes / 60, 1),
                "meetingCount": self.meeting_count,
            },
            "range": {
                "start": self.range.start.in_timezone(self.timezone).isoformat(),
                "end": self.range.end.in_timezone(self.timezone).isoformat(),
            },
            "timezone": self.timezone,
            "durationMinutes": self.duration_minutes,
            "workingHours": {
                "start": self.working_hours.start,
                "end": self.working_hours.end,
            },
            "excludeWeekends": self.exclude_weekends,
        }
