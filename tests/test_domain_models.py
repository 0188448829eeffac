"""
Tests for domain models.
"""

import pendulum
import pytest

from availabilityfinder.domain.models import (
    AvailabilityResult,
    BusyInterval,
    FreeSlot,
    Granularity,
    TimeRange,
    TimeWindowRequest,
    WorkingHours,
)


def _london(*args):
    return pendulum.datetime(*args, tz="Europe/London")


class TestTimeRange:
    """Tests for TimeRange model."""

    def test_create_valid_time_range(self):
        """Test creating a valid time range."""
        start = _london(2024, 11, 25, 9, 0)
        end = _london(2024, 11, 25, 17, 0)

        tr = TimeRange(start=start, end=end)

        assert tr.start == start
        assert tr.end == end
        assert tr.duration_minutes() == 480  # 8 hours

    def test_invalid_time_range_raises_error(self):
        """Test that creating an invalid time range raises ValueError."""
        with pytest.raises(ValueError, match="Start time .* must be before end time"):
            TimeRange(start=_london(2024, 11, 25, 17), end=_london(2024, 11, 25, 9))


class TestBusyInterval:
    """Tests for BusyInterval model."""

    def test_validity(self):
        assert BusyInterval(start=_london(2024, 11, 25, 9), end=_london(2024, 11, 25, 10)).is_valid()
        assert not BusyInterval(start=_london(2024, 11, 25, 9), end=_london(2024, 11, 25, 9)).is_valid()
        assert not BusyInterval(start=_london(2024, 11, 25, 10), end=_london(2024, 11, 25, 9)).is_valid()

    def test_to_dict_uses_requested_timezone(self):
        busy = BusyInterval(
            start=pendulum.datetime(2024, 11, 25, 14, tz="UTC"),
            end=pendulum.datetime(2024, 11, 25, 15, tz="UTC"),
            source_id="evt-1",
            title="Demo",
        )

        data = busy.to_dict("America/New_York")

        assert data == {
            "id": "evt-1",
            "title": "Demo",
            "start": "2024-11-25T09:00:00-05:00",
            "end": "2024-11-25T10:00:00-05:00",
        }


class TestTimeWindowRequest:
    """Tests for window normalization."""

    def test_inverted_window_is_widened_to_next_midnight(self):
        start = _london(2024, 11, 25, 15, 0)

        request = TimeWindowRequest.normalized(start, _london(2024, 11, 25, 10), "Europe/London")

        assert request.start == start
        assert request.end == _london(2024, 11, 26, 0, 0)

    def test_long_window_is_clamped(self):
        start = _london(2024, 11, 1)

        request = TimeWindowRequest.normalized(
            start, _london(2025, 2, 1), "Europe/London", max_range_days=30
        )

        assert request.end == start.add(days=30)

    def test_defaults(self):
        request = TimeWindowRequest.normalized(
            _london(2024, 11, 25, 9), _london(2024, 11, 25, 17), "Europe/London"
        )

        assert request.duration_minutes == 60
        assert request.working_hours == WorkingHours("09:00", "17:00")
        assert request.exclude_weekends is True


class TestAvailabilityResultSerialization:
    """Tests for the tool payload."""

    def test_to_dict_shape(self):
        slot = FreeSlot(
            time_range=TimeRange(start=_london(2024, 11, 25, 10), end=_london(2024, 11, 25, 14)),
            granularity=Granularity.SIXTY_MINUTES,
        )
        busy = BusyInterval(
            start=_london(2024, 11, 25, 9), end=_london(2024, 11, 25, 10), source_id="a", title="Call"
        )
        result = AvailabilityResult(
            slots=(slot,),
            busy_slots=(busy,),
            total_free_minutes=240,
            total_busy_minutes=100,
            range=TimeRange(start=_london(2024, 11, 25), end=_london(2024, 11, 25, 23, 59, 59)),
            timezone="Europe/London",
            duration_minutes=60,
            working_hours=WorkingHours(),
            exclude_weekends=True,
            meeting_count=1,
            total_slots_found=1,
        )

        data = result.to_dict()

        assert data["availableSlots"] == [{
            "start": "2024-11-25T10:00:00+00:00",
            "end": "2024-11-25T14:00:00+00:00",
            "durationMinutes": 240,
            "granularity": "60min",
        }]
        assert data["totalAvailableSlots"] == 1
        assert data["busySlots"][0]["id"] == "a"
        assert data["summary"] == {
            "totalFreeMinutes": 240,
            "totalBusyMinutes": 100,
            "totalFreeHours": 4.0,
            "totalBusyHours": 1.7,
            "meetingCount": 1,
        }
        assert data["range"]["start"] == "2024-11-25T00:00:00+00:00"
        assert data["workingHours"] == {"start": "09:00", "end": "17:00"}
        assert data["excludeWeekends"] is True
        assert data["timezone"] == "Europe/London"
        assert data["durationMinutes"] == 60
