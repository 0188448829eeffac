"""
Tests for zoned calendar arithmetic.
"""

from datetime import timedelta

import pendulum
import pytest

from availabilityfinder.domain.exceptions import InvalidTimezoneError
from availabilityfinder.domain.zoned import (
    civil_parts_of,
    civil_to_instant,
    end_of_day,
    normalize_hhmm,
    parse_hhmm,
    start_of_day,
    start_of_week,
    time_on_date,
    validate_timezone,
)


class TestCivilParts:
    """Tests for instant -> civil conversion."""

    def test_parts_in_other_zone(self):
        instant = pendulum.datetime(2024, 3, 14, 23, 30, tz="UTC")

        parts = civil_parts_of(instant, "Europe/Berlin")

        assert (parts.year, parts.month, parts.day) == (2024, 3, 15)
        assert (parts.hour, parts.minute) == (0, 30)
        assert parts.weekday == 5  # Friday

    def test_weekday_numbering_starts_on_sunday(self):
        sunday = pendulum.datetime(2024, 11, 24, 12, tz="Europe/London")
        saturday = pendulum.datetime(2024, 11, 23, 12, tz="Europe/London")

        assert civil_parts_of(sunday, "Europe/London").weekday == 0
        assert civil_parts_of(saturday, "Europe/London").weekday == 6


class TestCivilToInstant:
    """Tests for civil -> instant conversion across DST."""

    def test_offset_follows_dst(self):
        before = civil_to_instant(2024, 3, 9, 12, 0, 0, "America/New_York")
        after = civil_to_instant(2024, 3, 10, 12, 0, 0, "America/New_York")

        assert before.in_timezone("UTC").hour == 17  # EST, UTC-5
        assert after.in_timezone("UTC").hour == 16  # EDT, UTC-4

    def test_repeated_hour_resolves_to_utc_instants(self):
        """01:30 on the fall-back day occurs twice; fold picks which one."""
        earlier = civil_to_instant(2024, 11, 3, 1, 30, 0, "America/New_York", fold=0)
        later = civil_to_instant(2024, 11, 3, 1, 30, 0, "America/New_York")

        assert earlier == pendulum.datetime(2024, 11, 3, 5, 30, tz="UTC")
        assert later == pendulum.datetime(2024, 11, 3, 6, 30, tz="UTC")
        assert earlier.utcoffset() == later.utcoffset() == timedelta(0)

    @pytest.mark.parametrize(
        "instant, tz",
        [
            (pendulum.datetime(2024, 3, 14, 10, 0, 0, tz="UTC"), "Europe/London"),
            (pendulum.datetime(2024, 7, 1, 23, 59, 59, tz="UTC"), "Asia/Kolkata"),
            (pendulum.datetime(2024, 3, 31, 1, 30, 0, tz="UTC"), "Europe/London"),
            (pendulum.datetime(2024, 11, 3, 5, 30, 0, tz="UTC"), "America/New_York"),
            (pendulum.datetime(2024, 11, 3, 6, 30, 0, tz="UTC"), "America/New_York"),
            (pendulum.datetime(2024, 12, 31, 12, 0, 0, tz="UTC"), "Pacific/Auckland"),
        ],
    )
    def test_round_trip(self, instant, tz):
        parts = civil_parts_of(instant, tz)

        restored = civil_to_instant(
            parts.year, parts.month, parts.day,
            parts.hour, parts.minute, parts.second,
            tz,
            fold=parts.fold,
        )

        assert restored == instant


class TestDayBoundaries:
    """Tests for start/end of civil day helpers."""

    def test_start_and_end_of_day_use_civil_date(self):
        instant = pendulum.datetime(2024, 3, 14, 23, 30, tz="UTC")  # 00:30 on the 15th in Berlin

        assert start_of_day(instant, "Europe/Berlin") == pendulum.datetime(2024, 3, 14, 23, 0, tz="UTC")
        assert end_of_day(instant, "Europe/Berlin") == pendulum.datetime(2024, 3, 15, 22, 59, 59, tz="UTC")

    def test_start_of_week_is_monday(self):
        thursday = pendulum.datetime(2024, 3, 14, 10, tz="Europe/London")

        assert start_of_week(thursday, "Europe/London") == pendulum.datetime(2024, 3, 11, tz="Europe/London")

    def test_time_on_date(self):
        day = pendulum.datetime(2024, 11, 25, 3, tz="America/New_York")

        result = time_on_date(day, "14:30", "America/New_York")

        assert result == pendulum.datetime(2024, 11, 25, 14, 30, tz="America/New_York")

    def test_time_on_date_falls_back_on_malformed_input(self):
        day = pendulum.datetime(2024, 11, 25, tz="Europe/London")

        assert time_on_date(day, "nonsense", "Europe/London", "17:00") == pendulum.datetime(
            2024, 11, 25, 17, tz="Europe/London"
        )


class TestHHMM:
    """Tests for working-hour parsing."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("09:30", (9, 30)),
            ("9:05", (9, 5)),
            ("23:59", (23, 59)),
            ("24:00", (8, 0)),
            ("12:60", (8, 0)),
            ("noon", (8, 0)),
            ("", (8, 0)),
            (None, (8, 0)),
        ],
    )
    def test_parse_hhmm(self, value, expected):
        assert parse_hhmm(value, "08:00") == expected

    def test_normalize_hhmm(self):
        assert normalize_hhmm("7:5", "09:00") == "09:00"
        assert normalize_hhmm("7:05", "09:00") == "07:05"


class TestValidateTimezone:
    """Tests for timezone validation."""

    def test_known_timezone(self):
        assert validate_timezone("America/New_York") == "America/New_York"

    @pytest.mark.parametrize("name", ["Mars/Olympus_Mons", ""])
    def test_unknown_timezone(self, name):
        with pytest.raises(InvalidTimezoneError):
            validate_timezone(name)
