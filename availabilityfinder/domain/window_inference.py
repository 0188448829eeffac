"""
Natural-language window inference.

Maps utterances such as "free on monday", "30 min tomorrow" or "this week"
to a concrete ``TimeWindowRequest``. The mapping is deterministic: the
reference instant is always passed in, never sampled.
"""

import re
from typing import Optional

from pendulum import DateTime

from .models import EngineSettings, TimeWindowRequest, WorkingHours
from .zoned import add_civil_days, end_of_day, start_of_day, start_of_week

EARLY_MORNING_START = "08:00"
EVENING_END = "19:00"

WEEKDAYS = {
    "monday": 1,
    "tuesday": 2,
    "wednesday": 3,
    "thursday": 4,
    "friday": 5,
    "saturday": 6,
    "sunday": 7,
}

_MINUTES_PATTERN = re.compile(r"(\d+(?:\.\d+)?)\s*(?:minutes?|mins?)\b")
_HOURS_PATTERN = re.compile(r"(\d+(?:\.\d+)?)(?:\s*(?:hours?|hrs?)\b|h(\d{2})?\b)")
_HALF_HOUR_PATTERN = re.compile(r"\bhalf(?:\s+an|\s+a|-)?\s*hour\b")
_QUARTER_HOUR_PATTERN = re.compile(r"\bquarter(?:\s+of\s+an|\s+an|-)?\s*hour\b")
_WEEKDAY_PATTERN = re.compile(r"\b(" + "|".join(WEEKDAYS) + r")\b")
_NEXT_PATTERN = re.compile(r"\bnext\b|\bthis\s+coming\b")


def extract_duration(text: str) -> Optional[int]:
    """
    Return the meeting length mentioned in ``text`` in minutes, if any.

    "1 hour 30 minutes" and the compact "1h30" both add up to 90.
    """
    if _QUARTER_HOUR_PATTERN.search(text):
        return 15
    if _HALF_HOUR_PATTERN.search(text):
        return 30

    minutes = 0.0
    found = False

    hours_match = _HOURS_PATTERN.search(text)
    if hours_match:
        minutes += float(hours_match.group(1)) * 60
        found = True
        if hours_match.group(2):
            return int(round(minutes)) + int(hours_match.group(2))

    minutes_match = _MINUTES_PATTERN.search(text)
    if minutes_match:
        minutes += float(minutes_match.group(1))
        found = True

    return int(round(minutes)) if found else None


def _day_window(day: DateTime, timezone: str):
    return start_of_day(day, timezone), end_of_day(day, timezone)


def _week_window(anchor: DateTime, timezone: str, weeks_ahead: int):
    monday = add_civil_days(start_of_week(anchor, timezone), 7 * weeks_ahead, timezone)
    sunday = add_civil_days(monday, 6, timezone)
    return start_of_day(monday, timezone), end_of_day(sunday, timezone)


def infer_window_bounds(text: str, now: DateTime, timezone: str):
    """
    Resolve the ``(start, end)`` pair a phrase refers to. First match wins.
    """
    if re.search(r"\btoday\b", text):
        return _day_window(now, timezone)

    if re.search(r"\btomorrow\b", text):
        return _day_window(add_civil_days(now, 1, timezone), timezone)

    if re.search(r"\bnext\s+week\b", text):
        return _week_window(now, timezone, weeks_ahead=1)

    if re.search(r"\bthis\s+week\b", text):
        return _week_window(now, timezone, weeks_ahead=0)

    weekday_match = _WEEKDAY_PATTERN.search(text)
    if weekday_match:
        target = WEEKDAYS[weekday_match.group(1)]
        current = now.in_timezone(timezone).isoweekday()
        days_ahead = (target - current) % 7
        if _NEXT_PATTERN.search(text):
            days_ahead += 7
        return _day_window(add_civil_days(now, days_ahead, timezone), timezone)

    return now, add_civil_days(now, 7, timezone)


def infer_window(
    text: str,
    timezone: str,
    now: DateTime,
    settings: EngineSettings | None = None,
) -> TimeWindowRequest:
    """
    Map a free-text availability question to a window request.

    Args:
        text: The user's utterance (case is ignored)
        timezone: IANA timezone the utterance is interpreted in
        now: Reference instant for relative phrases
        settings: Engine defaults (duration, working hours, range cap)

    Returns:
        Normalized TimeWindowRequest
    """
    settings = settings or EngineSettings()
    text = (text or "").lower()

    duration = extract_duration(text)
    duration_minutes = settings.clamp_duration(
        duration if duration is not None else settings.default_duration_minutes
    )

    start, end = infer_window_bounds(text, now, timezone)

    work_start = settings.working_hours.start
    work_end = settings.working_hours.end
    if "early morning" in text:
        work_start = EARLY_MORNING_START
    if "evening" in text:
        work_end = EVENING_END

    exclude_weekends = settings.exclude_weekends and not re.search(r"\bweekends?\b", text)

    return TimeWindowRequest.normalized(
        start,
        end,
        timezone,
        max_range_days=settings.max_range_days,
        duration_minutes=duration_minutes,
        working_hours=WorkingHours(start=work_start, end=work_end),
        exclude_weekends=exclude_weekends,
    )
