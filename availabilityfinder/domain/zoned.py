"""
Zoned calendar arithmetic.

Converts between absolute instants and civil (wall-clock) time in a named
IANA timezone. Every other engine component builds on these helpers, so they
are kept pure: no validation of the timezone here (see ``validate_timezone``)
and no sampling of the current time.
"""

from __future__ import annotations

import re
from typing import NamedTuple, Tuple

import pendulum
from pendulum import DateTime
from pendulum.tz.exceptions import InvalidTimezone

from .exceptions import InvalidTimezoneError

DEFAULT_WORKDAY_START = "09:00"
DEFAULT_WORKDAY_END = "17:00"

_HHMM_PATTERN = re.compile(r"^\s*(\d{1,2}):(\d{2})\s*$")


class CivilParts(NamedTuple):
    """Wall-clock breakdown of an instant. ``weekday`` is 0=Sunday..6=Saturday."""
    year: int
    month: int
    day: int
    hour: int
    minute: int
    second: int
    weekday: int
    fold: int = 0


def validate_timezone(name: str) -> str:
    """
    Ensure ``name`` is a resolvable IANA timezone identifier.

    Raises:
        InvalidTimezoneError: If the identifier is unknown
    """
    if not name or not isinstance(name, str):
        raise InvalidTimezoneError(f"Timezone identifier must be a non-empty string, got {name!r}")
    try:
        pendulum.timezone(name)
    except (InvalidTimezone, KeyError, ValueError) as exc:
        raise InvalidTimezoneError(f"Unknown timezone: {name}") from exc
    return name


def civil_parts_of(instant: DateTime, timezone: str) -> CivilParts:
    """Break an instant into civil parts as seen in ``timezone``."""
    local = instant.in_timezone(timezone)
    return CivilParts(
        year=local.year,
        month=local.month,
        day=local.day,
        hour=local.hour,
        minute=local.minute,
        second=local.second,
        weekday=local.isoweekday() % 7,
        fold=local.fold,
    )


def civil_to_instant(
    year: int,
    month: int,
    day: int,
    hour: int,
    minute: int,
    second: int,
    timezone: str,
    fold: int = 1,
) -> DateTime:
    """
    Resolve a civil wall-clock time in ``timezone`` to an instant.

    Times skipped by a DST gap resolve forward. Ambiguous times take the
    later offset unless ``fold=0`` asks for the earlier one. The result is
    expressed in UTC so instants from different zones compare by moment.
    """
    return pendulum.datetime(
        year, month, day, hour, minute, second,
        tz=timezone,
        fold=fold,
    ).in_timezone("UTC")


def start_of_day(instant: DateTime, timezone: str) -> DateTime:
    """Civil midnight of the day containing ``instant``."""
    parts = civil_parts_of(instant, timezone)
    return civil_to_instant(parts.year, parts.month, parts.day, 0, 0, 0, timezone)


def end_of_day(instant: DateTime, timezone: str) -> DateTime:
    """Civil 23:59:59 of the day containing ``instant``."""
    parts = civil_parts_of(instant, timezone)
    return civil_to_instant(parts.year, parts.month, parts.day, 23, 59, 59, timezone)


def add_civil_days(instant: DateTime, days: int, timezone: str) -> DateTime:
    """Move ``days`` calendar days forward, keeping the wall-clock time."""
    return instant.in_timezone(timezone).add(days=days).in_timezone("UTC")


def start_of_week(instant: DateTime, timezone: str) -> DateTime:
    """Civil midnight of the Monday of the week containing ``instant``."""
    local = instant.in_timezone(timezone)
    monday = local.subtract(days=local.isoweekday() - 1)
    return start_of_day(monday, timezone)


def parse_hhmm(value: str | None, default: str) -> Tuple[int, int]:
    """
    Parse an ``HH:MM`` 24h string, falling back to ``default`` when malformed.
    """
    for candidate in (value, default):
        if not candidate:
            continue
        match = _HHMM_PATTERN.match(candidate)
        if not match:
            continue
        hour, minute = int(match.group(1)), int(match.group(2))
        if 0 <= hour <= 23 and 0 <= minute <= 59:
            return hour, minute
    raise ValueError(f"Default working time {default!r} is not a valid HH:MM value")


def normalize_hhmm(value: str | None, default: str) -> str:
    """Return ``value`` in canonical ``HH:MM`` form, or the default."""
    hour, minute = parse_hhmm(value, default)
    return f"{hour:02d}:{minute:02d}"


def time_on_date(
    instant: DateTime,
    hhmm: str | None,
    timezone: str,
    default: str = DEFAULT_WORKDAY_START,
) -> DateTime:
    """Combine the civil date of ``instant`` with a wall-clock time."""
    hour, minute = parse_hhmm(hhmm, default)
    parts = civil_parts_of(instant, timezone)
    return civil_to_instant(parts.year, parts.month, parts.day, hour, minute, 0, timezone)
