"""
Application services for resolving calendar availability.

The service is the thin adapter between an outer request handler (tool
dispatch, CLI) and the pure engine. It validates the incoming query, resolves
the reference time, optionally fetches busy intervals through a calendar
client adapter, and delegates the calculation to ``AvailabilityCalculator``.
"""

from __future__ import annotations

import dataclasses
import logging
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Protocol, Sequence

import pendulum
from pendulum import DateTime
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..domain.availability import AvailabilityCalculator
from ..domain.intervals import find_conflicts
from ..domain.models import (
    AvailabilityResult,
    BusyInterval,
    EngineSettings,
    TimeWindowRequest,
    WorkingHours,
)
from ..domain.window_inference import infer_window
from ..domain.zoned import (
    DEFAULT_WORKDAY_END,
    DEFAULT_WORKDAY_START,
    add_civil_days,
    normalize_hhmm,
    validate_timezone,
)

logger = logging.getLogger(__name__)


class CalendarClientProtocol(Protocol):
    """Protocol describing the calendar client behaviour needed by the service."""

    async def get_busy_intervals(
        self,
        calendar_ids: List[str],
        start_time: DateTime,
        end_time: DateTime,
        timezone: str,
    ) -> List[BusyInterval]:
        """Return busy intervals for the given calendars and window."""


class BusyIntervalInput(BaseModel):
    """Busy interval as received from the request handler."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = ""
    title: str = "Busy"
    start: datetime
    end: datetime


class AvailabilityQuery(BaseModel):
    """
    Invocation contract of the availability tool.

    Accepts both snake_case and camelCase keys. Explicit start/end skip
    natural-language inference; the other explicit fields override whatever
    inference produced.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    natural_language_query: Optional[str] = None
    timezone: Optional[str] = None
    now_instant: Optional[datetime] = None
    explicit_start: Optional[datetime] = None
    explicit_end: Optional[datetime] = None
    duration_minutes: Optional[int] = None
    working_hours_start: Optional[str] = None
    working_hours_end: Optional[str] = None
    exclude_weekends: Optional[bool] = None
    busy_intervals: List[BusyIntervalInput] = Field(default_factory=list)


def to_instant(value: datetime, timezone: str) -> DateTime:
    """Convert a stdlib datetime to an instant; naive values are read in ``timezone``."""
    return pendulum.instance(value, tz=timezone)


class AvailabilityService:
    """
    Orchestrates busy-interval retrieval and availability calculation.

    Dependency inversion toward a protocol makes it easy to plug in the
    Google Calendar adapter, the file-backed mock, or nothing at all when the
    caller already holds the busy intervals.
    """

    def __init__(
        self,
        settings: EngineSettings | None = None,
        calendar_client: CalendarClientProtocol | None = None,
        default_timezone: str = "UTC",
        calendar_ids: Sequence[str] = ("primary",),
        clock: Callable[[str], DateTime] = pendulum.now,
    ) -> None:
        self._settings = settings or EngineSettings()
        self._calendar_client = calendar_client
        self._default_timezone = default_timezone
        self._calendar_ids = list(calendar_ids)
        self._clock = clock
        self._calculator = AvailabilityCalculator(settings=self._settings)

    def build_request(self, query: AvailabilityQuery) -> TimeWindowRequest:
        """
        Turn a query into a normalized window request.

        Raises:
            InvalidTimezoneError: If the timezone cannot be resolved
        """
        tz = validate_timezone(query.timezone or self._default_timezone)
        now = to_instant(query.now_instant, tz) if query.now_instant else self._clock(tz)

        if query.explicit_start or query.explicit_end:
            start = to_instant(query.explicit_start, tz) if query.explicit_start else now
            if query.explicit_end:
                end = to_instant(query.explicit_end, tz)
            else:
                end = add_civil_days(start, 7, tz)
            request = TimeWindowRequest.normalized(
                start,
                end,
                tz,
                max_range_days=self._settings.max_range_days,
                duration_minutes=self._settings.default_duration_minutes,
                working_hours=self._settings.working_hours,
                exclude_weekends=self._settings.exclude_weekends,
            )
        else:
            request = infer_window(
                query.natural_language_query or "",
                tz,
                now,
                settings=self._settings,
            )

        return self._apply_overrides(request, query)

    def _apply_overrides(
        self,
        request: TimeWindowRequest,
        query: AvailabilityQuery,
    ) -> TimeWindowRequest:
        changes: Dict[str, Any] = {}

        if query.duration_minutes is not None:
            changes["duration_minutes"] = self._settings.clamp_duration(query.duration_minutes)

        if query.working_hours_start is not None or query.working_hours_end is not None:
            changes["working_hours"] = WorkingHours(
                start=normalize_hhmm(
                    query.working_hours_start or request.working_hours.start,
                    DEFAULT_WORKDAY_START,
                ),
                end=normalize_hhmm(
                    query.working_hours_end or request.working_hours.end,
                    DEFAULT_WORKDAY_END,
                ),
            )

        if query.exclude_weekends is not None:
            changes["exclude_weekends"] = query.exclude_weekends

        return dataclasses.replace(request, **changes) if changes else request

    def busy_from_query(self, query: AvailabilityQuery, timezone: str) -> List[BusyInterval]:
        return [
            BusyInterval(
                start=to_instant(item.start, timezone),
                end=to_instant(item.end, timezone),
                source_id=item.id,
                title=item.title,
            )
            for item in query.busy_intervals
        ]

    def resolve(
        self,
        query: AvailabilityQuery,
        extra_busy: Sequence[BusyInterval] = (),
    ) -> AvailabilityResult:
        """
        Compute availability from the busy intervals carried by the query.

        This never performs I/O.
        """
        request = self.build_request(query)
        busy = self.busy_from_query(query, request.timezone) + list(extra_busy)
        logger.debug(
            "Resolving availability %s - %s in %s with %d busy intervals",
            request.start, request.end, request.timezone, len(busy),
        )
        return self._calculator.compute(request, busy)

    async def fetch_busy_intervals(
        self,
        *,
        start: DateTime,
        end: DateTime,
        timezone: str,
    ) -> List[BusyInterval]:
        """Fetch busy intervals from the configured calendar client."""
        if self._calendar_client is None:
            return []

        busy = await self._calendar_client.get_busy_intervals(
            calendar_ids=self._calendar_ids,
            start_time=start,
            end_time=end,
            timezone=timezone,
        )
        logger.info("Fetched %d busy intervals from calendar", len(busy))
        return busy

    async def find_availability(self, query: AvailabilityQuery) -> AvailabilityResult:
        """
        Fetch busy data for the query window, then compute availability.
        """
        request = self.build_request(query)
        fetched = await self.fetch_busy_intervals(
            start=request.start,
            end=request.end,
            timezone=request.timezone,
        )
        busy = self.busy_from_query(query, request.timezone) + fetched
        return self._calculator.compute(request, busy)

    @staticmethod
    def check_availability(
        start: DateTime,
        end: DateTime,
        busy: Sequence[BusyInterval],
        timezone: str,
    ) -> Dict[str, Any]:
        """Report whether ``[start, end]`` is free and which events conflict."""
        conflicts = find_conflicts(start, end, busy)
        return {
            "available": not conflicts,
            "conflicts": [interval.to_dict(timezone) for interval in conflicts],
        }

    async def check_window(
        self,
        start: DateTime,
        end: DateTime,
        timezone: str | None = None,
    ) -> Dict[str, Any]:
        """Fetch busy data around a proposed meeting and check it for conflicts."""
        tz = validate_timezone(timezone or self._default_timezone)
        busy = await self.fetch_busy_intervals(start=start, end=end, timezone=tz)
        return self.check_availability(start, end, busy, tz)
