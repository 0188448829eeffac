"""
File-backed calendar client for running without Google credentials.
"""

import json
import logging
from pathlib import Path
from typing import List

import pendulum
from pendulum import DateTime

from ..domain.exceptions import CalendarAPIError
from ..domain.models import BusyInterval

logger = logging.getLogger(__name__)

DEFAULT_DATA_FILE = Path(__file__).parent / "mock_calendar_data.json"


class MockCalendarClient:
    """
    Client that serves busy intervals from a JSON events file.

    Expected format: a list of ``{"id", "title", "start", "end", "calendarId"}``
    objects with ISO-8601 times. Events without ``calendarId`` belong to
    ``primary``.
    """

    def __init__(self, data_file: Path | None = None):
        """
        Initialize the mock client.

        Args:
            data_file: Optional path to the events file; defaults to the
                bundled ``mock_calendar_data.json``
        """
        self.data_file = data_file or DEFAULT_DATA_FILE
        self.calendar_events = self._load_calendar_data()

    def _load_calendar_data(self) -> list:
        """Load mock calendar data from JSON file."""
        if not self.data_file.exists():
            raise CalendarAPIError(f"Events file not found: {self.data_file}")

        try:
            with open(self.data_file, "r", encoding="utf-8") as f:
                events = json.load(f)
        except json.JSONDecodeError as exc:
            raise CalendarAPIError(f"Invalid JSON in {self.data_file}: {exc}") from exc

        if not isinstance(events, list):
            raise CalendarAPIError("Events file must contain a list of events.")
        return events

    async def get_busy_intervals(
        self,
        calendar_ids: List[str],
        start_time: DateTime,
        end_time: DateTime,
        timezone: str,
    ) -> List[BusyInterval]:
        """
        Return busy intervals overlapping the window for the given calendars.

        Args:
            calendar_ids: Calendars to include
            start_time: Start of the time window
            end_time: End of the time window
            timezone: IANA timezone used for times without an offset

        Returns:
            List of BusyInterval objects
        """
        busy: List[BusyInterval] = []

        for index, event in enumerate(self.calendar_events):
            if event.get("calendarId", "primary") not in calendar_ids:
                continue

            try:
                event_start = pendulum.parse(event["start"], tz=timezone)
                event_end = pendulum.parse(event["end"], tz=timezone)
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping unparsable mock event %s: %s", event.get("id", index), exc)
                continue

            if event_start < end_time and event_end > start_time:
                busy.append(
                    BusyInterval(
                        start=event_start,
                        end=event_end,
                        source_id=str(event.get("id", index)),
                        title=event.get("title") or "Busy",
                    )
                )

        logger.debug("Loaded %d busy intervals from %s", len(busy), self.data_file)
        return busy
