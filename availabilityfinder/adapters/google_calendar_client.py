"""
Google Calendar API client for fetching busy intervals.
"""

import asyncio
import logging
from typing import Any, Dict, List

import pendulum
import requests
from pendulum import DateTime

from ..domain.exceptions import CalendarAPIError
from ..domain.models import BusyInterval

logger = logging.getLogger(__name__)


class GoogleCalendarClient:
    """
    Client for Google Calendar free/busy lookups.

    Uses the /freeBusy endpoint, which returns busy blocks without event
    details, so intervals are titled "Busy".
    """

    CALENDAR_API_ENDPOINT = "https://www.googleapis.com/calendar/v3"

    def __init__(self, access_token: str, timeout: float = 30):
        """
        Initialize the Google Calendar client.

        Args:
            access_token: Valid OAuth access token with calendar read scope
            timeout: Request timeout in seconds
        """
        self.access_token = access_token
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {access_token}",
            "Content-Type": "application/json"
        }

    async def get_busy_intervals(
        self,
        calendar_ids: List[str],
        start_time: DateTime,
        end_time: DateTime,
        timezone: str,
    ) -> List[BusyInterval]:
        """Async wrapper running the blocking HTTP call in a worker thread."""
        return await asyncio.to_thread(
            self.query_freebusy, calendar_ids, start_time, end_time, timezone
        )

    def query_freebusy(
        self,
        calendar_ids: List[str],
        start_time: DateTime,
        end_time: DateTime,
        timezone: str,
    ) -> List[BusyInterval]:
        """
        Get busy intervals for one or more calendars.

        Args:
            calendar_ids: Calendar identifiers (e.g. "primary" or an email)
            start_time: Start of the time window
            end_time: End of the time window
            timezone: IANA timezone identifier

        Returns:
            List of BusyInterval objects across all calendars

        Raises:
            CalendarAPIError: If the API call fails
        """
        url = f"{self.CALENDAR_API_ENDPOINT}/freeBusy"

        payload = {
            "timeMin": start_time.in_timezone("UTC").to_iso8601_string(),
            "timeMax": end_time.in_timezone("UTC").to_iso8601_string(),
            "timeZone": timezone,
            "items": [{"id": calendar_id} for calendar_id in calendar_ids],
        }

        try:
            response = requests.post(
                url,
                headers=self.headers,
                json=payload,
                timeout=self.timeout
            )
            response.raise_for_status()
            data = response.json()

        except requests.exceptions.RequestException as exc:
            raise CalendarAPIError(f"Failed to fetch free/busy from Google Calendar: {exc}") from exc
        except ValueError as exc:
            raise CalendarAPIError(f"Google Calendar returned invalid JSON: {exc}") from exc

        return self._parse_freebusy_response(data)

    def _parse_freebusy_response(self, response_data: Dict[str, Any]) -> List[BusyInterval]:
        """
        Parse the freeBusy API response into our domain model.

        Response format:
        {
            "calendars": {
                "primary": {
                    "busy": [{"start": "...", "end": "..."}],
                    "errors": [{"domain": "global", "reason": "notFound"}]
                }
            }
        }
        """
        busy: List[BusyInterval] = []

        for calendar_id, calendar in response_data.get("calendars", {}).items():
            errors = calendar.get("errors") or []
            if errors:
                reasons = ", ".join(error.get("reason", "unknown") for error in errors)
                raise CalendarAPIError(f"Calendar {calendar_id} could not be queried: {reasons}")

            for index, item in enumerate(calendar.get("busy", [])):
                try:
                    start = pendulum.parse(item["start"])
                    end = pendulum.parse(item["end"])
                except (KeyError, TypeError, ValueError) as exc:
                    logger.warning("Could not parse busy block in %s: %s", calendar_id, exc)
                    continue

                busy.append(
                    BusyInterval(
                        start=start,
                        end=end,
                        source_id=f"{calendar_id}#{index}",
                        title="Busy",
                    )
                )

        return busy
