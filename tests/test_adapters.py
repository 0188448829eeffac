"""
Tests for the busy-interval source adapters.
"""

import asyncio
import json

import pendulum
import pytest
import requests

from availabilityfinder.adapters.google_calendar_client import GoogleCalendarClient
from availabilityfinder.adapters.mock_calendar_client import MockCalendarClient
from availabilityfinder.domain.exceptions import CalendarAPIError

LONDON = "Europe/London"


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.exceptions.HTTPError(f"{self.status_code} Error")

    def json(self):
        return self._payload


class TestGoogleCalendarClient:
    """Tests for GoogleCalendarClient."""

    def test_query_freebusy(self, monkeypatch):
        captured = {}

        def fake_post(url, headers, json, timeout):
            captured.update(url=url, headers=headers, json=json, timeout=timeout)
            return FakeResponse({
                "calendars": {
                    "primary": {
                        "busy": [
                            {"start": "2024-11-25T09:00:00Z", "end": "2024-11-25T10:00:00Z"},
                            {"start": "garbage", "end": "2024-11-25T12:00:00Z"},
                        ]
                    },
                    "team@example.com": {"busy": [{"start": "2024-11-25T14:00:00Z", "end": "2024-11-25T15:00:00Z"}]},
                }
            })

        monkeypatch.setattr(requests, "post", fake_post)
        client = GoogleCalendarClient(access_token="token-123")

        busy = asyncio.run(
            client.get_busy_intervals(
                ["primary", "team@example.com"],
                pendulum.datetime(2024, 11, 25, tz=LONDON),
                pendulum.datetime(2024, 11, 25, 23, 59, 59, tz=LONDON),
                LONDON,
            )
        )

        assert captured["url"].endswith("/freeBusy")
        assert captured["headers"]["Authorization"] == "Bearer token-123"
        assert captured["json"]["items"] == [{"id": "primary"}, {"id": "team@example.com"}]
        assert captured["json"]["timeZone"] == LONDON
        assert [(b.source_id, b.start.hour) for b in busy] == [
            ("primary#0", 9),
            ("team@example.com#0", 14),
        ]

    def test_http_error_is_wrapped(self, monkeypatch):
        monkeypatch.setattr(requests, "post", lambda *args, **kwargs: FakeResponse({}, status_code=401))
        client = GoogleCalendarClient(access_token="expired")

        with pytest.raises(CalendarAPIError, match="Failed to fetch"):
            client.query_freebusy(
                ["primary"],
                pendulum.datetime(2024, 11, 25, tz=LONDON),
                pendulum.datetime(2024, 11, 26, tz=LONDON),
                LONDON,
            )

    def test_calendar_error_is_raised(self, monkeypatch):
        payload = {"calendars": {"nobody@example.com": {"errors": [{"domain": "global", "reason": "notFound"}]}}}
        monkeypatch.setattr(requests, "post", lambda *args, **kwargs: FakeResponse(payload))
        client = GoogleCalendarClient(access_token="token")

        with pytest.raises(CalendarAPIError, match="notFound"):
            client.query_freebusy(
                ["nobody@example.com"],
                pendulum.datetime(2024, 11, 25, tz=LONDON),
                pendulum.datetime(2024, 11, 26, tz=LONDON),
                LONDON,
            )


class TestMockCalendarClient:
    """Tests for the JSON file backed client."""

    def test_filters_by_calendar_and_window(self, tmp_path):
        events_file = tmp_path / "events.json"
        events_file.write_text(json.dumps([
            {"id": "1", "title": "Kickoff", "start": "2024-11-25T09:00:00", "end": "2024-11-25T10:00:00"},
            {"id": "2", "title": "Team", "calendarId": "team", "start": "2024-11-25T11:00:00", "end": "2024-11-25T12:00:00"},
            {"id": "3", "title": "Next week", "start": "2024-12-02T09:00:00", "end": "2024-12-02T10:00:00"},
            {"id": "4", "title": "Broken", "start": "not a date", "end": "2024-11-25T10:00:00"},
        ]), encoding="utf-8")
        client = MockCalendarClient(data_file=events_file)

        busy = asyncio.run(
            client.get_busy_intervals(
                ["primary"],
                pendulum.datetime(2024, 11, 25, tz="America/New_York"),
                pendulum.datetime(2024, 11, 25, 23, 59, 59, tz="America/New_York"),
                "America/New_York",
            )
        )

        assert [(b.source_id, b.title) for b in busy] == [("1", "Kickoff")]
        assert busy[0].start == pendulum.datetime(2024, 11, 25, 9, tz="America/New_York")

    def test_bundled_data_loads(self):
        client = MockCalendarClient()

        assert client.calendar_events

    def test_missing_file(self, tmp_path):
        with pytest.raises(CalendarAPIError, match="not found"):
            MockCalendarClient(data_file=tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        events_file = tmp_path / "events.json"
        events_file.write_text("{not json", encoding="utf-8")

        with pytest.raises(CalendarAPIError, match="Invalid JSON"):
            MockCalendarClient(data_file=events_file)
