"""
Adapters layer - Busy-interval sources (Google Calendar, JSON events file).
"""

from .google_calendar_client import GoogleCalendarClient
from .mock_calendar_client import MockCalendarClient

__all__ = ["GoogleCalendarClient", "MockCalendarClient"]
