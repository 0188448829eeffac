"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .availability_service import (
    AvailabilityQuery,
    AvailabilityService,
    BusyIntervalInput,
    CalendarClientProtocol,
)

__all__ = [
    "AvailabilityQuery",
    "AvailabilityService",
    "BusyIntervalInput",
    "CalendarClientProtocol",
]
