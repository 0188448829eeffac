"""
Domain layer - Pure availability logic without external dependencies.
"""

from .availability import AvailabilityCalculator, CivilDayRange, compute_availability
from .models import (
    AvailabilityResult,
    BusyInterval,
    EngineSettings,
    FreeSlot,
    Granularity,
    TimeRange,
    TimeWindowRequest,
    WorkingHours,
)
from .slot_calculator import SlotCalculator
from .window_inference import infer_window

__all__ = [
    "AvailabilityCalculator",
    "AvailabilityResult",
    "BusyInterval",
    "CivilDayRange",
    "EngineSettings",
    "FreeSlot",
    "Granularity",
    "SlotCalculator",
    "TimeRange",
    "TimeWindowRequest",
    "WorkingHours",
    "compute_availability",
    "infer_window",
]
