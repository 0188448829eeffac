"""
Domain-specific exception hierarchy for the availability engine.
"""


class AvailabilityError(Exception):
    """Base class for all application-level errors."""


class ConfigurationError(AvailabilityError):
    """Raised when configuration values cannot be used."""


class InvalidTimezoneError(ConfigurationError):
    """Raised when a timezone identifier cannot be resolved."""


class CalendarAPIError(AvailabilityError):
    """Raised when calendar data cannot be fetched or parsed."""
