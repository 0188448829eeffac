"""
Configuration management using Pydantic models loaded from YAML.

The configuration is read once at process start and turned into an
``EngineSettings`` value that is passed down to the engine.
"""

from pathlib import Path
from typing import List

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.exceptions import ConfigurationError, InvalidTimezoneError
from .domain.models import EngineSettings, WorkingHours
from .domain.zoned import parse_hhmm, validate_timezone


def _validate_hhmm(value: str) -> str:
    sentinel = "invalid"
    try:
        hour, minute = parse_hhmm(value, sentinel)
    except ValueError:
        raise ValueError(f"Expected a HH:MM time between 00:00 and 23:59, got {value!r}") from None
    return f"{hour:02d}:{minute:02d}"


class DefaultsConfig(BaseModel):
    """Default settings for availability searches."""
    duration_minutes: int = 60
    working_hours_start: str = "09:00"
    working_hours_end: str = "17:00"
    exclude_weekends: bool = True

    @field_validator("duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure meeting duration is within the supported range."""
        if not 15 <= value <= 240:
            raise ValueError(f"duration_minutes must be between 15 and 240, got {value}")
        return value

    @field_validator("working_hours_start", "working_hours_end")
    @classmethod
    def validate_time(cls, value: str) -> str:
        """Validate and canonicalise HH:MM values."""
        return _validate_hhmm(value)

    @model_validator(mode="after")
    def validate_hours_order(self) -> "DefaultsConfig":
        """Ensure the configured window opens before it closes."""
        if self.working_hours_end <= self.working_hours_start:
            raise ValueError("working_hours_end must be later than working_hours_start")
        return self


class LimitsConfig(BaseModel):
    """Result and range limits."""
    max_slots: int = 25
    max_range_days: int = 30

    @field_validator("max_slots", "max_range_days")
    @classmethod
    def validate_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("limits must be greater than zero")
        return value


class AppConfig(BaseModel):
    """Application configuration."""
    timezone: str = "Europe/London"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    limits: LimitsConfig = Field(default_factory=LimitsConfig)
    calendar_ids: List[str] = Field(default_factory=lambda: ["primary"])

    @field_validator("timezone")
    @classmethod
    def validate_timezone_name(cls, value: str) -> str:
        """Reject timezone identifiers the tz database does not know."""
        try:
            return validate_timezone(value)
        except InvalidTimezoneError as exc:
            raise ValueError(str(exc)) from exc

    @field_validator("calendar_ids")
    @classmethod
    def validate_calendar_ids(cls, value: List[str]) -> List[str]:
        """Drop blanks and duplicates while preserving order."""
        seen: set[str] = set()
        deduped: List[str] = []
        for calendar_id in value:
            calendar_id = calendar_id.strip()
            if calendar_id and calendar_id not in seen:
                deduped.append(calendar_id)
                seen.add(calendar_id)
        if not deduped:
            raise ValueError("calendar_ids must contain at least one calendar")
        return deduped

    def to_engine_settings(self) -> EngineSettings:
        """Build the immutable settings struct consumed by the engine."""
        return EngineSettings(
            default_duration_minutes=self.defaults.duration_minutes,
            working_hours=WorkingHours(
                start=self.defaults.working_hours_start,
                end=self.defaults.working_hours_end,
            ),
            exclude_weekends=self.defaults.exclude_weekends,
            max_slots=self.limits.max_slots,
            max_range_days=self.limits.max_range_days,
        )

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ConfigurationError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ConfigurationError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ConfigurationError("Config file must contain a mapping at the root level.")

        try:
            return cls(**data)
        except ValueError as exc:
            raise ConfigurationError(f"Invalid configuration in {config_path}: {exc}") from exc

    @classmethod
    def load(cls, config_path: Path | None = None) -> "AppConfig":
        """
        Load from ``config_path``, or from the default location if present.

        Built-in defaults are used when no explicit path is given and no
        config file exists at the default location.
        """
        if config_path is not None:
            return cls.load_from_yaml(config_path)

        default_path = get_default_config_path()
        if default_path.exists():
            return cls.load_from_yaml(default_path)
        return cls()


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
