"""
Configuration management using Pydantic models loaded from YAML.
"""

import re
from pathlib import Path
from typing import List, Literal

import pendulum
import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from .domain.availability import AvailabilityEngine
from .domain.exceptions import ConfigurationError
from .domain.models import MINUTES_PER_DAY, OperatingWindow
from .domain.slot_calculator import DEFAULT_CELL_MINUTES, DEFAULT_STEP_MINUTES, SlotCalculator
from .domain.time_codec import MARKER_SETS, TimeCodec

_CLOCK_PATTERN = re.compile(r"^(\d{1,2}):(\d{2})$")


def _clock_to_minutes(value: str) -> int:
    match = _CLOCK_PATTERN.match(value.strip())
    if not match:
        raise ValueError(f"Expected a HH:MM time, got {value!r}")
    hour, minute = int(match.group(1)), int(match.group(2))
    total = hour * 60 + minute
    if minute > 59 or total > MINUTES_PER_DAY:
        raise ValueError(f"Time out of range: {value!r}")
    return total


class WindowConfig(BaseModel):
    """Daily opening hours."""
    start: str = "09:00"
    end: str = "19:00"

    @field_validator("start", "end")
    @classmethod
    def validate_clock(cls, v: str) -> str:
        """Validate the value is a HH:MM time of day."""
        _clock_to_minutes(v)
        return v.strip()

    def start_minutes(self) -> int:
        return _clock_to_minutes(self.start)

    def end_minutes(self) -> int:
        return _clock_to_minutes(self.end)


class DurationOption(BaseModel):
    """Duration catalog entry offered for a service."""
    value: str  # Duration string stored with the booking, e.g. "1.5 hr"
    label: str
    price: float = 0

    @field_validator("value")
    @classmethod
    def validate_value(cls, v: str) -> str:
        """Ensure the duration string decodes to whole minutes."""
        TimeCodec.parse_duration(v)
        return v

    def minutes(self) -> int:
        return TimeCodec.parse_duration(self.value)


class StoreConfig(BaseModel):
    """Where approved bookings are read from."""
    kind: Literal["json", "rest"] = "json"
    path: Path = Path("bookings.json")
    url: str = ""
    api_key: str = ""
    table: str = "bookings"
    timeout: float = 30

    @model_validator(mode="after")
    def validate_rest_settings(self) -> "StoreConfig":
        """A REST store needs a base URL."""
        if self.kind == "rest" and not self.url:
            raise ValueError("store.url is required when store.kind is 'rest'")
        return self


def _default_duration_options() -> List[DurationOption]:
    return [
        DurationOption(value="30 mins", label="30 min", price=100),
        DurationOption(value="1 hr", label="1 hour", price=150),
        DurationOption(value="1.5 hr", label="1.5 hours", price=200),
    ]


class AppConfig(BaseModel):
    """Application configuration."""
    window: WindowConfig = Field(default_factory=WindowConfig)
    step_minutes: int = DEFAULT_STEP_MINUTES
    cell_minutes: int = DEFAULT_CELL_MINUTES
    use_24_hour: bool = False
    markers: str = "arabic"
    timezone: str = "Asia/Jerusalem"
    duration_options: List[DurationOption] = Field(default_factory=_default_duration_options)
    store: StoreConfig = Field(default_factory=StoreConfig)

    @field_validator("markers")
    @classmethod
    def validate_markers(cls, value: str) -> str:
        """Only known meridiem marker sets are accepted."""
        key = value.lower()
        if key not in MARKER_SETS:
            raise ValueError(f"markers must be one of {sorted(MARKER_SETS)}, got {value!r}")
        return key

    @field_validator("timezone")
    @classmethod
    def validate_timezone(cls, value: str) -> str:
        """Ensure the timezone is a known IANA name."""
        try:
            pendulum.timezone(value)
        except Exception as exc:
            raise ValueError(f"Unknown timezone: {value!r}") from exc
        return value

    @field_validator("duration_options")
    @classmethod
    def validate_duration_options(cls, value: List[DurationOption]) -> List[DurationOption]:
        """The catalog must offer at least one duration and no duplicate values."""
        if not value:
            raise ValueError("duration_options must not be empty")
        seen: set[str] = set()
        for option in value:
            if option.value in seen:
                raise ValueError(f"Duplicate duration option: {option.value}")
            seen.add(option.value)
        return value

    @model_validator(mode="after")
    def validate_window(self) -> "AppConfig":
        """Ensure the window is well formed and both cadences tile it."""
        window = self.operating_window()
        window.validate_cadence(self.step_minutes)
        window.validate_cadence(self.cell_minutes)
        return self

    def operating_window(self) -> OperatingWindow:
        return OperatingWindow(
            day_start_minutes=self.window.start_minutes(),
            day_end_minutes=self.window.end_minutes(),
        )

    def codec(self) -> TimeCodec:
        return TimeCodec(self.operating_window(), markers=MARKER_SETS[self.markers])

    def slot_calculator(self) -> SlotCalculator:
        """Build a calculator wired with this configuration's window and cadences."""
        window = self.operating_window()
        engine = AvailabilityEngine(window, codec=self.codec())
        return SlotCalculator(
            window,
            engine=engine,
            step_minutes=self.step_minutes,
            cell_minutes=self.cell_minutes,
            use_24_hour=self.use_24_hour,
        )

    def find_duration_option(self, value: str) -> DurationOption | None:
        """Find a catalog entry by its duration value or label."""
        for option in self.duration_options:
            if option.value.lower() == value.lower() or option.label.lower() == value.lower():
                return option
        return None

    def resolve_duration(self, value: str | None) -> DurationOption:
        """
        Resolve a requested duration to a catalog entry.

        Args:
            value: Duration value or label; None selects the first option

        Raises:
            ConfigurationError: If the duration is not offered
        """
        if value is None:
            return self.duration_options[0]

        option = self.find_duration_option(value)
        if option is None:
            offered = ", ".join(o.value for o in self.duration_options)
            raise ConfigurationError(f"Duration {value!r} is not offered. Choose one of: {offered}")
        return option

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
            config = cls(**data)
        except ValidationError as exc:
            raise ConfigurationError(f"Invalid configuration in {config_path}:\n{exc}") from exc

        # Relative store paths are resolved against the config file's directory
        if not config.store.path.is_absolute():
            config.store.path = config_path.parent / config.store.path

        return config


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
