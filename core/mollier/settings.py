"""
Mollier Configuration Settings

User-facing settings are loaded from config.yaml via Home Assistant add-on.
Defaults live here and only here: the formula layer takes every value,
atmospheric pressure included, as an explicit argument.
"""

import logging
import math
import re
from dataclasses import dataclass, field

from .alignment import ALIGNMENT_STRATEGIES
from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)

DEFAULT_PRESSURE_KPA = 101.325

# Plausible atmospheric pressure range in kPa. Values outside are most
# likely given in Pa or hPa.
MIN_PRESSURE_KPA = 30.0
MAX_PRESSURE_KPA = 120.0


def _camel_to_snake(name: str) -> str:
    """Convert camelCase to snake_case."""
    s1 = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    return re.sub("([a-z0-9])([A-Z])", r"\1_\2", s1).lower()


def _slugify(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", name.lower()).strip("_")


def _as_float(value, key: str) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        raise ConfigurationError(f"{key} must be a number, got {value!r}")
    if not math.isfinite(number):
        raise ConfigurationError(f"{key} must be finite, got {value!r}")
    return number


def validate_pressure_kpa(value) -> float:
    """Validate an atmospheric pressure given in kPa.

    Raises:
        ConfigurationError: If the value is not a number or lies outside
            the plausible kPa range (e.g. given in Pa or hPa).
    """
    pressure = _as_float(value, "pressure_kpa")
    if not MIN_PRESSURE_KPA <= pressure <= MAX_PRESSURE_KPA:
        raise ConfigurationError(
            f"pressure_kpa={pressure} is outside [{MIN_PRESSURE_KPA}, {MAX_PRESSURE_KPA}] kPa "
            "(pressure must be given in kPa)"
        )
    return pressure


@dataclass(frozen=True)
class SensorSettings:
    """A temperature/humidity entity pair plotted as one trace."""

    id: str
    name: str
    temperature_entity: str
    humidity_entity: str
    color: str = "red"

    @classmethod
    def from_dict(cls, data: dict, index: int = 0) -> "SensorSettings":
        """Create from dictionary."""
        converted = {_camel_to_snake(k): v for k, v in data.items()}

        name = converted.get("name") or f"Sensor {index + 1}"
        temperature_entity = converted.get("temperature_entity")
        humidity_entity = converted.get("humidity_entity")
        if not temperature_entity or not humidity_entity:
            raise ConfigurationError(
                f"Sensor '{name}' needs both temperature_entity and humidity_entity"
            )

        return cls(
            id=str(converted.get("id") or _slugify(name) or f"sensor_{index + 1}"),
            name=name,
            temperature_entity=temperature_entity,
            humidity_entity=humidity_entity,
            color=converted.get("color") or "red",
        )


@dataclass(frozen=True)
class ComfortZoneSettings:
    """Declared comfort rectangle in (temperature, relative humidity) space."""

    t_min: float  # °C
    t_max: float  # °C
    rh_min: float  # %
    rh_max: float  # %
    color: str = "rgba(0,255,0,0.2)"
    name: str | None = None

    def __post_init__(self):
        if self.t_min > self.t_max:
            raise ConfigurationError(
                f"Comfort zone t_min ({self.t_min}) exceeds t_max ({self.t_max})"
            )
        if not 0 <= self.rh_min <= self.rh_max <= 100:
            raise ConfigurationError(
                f"Comfort zone humidity bounds must satisfy 0 <= rh_min <= rh_max <= 100, "
                f"got {self.rh_min}..{self.rh_max}"
            )

    @classmethod
    def from_dict(cls, data: dict) -> "ComfortZoneSettings":
        """Create from dictionary."""
        converted = {_camel_to_snake(k): v for k, v in data.items()}
        try:
            return cls(
                t_min=_as_float(converted["t_min"], "t_min"),
                t_max=_as_float(converted["t_max"], "t_max"),
                rh_min=_as_float(converted["rh_min"], "rh_min"),
                rh_max=_as_float(converted["rh_max"], "rh_max"),
                color=converted.get("color") or "rgba(0,255,0,0.2)",
                name=converted.get("name"),
            )
        except KeyError as e:
            raise ConfigurationError(f"Comfort zone is missing {e}")


def default_sensors() -> list[SensorSettings]:
    return [
        SensorSettings(
            id="sensor_1",
            name="Sensor 1",
            temperature_entity="sensor.temperature",
            humidity_entity="sensor.humidity",
            color="red",
        )
    ]


def default_comfort_zones() -> list[ComfortZoneSettings]:
    return [ComfortZoneSettings(t_min=20, t_max=25, rh_min=40, rh_max=60)]


@dataclass
class DiagramSettings:
    """Configuration for one Mollier diagram."""

    sensors: list[SensorSettings] = field(default_factory=default_sensors)
    comfort_zones: list[ComfortZoneSettings] = field(default_factory=default_comfort_zones)
    pressure_kpa: float = DEFAULT_PRESSURE_KPA
    title: str = "Mollier Diagram"
    history_hours: float = 24.0
    alignment: str = "exact"
    alignment_tolerance_seconds: float = 60.0
    refresh_interval_seconds: float = 300.0
    max_concurrent_fetches: int = 4

    def __post_init__(self):
        self.pressure_kpa = validate_pressure_kpa(self.pressure_kpa)
        if self.alignment not in ALIGNMENT_STRATEGIES:
            raise ConfigurationError(
                f"Unknown alignment: {self.alignment}. Must be one of {ALIGNMENT_STRATEGIES}"
            )
        for key in ("history_hours", "refresh_interval_seconds"):
            value = _as_float(getattr(self, key), key)
            if value <= 0:
                raise ConfigurationError(f"{key} must be positive")
            setattr(self, key, value)

        self.alignment_tolerance_seconds = _as_float(
            self.alignment_tolerance_seconds, "alignment_tolerance_seconds"
        )
        if self.alignment_tolerance_seconds < 0:
            raise ConfigurationError("alignment_tolerance_seconds must not be negative")

        self.max_concurrent_fetches = int(_as_float(self.max_concurrent_fetches, "max_concurrent_fetches"))
        if self.max_concurrent_fetches < 1:
            raise ConfigurationError("max_concurrent_fetches must be at least 1")

        ids = [s.id for s in self.sensors]
        duplicates = {i for i in ids if ids.count(i) > 1}
        if duplicates:
            raise ConfigurationError(f"Duplicate sensor ids: {sorted(duplicates)}")

    def get_sensor(self, sensor_id: str) -> SensorSettings | None:
        return next((s for s in self.sensors if s.id == sensor_id), None)

    @classmethod
    def from_dict(cls, data: dict) -> "DiagramSettings":
        """Create from add-on options.

        Missing keys fall back to defaults. An explicitly empty sensor or
        comfort zone list is kept empty.
        """
        converted = {_camel_to_snake(k): v for k, v in data.items()}

        # Legacy key from the Lovelace card configuration
        if "pressure_atm" in converted:
            converted.setdefault("pressure_kpa", converted.pop("pressure_atm"))

        if "sensors" in converted:
            converted["sensors"] = [
                SensorSettings.from_dict(s, index=i)
                for i, s in enumerate(converted["sensors"] or [])
            ]
        if "comfort_zones" in converted:
            converted["comfort_zones"] = [
                ComfortZoneSettings.from_dict(z) for z in converted["comfort_zones"] or []
            ]

        known = set(cls.__dataclass_fields__)
        unknown = set(converted) - known
        if unknown:
            logger.warning(f"Ignoring unknown diagram options: {sorted(unknown)}")

        return cls(**{k: v for k, v in converted.items() if k in known})
