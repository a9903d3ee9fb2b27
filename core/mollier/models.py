"""
Mollier Data Models

Derived diagram entities. All of them are recomputed on every refresh
and never mutated after creation.
"""

from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone


@dataclass(frozen=True)
class HistorySample:
    """One state change fetched from the history source."""

    timestamp: datetime
    value: float


@dataclass(frozen=True)
class Sample:
    """A temperature reading paired with a humidity reading."""

    timestamp: datetime
    temperature: float  # °C
    relative_humidity: float  # %


@dataclass(frozen=True)
class EnthalpyPoint:
    """A sample projected onto the Mollier diagram."""

    timestamp: datetime
    temperature: float  # °C
    relative_humidity: float  # %
    enthalpy: float  # kJ/kg
    dew_point: float  # °C
    text: str  # Hover annotation, one line per quantity


@dataclass(frozen=True)
class Trace:
    """Plotted history of one sensor pair."""

    sensor_id: str
    name: str
    color: str
    points: tuple[EnthalpyPoint, ...] = ()
    rejected_samples: int = 0  # Samples excluded for domain errors
    error: str | None = None  # Fetch failure, if any

    @property
    def x(self) -> list[float]:
        return [p.temperature for p in self.points]

    @property
    def y(self) -> list[float]:
        return [p.enthalpy for p in self.points]


@dataclass(frozen=True)
class Curve:
    """Constant relative humidity line in (temperature, enthalpy) space."""

    relative_humidity: float
    temperatures: tuple[float, ...]
    enthalpies: tuple[float, ...]

    @property
    def name(self) -> str:
        return f"RH {self.relative_humidity:g}%"


@dataclass(frozen=True)
class ZoneRegion:
    """Comfort zone projected to an axis-aligned enthalpy rectangle."""

    x0: float  # t_min, °C
    x1: float  # t_max, °C
    y0: float  # enthalpy at (t_min, rh_min), kJ/kg
    y1: float  # enthalpy at (t_max, rh_max), kJ/kg
    color: str
    name: str | None = None


@dataclass(frozen=True)
class TimeWindow:
    """Closed time interval covered by the plotted history."""

    start: datetime
    end: datetime

    @classmethod
    def last(cls, hours: float, now: datetime | None = None) -> "TimeWindow":
        """Window ending now and reaching `hours` back."""
        end = now or datetime.now(timezone.utc)
        return cls(start=end - timedelta(hours=hours), end=end)


@dataclass(frozen=True)
class AxisLabels:
    x: str = "Temperature"
    y: str = "Enthalpy"
    x_unit: str = "°C"
    y_unit: str = "kJ/kg"


@dataclass(frozen=True)
class DiagramDescription:
    """Everything a 2-D chart renderer needs to draw the diagram."""

    title: str
    traces: tuple[Trace, ...]
    curves: tuple[Curve, ...]
    regions: tuple[ZoneRegion, ...]
    axis_labels: AxisLabels
    time_window: TimeWindow
    pressure_kpa: float

    def to_dict(self) -> dict:
        """Serialize to plain JSON-compatible types."""
        data = asdict(self)
        data["time_window"] = {
            "start": self.time_window.start.isoformat(),
            "end": self.time_window.end.isoformat(),
        }
        for trace in data["traces"]:
            for point in trace["points"]:
                point["timestamp"] = point["timestamp"].isoformat()
        for curve, source in zip(data["curves"], self.curves):
            curve["name"] = source.name
        return data


@dataclass(frozen=True)
class SensorHistory:
    """Fetched raw series for one configured sensor."""

    sensor_id: str
    temperatures: tuple[HistorySample, ...] = ()
    humidities: tuple[HistorySample, ...] = ()
    error: str | None = None


@dataclass(frozen=True)
class DataSnapshot:
    """Fully resolved result of the fetch phase of one refresh."""

    window: TimeWindow
    histories: dict[str, SensorHistory] = field(default_factory=dict)
