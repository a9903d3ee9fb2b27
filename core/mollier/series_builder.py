"""
Series Builder

Turns the raw temperature and humidity history of one sensor pair into a
plottable enthalpy-vs-temperature trace.
"""

import logging
from typing import Iterable, Sequence

from .alignment import AlignmentStrategy, ExactAlignment
from .exceptions import PsychrometricDomainError
from .models import EnthalpyPoint, HistorySample, Sample, Trace
from .psychrometrics import dew_point_c, enthalpy_kj_per_kg
from .settings import SensorSettings

logger = logging.getLogger(__name__)


def format_point_text(temperature: float, relative_humidity: float, enthalpy: float, dew_point: float) -> str:
    """Hover annotation for one plotted point, one quantity per line."""
    return "\n".join(
        [
            f"Temp: {temperature:g}°C",
            f"Hum: {relative_humidity:g}%",
            f"Enthalpy: {enthalpy:.1f} kJ/kg",
            f"Dew point: {dew_point:.1f}°C",
        ]
    )


def build_points(samples: Iterable[Sample], pressure_kpa: float) -> tuple[list[EnthalpyPoint], int]:
    """Project aligned samples onto the diagram.

    Samples outside the formula domain are excluded.

    Returns:
        (points in input order, number of rejected samples)
    """
    points = []
    rejected = 0
    for sample in samples:
        try:
            enthalpy = enthalpy_kj_per_kg(sample.temperature, sample.relative_humidity, pressure_kpa)
            dew_point = dew_point_c(sample.temperature, sample.relative_humidity)
        except PsychrometricDomainError as e:
            rejected += 1
            logger.debug(f"Rejected sample at {sample.timestamp}: {e}")
            continue

        points.append(
            EnthalpyPoint(
                timestamp=sample.timestamp,
                temperature=sample.temperature,
                relative_humidity=sample.relative_humidity,
                enthalpy=enthalpy,
                dew_point=dew_point,
                text=format_point_text(sample.temperature, sample.relative_humidity, enthalpy, dew_point),
            )
        )
    return points, rejected


def build_trace(
    sensor: SensorSettings,
    temperatures: Sequence[HistorySample],
    humidities: Sequence[HistorySample],
    pressure_kpa: float,
    alignment: AlignmentStrategy | None = None,
) -> Trace:
    """Build the trace for one sensor pair.

    Args:
        sensor: Sensor configuration (name, color)
        temperatures: Temperature history (°C)
        humidities: Relative humidity history (%)
        pressure_kpa: Atmospheric pressure
        alignment: How readings are paired (defaults to exact timestamps)

    Returns:
        Trace in temperature series order. Empty if either series is empty.
    """
    alignment = alignment or ExactAlignment()
    samples = alignment.align(temperatures, humidities)
    points, rejected = build_points(samples, pressure_kpa)

    unmatched = len(temperatures) - len(samples)
    if unmatched and humidities:
        logger.debug(f"{sensor.id}: {unmatched} temperature readings without humidity partner ({alignment.name})")
    if rejected:
        logger.warning(f"{sensor.id}: excluded {rejected} samples outside the psychrometric domain")

    return Trace(
        sensor_id=sensor.id,
        name=sensor.name,
        color=sensor.color,
        points=tuple(points),
        rejected_samples=rejected,
    )
