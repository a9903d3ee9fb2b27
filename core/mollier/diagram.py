"""
Diagram Assembler

Combines sensor traces, reference curves and comfort zone regions into one
renderer-neutral diagram description. compute_diagram is the pure compute
phase of a refresh: it works only on an already fetched DataSnapshot.
"""

import logging
from datetime import datetime
from typing import Iterable

from .alignment import get_alignment_strategy
from .comfort_zones import generate_comfort_zones
from .models import AxisLabels, Curve, DataSnapshot, DiagramDescription, TimeWindow, Trace, ZoneRegion
from .reference_curves import generate_rh_curves
from .series_builder import build_trace
from .settings import DiagramSettings

logger = logging.getLogger(__name__)


def assemble_diagram(
    traces: Iterable[Trace],
    curves: Iterable[Curve],
    regions: Iterable[ZoneRegion],
    time_window: TimeWindow,
    pressure_kpa: float,
    title: str = "Mollier Diagram",
) -> DiagramDescription:
    """Bundle computed parts into a diagram description."""
    return DiagramDescription(
        title=title,
        traces=tuple(traces),
        curves=tuple(curves),
        regions=tuple(regions),
        axis_labels=AxisLabels(),
        time_window=time_window,
        pressure_kpa=pressure_kpa,
    )


def compute_diagram(
    snapshot: DataSnapshot,
    settings: DiagramSettings,
) -> DiagramDescription:
    """Compute the full diagram from fetched history.

    A sensor missing from the snapshot, or whose fetch failed, gets an
    empty trace carrying the error. Other sensors are unaffected.
    """
    alignment = get_alignment_strategy(settings.alignment, settings.alignment_tolerance_seconds)

    traces = []
    for sensor in settings.sensors:
        history = snapshot.histories.get(sensor.id)
        if history is None or history.error:
            error = history.error if history else "No history fetched"
            logger.warning(f"{sensor.id}: no trace ({error})")
            traces.append(Trace(sensor_id=sensor.id, name=sensor.name, color=sensor.color, error=error))
            continue

        traces.append(
            build_trace(
                sensor,
                history.temperatures,
                history.humidities,
                settings.pressure_kpa,
                alignment=alignment,
            )
        )

    return assemble_diagram(
        traces=traces,
        curves=generate_rh_curves(settings.pressure_kpa),
        regions=generate_comfort_zones(settings.comfort_zones, settings.pressure_kpa),
        time_window=snapshot.window,
        pressure_kpa=settings.pressure_kpa,
        title=settings.title,
    )


def empty_snapshot(settings: DiagramSettings, now: datetime | None = None) -> DataSnapshot:
    """Snapshot with no history, used when no history source is available."""
    return DataSnapshot(window=TimeWindow.last(settings.history_hours, now))
