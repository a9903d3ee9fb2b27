"""
Comfort Zone Generator

Projects comfort zones declared in (temperature, relative humidity) space
onto the (temperature, enthalpy) plane. The lower edge is the enthalpy at
(t_min, rh_min) and the upper edge the enthalpy at (t_max, rh_max), which
only approximates the true region since enthalpy is not linear in RH.
"""

import logging
from typing import Iterable

from .exceptions import PsychrometricDomainError
from .models import ZoneRegion
from .psychrometrics import enthalpy_kj_per_kg
from .settings import ComfortZoneSettings

logger = logging.getLogger(__name__)


def zone_region(zone: ComfortZoneSettings, pressure_kpa: float) -> ZoneRegion:
    """Project a single comfort zone.

    Raises:
        PsychrometricDomainError: If a corner is outside the formula domain
    """
    return ZoneRegion(
        x0=zone.t_min,
        x1=zone.t_max,
        y0=enthalpy_kj_per_kg(zone.t_min, zone.rh_min, pressure_kpa),
        y1=enthalpy_kj_per_kg(zone.t_max, zone.rh_max, pressure_kpa),
        color=zone.color,
        name=zone.name,
    )


def generate_comfort_zones(
    zones: Iterable[ComfortZoneSettings],
    pressure_kpa: float,
) -> list[ZoneRegion]:
    """Project all zones in input order, skipping the ones that fail."""
    regions = []
    for zone in zones:
        try:
            regions.append(zone_region(zone, pressure_kpa))
        except PsychrometricDomainError as e:
            logger.warning(f"Skipping comfort zone {zone.name or (zone.t_min, zone.t_max)}: {e}")
    return regions
