"""
Psychrometric formulas for moist air.

Magnus-type saturation vapor pressure and the derived humidity ratio,
enthalpy and dew point. Units are fixed: temperatures in °C, relative
humidity in percent, pressures in kPa, enthalpy in kJ/kg dry air.

Every function is pure. Inputs outside the formula domain raise
PsychrometricDomainError instead of returning NaN or infinity.
"""

import math
from dataclasses import dataclass

from .exceptions import PsychrometricDomainError

# Magnus coefficients (kPa, °C)
MAGNUS_PRESSURE_KPA = 0.61078
MAGNUS_A = 17.27
MAGNUS_B_C = 237.3

# Ratio of molar masses of water vapor and dry air
MOLAR_MASS_RATIO = 0.622

CP_DRY_AIR = 1.006  # kJ/(kg·K)
CP_WATER_VAPOR = 1.86  # kJ/(kg·K)
LATENT_HEAT_VAPORIZATION = 2501.0  # kJ/kg at 0°C

DEW_POINT_SINGULARITY_TOLERANCE = 1e-9


def _check_finite(**values: float) -> None:
    for name, value in values.items():
        if not math.isfinite(value):
            raise PsychrometricDomainError(f"{name} must be finite, got {value}")


def _check_temperature(temperature_c: float) -> None:
    _check_finite(temperature_c=temperature_c)
    if temperature_c <= -MAGNUS_B_C:
        raise PsychrometricDomainError(
            f"Temperature {temperature_c}°C is at or below {-MAGNUS_B_C}°C"
        )


def _check_relative_humidity(relative_humidity_pct: float) -> None:
    _check_finite(relative_humidity_pct=relative_humidity_pct)
    if not 0.0 <= relative_humidity_pct <= 100.0:
        raise PsychrometricDomainError(
            f"Relative humidity {relative_humidity_pct}% is outside [0, 100]"
        )


def saturation_vapor_pressure_kpa(temperature_c: float) -> float:
    """Saturation vapor pressure over water (kPa)."""
    _check_temperature(temperature_c)
    return MAGNUS_PRESSURE_KPA * math.exp(
        MAGNUS_A * temperature_c / (temperature_c + MAGNUS_B_C)
    )


def partial_vapor_pressure_kpa(temperature_c: float, relative_humidity_pct: float) -> float:
    """Partial pressure of water vapor (kPa)."""
    _check_relative_humidity(relative_humidity_pct)
    return relative_humidity_pct / 100.0 * saturation_vapor_pressure_kpa(temperature_c)


def humidity_ratio(
    temperature_c: float,
    relative_humidity_pct: float,
    pressure_kpa: float,
) -> float:
    """Humidity ratio (kg water / kg dry air).

    Raises:
        PsychrometricDomainError: If the vapor pressure reaches the
            atmospheric pressure, i.e. the air would be supersaturated.
    """
    _check_finite(pressure_kpa=pressure_kpa)
    if pressure_kpa <= 0:
        raise PsychrometricDomainError(f"Pressure must be positive, got {pressure_kpa} kPa")

    p_v = partial_vapor_pressure_kpa(temperature_c, relative_humidity_pct)
    if p_v >= pressure_kpa:
        raise PsychrometricDomainError(
            f"Vapor pressure {p_v:.3f} kPa reaches atmospheric pressure {pressure_kpa} kPa"
        )
    return MOLAR_MASS_RATIO * p_v / (pressure_kpa - p_v)


def enthalpy_kj_per_kg(
    temperature_c: float,
    relative_humidity_pct: float,
    pressure_kpa: float,
) -> float:
    """Specific enthalpy of moist air (kJ/kg dry air)."""
    w = humidity_ratio(temperature_c, relative_humidity_pct, pressure_kpa)
    return CP_DRY_AIR * temperature_c + w * (
        LATENT_HEAT_VAPORIZATION + CP_WATER_VAPOR * temperature_c
    )


def dew_point_c(temperature_c: float, relative_humidity_pct: float) -> float:
    """Dew point temperature (°C) by inverting the Magnus formula.

    Raises:
        PsychrometricDomainError: If relative humidity is zero (no dew
            point exists) or the inversion becomes singular.
    """
    _check_temperature(temperature_c)
    _check_relative_humidity(relative_humidity_pct)
    if relative_humidity_pct <= 0:
        raise PsychrometricDomainError("Dew point is undefined for 0% relative humidity")

    alpha = (MAGNUS_A * temperature_c) / (MAGNUS_B_C + temperature_c) + math.log(
        relative_humidity_pct / 100.0
    )
    denominator = MAGNUS_A - alpha
    if abs(denominator) < DEW_POINT_SINGULARITY_TOLERANCE:
        raise PsychrometricDomainError(
            f"Dew point inversion is singular at {temperature_c}°C / {relative_humidity_pct}%"
        )
    return MAGNUS_B_C * alpha / denominator


@dataclass(frozen=True)
class AirState:
    """All derived properties of one moist air state."""

    temperature: float  # °C
    relative_humidity: float  # %
    pressure_kpa: float
    saturation_vapor_pressure_kpa: float
    vapor_pressure_kpa: float
    humidity_ratio: float  # kg/kg
    enthalpy: float  # kJ/kg
    dew_point: float | None  # °C, None at 0% RH

    @property
    def humidity_ratio_g_per_kg(self) -> float:
        return self.humidity_ratio * 1000.0


def air_state(
    temperature_c: float,
    relative_humidity_pct: float,
    pressure_kpa: float,
) -> AirState:
    """Compute every derived quantity for one point.

    Dew point is reported as None for dry air instead of raising, since
    the remaining properties are still well defined.
    """
    w = humidity_ratio(temperature_c, relative_humidity_pct, pressure_kpa)
    dew_point = (
        dew_point_c(temperature_c, relative_humidity_pct)
        if relative_humidity_pct > 0
        else None
    )
    return AirState(
        temperature=temperature_c,
        relative_humidity=relative_humidity_pct,
        pressure_kpa=pressure_kpa,
        saturation_vapor_pressure_kpa=saturation_vapor_pressure_kpa(temperature_c),
        vapor_pressure_kpa=partial_vapor_pressure_kpa(temperature_c, relative_humidity_pct),
        humidity_ratio=w,
        enthalpy=enthalpy_kj_per_kg(temperature_c, relative_humidity_pct, pressure_kpa),
        dew_point=dew_point,
    )
