"""
Reference Curve Generator

Constant relative humidity lines across a fixed temperature sweep. They
form the grid used to read off the humidity of a plotted point.
"""

import logging

import numpy as np

from .exceptions import PsychrometricDomainError
from .models import Curve
from .psychrometrics import enthalpy_kj_per_kg

logger = logging.getLogger(__name__)

RH_LEVELS = (10, 20, 30, 40, 50, 60, 70, 80, 90, 100)
SWEEP_MIN_C = -10
SWEEP_MAX_C = 50
SWEEP_STEP_C = 1


def temperature_sweep(
    t_min: float = SWEEP_MIN_C,
    t_max: float = SWEEP_MAX_C,
    step: float = SWEEP_STEP_C,
) -> np.ndarray:
    """Evenly spaced temperatures from t_min to t_max inclusive."""
    if step <= 0 or t_max < t_min:
        raise ValueError(f"Invalid sweep {t_min}..{t_max} step {step}")
    count = int(round((t_max - t_min) / step)) + 1
    return np.linspace(t_min, t_min + (count - 1) * step, count)


def generate_rh_curves(
    pressure_kpa: float,
    rh_levels=RH_LEVELS,
    temperatures: np.ndarray | None = None,
) -> list[Curve]:
    """One curve per humidity level, ordered by increasing humidity.

    Points that fall outside the formula domain (possible only at very
    low pressure) are left out of their curve.
    """
    if temperatures is None:
        temperatures = temperature_sweep()

    curves = []
    for rh in sorted(rh_levels):
        xs, ys = [], []
        for t in temperatures:
            try:
                ys.append(enthalpy_kj_per_kg(float(t), rh, pressure_kpa))
            except PsychrometricDomainError as e:
                logger.debug(f"RH {rh}% curve skips {t}°C: {e}")
                continue
            xs.append(float(t))
        curves.append(Curve(relative_humidity=rh, temperatures=tuple(xs), enthalpies=tuple(ys)))
    return curves
