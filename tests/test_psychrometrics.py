import math

import pytest

from core.mollier.exceptions import PsychrometricDomainError
from core.mollier.psychrometrics import (
    air_state,
    dew_point_c,
    enthalpy_kj_per_kg,
    humidity_ratio,
    partial_vapor_pressure_kpa,
    saturation_vapor_pressure_kpa,
)

P_SEA_LEVEL = 101.325


def test_saturation_vapor_pressure_reference_values():
    assert saturation_vapor_pressure_kpa(0) == pytest.approx(0.61078)
    assert saturation_vapor_pressure_kpa(20) == pytest.approx(2.338, abs=0.01)
    assert saturation_vapor_pressure_kpa(10) < saturation_vapor_pressure_kpa(20) < saturation_vapor_pressure_kpa(30)


def test_partial_vapor_pressure_scales_with_humidity():
    assert partial_vapor_pressure_kpa(20, 50) == pytest.approx(saturation_vapor_pressure_kpa(20) / 2)
    assert partial_vapor_pressure_kpa(20, 0) == 0


def test_enthalpy_reference_value():
    assert enthalpy_kj_per_kg(20, 50, P_SEA_LEVEL) == pytest.approx(38.6, abs=0.5)


@pytest.mark.parametrize("temperature", [-10, 0, 15.5, 30, 50])
def test_enthalpy_of_dry_air_is_sensible_heat_only(temperature):
    assert enthalpy_kj_per_kg(temperature, 0, P_SEA_LEVEL) == pytest.approx(1.006 * temperature)


@pytest.mark.parametrize("temperature", [-10, 5, 20, 35, 50])
def test_enthalpy_strictly_increasing_in_humidity(temperature):
    values = [enthalpy_kj_per_kg(temperature, rh, P_SEA_LEVEL) for rh in range(0, 101, 5)]
    assert all(a < b for a, b in zip(values, values[1:]))


def test_enthalpy_increasing_in_temperature():
    values = [enthalpy_kj_per_kg(t, 50, P_SEA_LEVEL) for t in range(-10, 51)]
    assert all(a < b for a, b in zip(values, values[1:]))


def test_lower_pressure_raises_humidity_ratio():
    assert humidity_ratio(20, 50, 80.0) > humidity_ratio(20, 50, P_SEA_LEVEL)


def test_humidity_ratio_rejects_vapor_pressure_at_atmospheric_pressure():
    # Saturation vapor pressure at 60°C is about 20 kPa
    with pytest.raises(PsychrometricDomainError):
        humidity_ratio(60, 100, 15.0)


@pytest.mark.parametrize("pressure", [0, -1, math.nan, math.inf])
def test_humidity_ratio_rejects_invalid_pressure(pressure):
    with pytest.raises(PsychrometricDomainError):
        humidity_ratio(20, 50, pressure)


@pytest.mark.parametrize("temperature", [-237.3, -300, math.nan])
def test_temperature_below_formula_pole_rejected(temperature):
    with pytest.raises(PsychrometricDomainError):
        saturation_vapor_pressure_kpa(temperature)
    with pytest.raises(PsychrometricDomainError):
        dew_point_c(temperature, 50)


@pytest.mark.parametrize("humidity", [-1, 100.5, math.nan])
def test_humidity_outside_percent_range_rejected(humidity):
    with pytest.raises(PsychrometricDomainError):
        enthalpy_kj_per_kg(20, humidity, P_SEA_LEVEL)


@pytest.mark.parametrize("temperature", [-10, 0, 12.3, 25, 50])
@pytest.mark.parametrize("humidity", [5, 30, 60, 99])
def test_dew_point_below_temperature(temperature, humidity):
    assert dew_point_c(temperature, humidity) <= temperature


@pytest.mark.parametrize("temperature", [-10, 0, 21.7, 50])
def test_dew_point_at_saturation_equals_temperature(temperature):
    assert dew_point_c(temperature, 100) == pytest.approx(temperature)


def test_dew_point_reference_value():
    assert dew_point_c(20, 50) == pytest.approx(9.3, abs=0.1)


def test_dew_point_undefined_for_dry_air():
    with pytest.raises(PsychrometricDomainError, match="0% relative humidity"):
        dew_point_c(20, 0)


def test_domain_error_is_value_error():
    with pytest.raises(ValueError):
        dew_point_c(20, 0)


def test_air_state_collects_all_properties():
    state = air_state(20, 50, P_SEA_LEVEL)
    assert state.enthalpy == pytest.approx(enthalpy_kj_per_kg(20, 50, P_SEA_LEVEL))
    assert state.dew_point == pytest.approx(dew_point_c(20, 50))
    assert state.vapor_pressure_kpa == pytest.approx(state.saturation_vapor_pressure_kpa / 2)
    assert state.humidity_ratio_g_per_kg == pytest.approx(state.humidity_ratio * 1000)


def test_air_state_of_dry_air_has_no_dew_point():
    state = air_state(20, 0, P_SEA_LEVEL)
    assert state.dew_point is None
    assert state.humidity_ratio == 0
