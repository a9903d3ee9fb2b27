import pytest

from core.mollier.exceptions import ConfigurationError
from core.mollier.settings import (
    DEFAULT_PRESSURE_KPA,
    ComfortZoneSettings,
    DiagramSettings,
    SensorSettings,
    validate_pressure_kpa,
)


def test_defaults_when_keys_missing():
    settings = DiagramSettings.from_dict({})

    assert settings.pressure_kpa == DEFAULT_PRESSURE_KPA
    assert len(settings.sensors) == 1
    assert settings.sensors[0].temperature_entity == "sensor.temperature"
    assert settings.sensors[0].humidity_entity == "sensor.humidity"
    assert len(settings.comfort_zones) == 1
    zone = settings.comfort_zones[0]
    assert (zone.t_min, zone.t_max, zone.rh_min, zone.rh_max) == (20, 25, 40, 60)
    assert settings.history_hours == 24
    assert settings.alignment == "exact"


def test_explicit_empty_lists_are_respected():
    settings = DiagramSettings.from_dict({"sensors": [], "comfort_zones": []})
    assert settings.sensors == []
    assert settings.comfort_zones == []


def test_card_style_options():
    settings = DiagramSettings.from_dict(
        {
            "sensors": [
                {
                    "temperature_entity": "sensor.t",
                    "humidity_entity": "sensor.h",
                    "color": "blue",
                    "name": "Capteur 1",
                }
            ],
            "comfort_zones": [
                {"t_min": 19, "t_max": 23, "rh_min": 35, "rh_max": 55, "color": "rgba(0,0,255,0.2)"}
            ],
            "pressure_atm": 95.0,
        }
    )

    assert settings.pressure_kpa == 95.0
    assert settings.sensors[0].id == "capteur_1"
    assert settings.sensors[0].color == "blue"
    assert settings.comfort_zones[0].color == "rgba(0,0,255,0.2)"


def test_camel_case_keys():
    settings = DiagramSettings.from_dict(
        {
            "pressureKpa": 100,
            "historyHours": "12",
            "sensors": [{"name": "Attic", "temperatureEntity": "sensor.t", "humidityEntity": "sensor.h"}],
            "comfortZones": [{"tMin": 20, "tMax": 25, "rhMin": 40, "rhMax": 60}],
        }
    )
    assert settings.pressure_kpa == 100
    assert settings.history_hours == 12.0
    assert settings.sensors[0].id == "attic"
    assert settings.comfort_zones[0].rh_max == 60


def test_unknown_options_ignored():
    settings = DiagramSettings.from_dict({"log_level": "debug"})
    assert settings.pressure_kpa == DEFAULT_PRESSURE_KPA


@pytest.mark.parametrize("pressure", [101325, 1013.25, 0, -5, "abc", float("nan")])
def test_pressure_must_be_kpa(pressure):
    with pytest.raises(ConfigurationError):
        validate_pressure_kpa(pressure)


def test_pressure_accepts_numeric_string():
    assert validate_pressure_kpa("101.325") == pytest.approx(101.325)


def test_sensor_requires_both_entities():
    with pytest.raises(ConfigurationError, match="humidity_entity"):
        SensorSettings.from_dict({"name": "Kitchen", "temperature_entity": "sensor.t"})


def test_sensor_without_name_gets_numbered():
    sensor = SensorSettings.from_dict({"temperature_entity": "sensor.t", "humidity_entity": "sensor.h"}, index=2)
    assert sensor.name == "Sensor 3"
    assert sensor.id == "sensor_3"


def test_duplicate_sensor_ids_rejected():
    sensor = {"id": "a", "temperature_entity": "sensor.t", "humidity_entity": "sensor.h"}
    with pytest.raises(ConfigurationError, match="Duplicate"):
        DiagramSettings.from_dict({"sensors": [sensor, sensor]})


@pytest.mark.parametrize(
    "zone",
    [
        {"t_min": 25, "t_max": 20, "rh_min": 40, "rh_max": 60},
        {"t_min": 20, "t_max": 25, "rh_min": 60, "rh_max": 40},
        {"t_min": 20, "t_max": 25, "rh_min": -5, "rh_max": 40},
        {"t_min": 20, "t_max": 25, "rh_min": 40, "rh_max": 110},
        {"t_min": 20, "t_max": 25, "rh_min": 40},
        {"t_min": "warm", "t_max": 25, "rh_min": 40, "rh_max": 60},
    ],
)
def test_invalid_comfort_zone(zone):
    with pytest.raises(ConfigurationError):
        ComfortZoneSettings.from_dict(zone)


@pytest.mark.parametrize(
    "options",
    [
        {"alignment": "spline"},
        {"history_hours": 0},
        {"refresh_interval_seconds": -1},
        {"alignment_tolerance_seconds": -1},
        {"max_concurrent_fetches": 0},
    ],
)
def test_invalid_diagram_options(options):
    with pytest.raises(ConfigurationError):
        DiagramSettings.from_dict(options)


def test_get_sensor():
    settings = DiagramSettings()
    assert settings.get_sensor("sensor_1") is settings.sensors[0]
    assert settings.get_sensor("missing") is None


def test_blank_colors_fall_back_to_defaults():
    settings = DiagramSettings.from_dict(
        {
            "sensors": [{"name": "Attic", "temperature_entity": "sensor.t", "humidity_entity": "sensor.h", "color": None}],
            "comfort_zones": [{"t_min": 20, "t_max": 25, "rh_min": 40, "rh_max": 60, "color": None}],
        }
    )
    assert settings.sensors[0].color == "red"
    assert settings.comfort_zones[0].color == "rgba(0,255,0,0.2)"
