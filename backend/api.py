"""
Mollier API Endpoints
"""

import json
import os
import sys

import yaml
from dotenv import load_dotenv
from fastapi import APIRouter, HTTPException, Query
from loguru import logger
from pydantic import BaseModel

# Add core to Python path
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

from core.mollier.comfort_zones import generate_comfort_zones
from core.mollier.diagram import compute_diagram
from core.mollier.exceptions import ConfigurationError, MollierError, PsychrometricDomainError
from core.mollier.ha_client import HAClient
from core.mollier.models import DataSnapshot, SensorHistory, TimeWindow
from core.mollier.psychrometrics import air_state, dew_point_c, enthalpy_kj_per_kg
from core.mollier.reference_curves import generate_rh_curves
from core.mollier.settings import DiagramSettings, validate_pressure_kpa
from figure import to_plotly_figure

router = APIRouter()

OPTIONS_PATH = "/data/options.json"
CONFIG_PATH = os.path.join(os.path.dirname(__file__), "..", "config.yaml")

# Initialize HA client
load_dotenv()
HA_URL = os.environ.get("HA_URL", "http://supervisor/core")
HA_TOKEN = os.environ.get("HA_TOKEN", "")

ha_client = HAClient(HA_URL, HA_TOKEN) if HA_TOKEN else None

# Diagram refresh service (set by app.py during startup)
diagram_service = None


def load_settings(options_path: str = OPTIONS_PATH, config_path: str = CONFIG_PATH) -> DiagramSettings:
    """Load diagram settings from Home Assistant add-on options.

    Tries options.json (production), then config.yaml (development), then
    falls back to defaults.
    """
    if os.path.exists(options_path):
        with open(options_path) as f:
            options = json.load(f)
        logger.info(f"Loaded options from {options_path}")
        return DiagramSettings.from_dict(options)

    if os.path.exists(config_path):
        with open(config_path) as f:
            config = yaml.safe_load(f) or {}
        options = config.get("options", {})
        if options:
            logger.info(f"Loaded options from {config_path}")
            return DiagramSettings.from_dict(options)

    logger.warning("Using default diagram configuration")
    return DiagramSettings()


# Load settings on module import
try:
    SETTINGS = load_settings()
except ConfigurationError as e:
    logger.error(f"Invalid configuration, using defaults: {e}")
    SETTINGS = DiagramSettings()


def _resolve_pressure(pressure_kpa: float | None) -> float:
    if pressure_kpa is None:
        return SETTINGS.pressure_kpa
    try:
        return validate_pressure_kpa(pressure_kpa)
    except ConfigurationError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e


def _offline_snapshot() -> DataSnapshot:
    """Snapshot without history, used when HA is not reachable."""
    return DataSnapshot(
        window=TimeWindow.last(SETTINGS.history_hours),
        histories={
            s.id: SensorHistory(sensor_id=s.id, error="HA client not initialized")
            for s in SETTINGS.sensors
        },
    )


async def _current_diagram(force_refresh: bool = False):
    if diagram_service is None:
        return compute_diagram(_offline_snapshot(), SETTINGS)

    return await diagram_service.get_diagram(force_refresh=force_refresh)


class AirStateResponse(BaseModel):
    """Derived properties of one moist air state."""
    temperature: float
    relative_humidity: float
    pressure_kpa: float
    saturation_vapor_pressure_kpa: float
    vapor_pressure_kpa: float
    humidity_ratio: float
    humidity_ratio_g_per_kg: float
    enthalpy: float
    dew_point: float | None


@router.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "app": "Mollier",
        "version": "0.1.0",
        "ha_connected": ha_client is not None,
        "last_refresh": (
            diagram_service.last_refresh.isoformat()
            if diagram_service and diagram_service.last_refresh
            else None
        ),
    }


@router.get("/api/config")
async def get_config():
    """Get the active diagram configuration."""
    return {
        "title": SETTINGS.title,
        "pressure_kpa": SETTINGS.pressure_kpa,
        "history_hours": SETTINGS.history_hours,
        "alignment": SETTINGS.alignment,
        "sensors": [
            {
                "id": s.id,
                "name": s.name,
                "temperature_entity": s.temperature_entity,
                "humidity_entity": s.humidity_entity,
                "color": s.color,
            }
            for s in SETTINGS.sensors
        ],
        "comfort_zones": [
            {
                "name": z.name,
                "t_min": z.t_min,
                "t_max": z.t_max,
                "rh_min": z.rh_min,
                "rh_max": z.rh_max,
                "color": z.color,
            }
            for z in SETTINGS.comfort_zones
        ],
    }


@router.get("/api/diagram")
async def get_diagram():
    """Get the latest diagram description (traces, curves, regions)."""
    diagram = await _current_diagram()
    return diagram.to_dict()


@router.post("/api/diagram/refresh")
async def refresh_diagram():
    """Fetch history now and recompute the diagram."""
    diagram = await _current_diagram(force_refresh=True)
    return diagram.to_dict()


@router.get("/api/diagram/figure")
async def get_diagram_figure():
    """Get the latest diagram as a Plotly figure ({data, layout})."""
    diagram = await _current_diagram()
    return to_plotly_figure(diagram)


@router.get("/api/reference-curves")
async def get_reference_curves(pressure_kpa: float | None = None):
    """Get the constant relative humidity curves."""
    pressure = _resolve_pressure(pressure_kpa)
    curves = generate_rh_curves(pressure)
    return {
        "pressure_kpa": pressure,
        "curves": [
            {
                "name": c.name,
                "relative_humidity": c.relative_humidity,
                "temperatures": list(c.temperatures),
                "enthalpies": list(c.enthalpies),
            }
            for c in curves
        ],
    }


@router.get("/api/comfort-zones")
async def get_comfort_zones(pressure_kpa: float | None = None):
    """Get the configured comfort zones projected to enthalpy space."""
    pressure = _resolve_pressure(pressure_kpa)
    regions = generate_comfort_zones(SETTINGS.comfort_zones, pressure)
    return {
        "pressure_kpa": pressure,
        "regions": [
            {"name": r.name, "x0": r.x0, "x1": r.x1, "y0": r.y0, "y1": r.y1, "color": r.color}
            for r in regions
        ],
    }


@router.get("/api/psychrometrics", response_model=AirStateResponse)
async def get_psychrometrics(
    temperature: float = Query(..., description="Dry bulb temperature (°C)"),
    humidity: float = Query(..., description="Relative humidity (%)"),
    pressure_kpa: float | None = None,
):
    """Compute all derived properties for one temperature/humidity point."""
    pressure = _resolve_pressure(pressure_kpa)
    try:
        state = air_state(temperature, humidity, pressure)
    except PsychrometricDomainError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    return AirStateResponse(
        temperature=state.temperature,
        relative_humidity=state.relative_humidity,
        pressure_kpa=state.pressure_kpa,
        saturation_vapor_pressure_kpa=state.saturation_vapor_pressure_kpa,
        vapor_pressure_kpa=state.vapor_pressure_kpa,
        humidity_ratio=state.humidity_ratio,
        humidity_ratio_g_per_kg=state.humidity_ratio_g_per_kg,
        enthalpy=state.enthalpy,
        dew_point=state.dew_point,
    )


@router.get("/api/sensors/{sensor_id}/current")
async def get_sensor_current(sensor_id: str):
    """Get the current reading of a sensor pair placed on the diagram."""
    sensor = SETTINGS.get_sensor(sensor_id)
    if not sensor:
        raise HTTPException(status_code=404, detail=f"Sensor not found: {sensor_id}")
    if not ha_client:
        raise HTTPException(status_code=503, detail="HA client not initialized")

    try:
        temperature = ha_client.get_numeric_state(sensor.temperature_entity)
        humidity = ha_client.get_numeric_state(sensor.humidity_entity)
    except MollierError as e:
        logger.warning(f"Failed to read {sensor_id}: {e}")
        raise HTTPException(status_code=502, detail=str(e)) from e

    try:
        enthalpy = enthalpy_kj_per_kg(temperature.value, humidity.value, SETTINGS.pressure_kpa)
        dew_point = dew_point_c(temperature.value, humidity.value)
    except PsychrometricDomainError as e:
        raise HTTPException(status_code=422, detail=str(e)) from e

    return {
        "sensor_id": sensor.id,
        "name": sensor.name,
        "temperature": temperature.value,
        "relative_humidity": humidity.value,
        "enthalpy": enthalpy,
        "dew_point": dew_point,
        "timestamp": max(temperature.timestamp, humidity.timestamp).isoformat(),
    }
