"""Mollier psychrometric diagram package."""

# Define public API
__all__ = [
    "DiagramSettings",
    "SensorSettings",
    "ComfortZoneSettings",
    "DiagramDescription",
    "DiagramService",
    "HAClient",
    "compute_diagram",
]

# Import settings
from .settings import ComfortZoneSettings, DiagramSettings, SensorSettings

# Import models
from .models import DiagramDescription

# Import diagram computation and refresh service
from .diagram import compute_diagram
from .diagram_service import DiagramService

# Import HA client
from .ha_client import HAClient
