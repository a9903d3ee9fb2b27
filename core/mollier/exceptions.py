"""
Mollier Custom Exceptions

Simple exception hierarchy for error handling.
"""


class MollierError(Exception):
    """Base exception for Mollier."""

    pass


class ConfigurationError(MollierError):
    """Configuration is invalid."""

    pass


class HAConnectionError(MollierError):
    """Cannot connect to Home Assistant."""

    pass


class SensorError(MollierError):
    """Sensor data is unavailable or invalid."""

    pass


class PsychrometricDomainError(MollierError, ValueError):
    """Inputs lie outside the domain of the psychrometric formulas."""

    pass
