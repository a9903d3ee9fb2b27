"""
Simple Home Assistant API Client for Mollier

Minimal client for reading current sensor states and their recorder history.
"""

import logging
from datetime import datetime
from typing import Any

import requests

from .exceptions import HAConnectionError, SensorError
from .models import HistorySample

logger = logging.getLogger(__name__)

UNAVAILABLE_STATES = ("unknown", "unavailable", None)


def parse_timestamp(value: str) -> datetime:
    """Parse an ISO timestamp from the HA API."""
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_history(states: list[dict]) -> list[HistorySample]:
    """Convert HA state changes to numeric samples.

    States without a timestamp, unavailable states and non-numeric values
    are skipped. Order is preserved.
    """
    samples = []
    for state_change in states:
        timestamp_str = state_change.get("last_updated") or state_change.get("last_changed")
        state_value = state_change.get("state")
        if not timestamp_str or state_value in UNAVAILABLE_STATES:
            continue

        try:
            samples.append(HistorySample(timestamp=parse_timestamp(timestamp_str), value=float(state_value)))
        except (ValueError, TypeError):
            logger.debug(f"Skipping non-numeric state {state_value!r} at {timestamp_str}")
    return samples


class HAClient:
    """Simple Home Assistant REST API client."""

    def __init__(self, base_url: str, token: str, timeout: float = 30):
        """Initialize HA client.

        Args:
            base_url: Home Assistant URL (e.g., "http://supervisor/core")
            token: Long-lived access token
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip("/")
        self.headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
        }
        # Create a session for connection pooling
        self.session = requests.Session()
        self.session.headers.update(self.headers)
        self.timeout = timeout

    def get_state(self, entity_id: str) -> dict[str, Any]:
        """Get current state of an entity.

        Args:
            entity_id: Entity ID (e.g., "sensor.temperature")

        Returns:
            State dictionary with 'state', 'attributes', etc.

        Raises:
            SensorError: If entity not found
            HAConnectionError: If API request fails
        """
        url = f"{self.base_url}/api/states/{entity_id}"
        try:
            response = self.session.get(url, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except requests.exceptions.HTTPError as e:
            if e.response is not None and e.response.status_code == 404:
                raise SensorError(f"Entity not found: {entity_id}")
            raise HAConnectionError(f"Failed to get state for {entity_id}: {e}")
        except requests.exceptions.RequestException as e:
            raise HAConnectionError(f"HA API request failed: {e}")

    def get_numeric_state(self, entity_id: str) -> HistorySample:
        """Get current numeric value of a sensor.

        Raises:
            SensorError: If the state is unavailable or not a number
        """
        state = self.get_state(entity_id)
        samples = parse_history([state])
        if not samples:
            raise SensorError(f"No numeric state for {entity_id}: {state.get('state')!r}")
        return samples[0]

    def get_history(self, entity_id: str, start_time: datetime, end_time: datetime) -> list[HistorySample]:
        """Fetch numeric history of an entity from the HA Recorder.

        Uses the HA History API (/api/history/period), which returns an
        array of arrays with one array per entity.

        Args:
            entity_id: Entity ID (e.g., 'sensor.living_room_humidity')
            start_time: Start of time range
            end_time: End of time range

        Returns:
            Samples in the order returned by HA (chronological)

        Raises:
            HAConnectionError: If the request fails or the response is malformed
        """
        url = f"{self.base_url}/api/history/period/{start_time.isoformat()}"
        params = {
            "filter_entity_id": entity_id,
            "end_time": end_time.isoformat(),
        }

        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.RequestException as e:
            raise HAConnectionError(f"Failed to fetch history for {entity_id}: {e}")
        except ValueError as e:
            raise HAConnectionError(f"Invalid history response for {entity_id}: {e}")

        if not data:
            return []
        if not isinstance(data, list) or not isinstance(data[0], list):
            raise HAConnectionError(f"Unexpected history payload for {entity_id}")

        samples = parse_history(data[0])
        logger.debug(f"{entity_id}: {len(samples)} numeric readings of {len(data[0])} states")
        return samples
