from datetime import datetime, timedelta, timezone
from unittest.mock import MagicMock

import pytest
import requests

from core.mollier.exceptions import HAConnectionError, SensorError
from core.mollier.ha_client import HAClient, parse_history

START = datetime(2024, 1, 15, tzinfo=timezone.utc)
END = START + timedelta(hours=24)


def _response(payload=None, status=200):
    response = MagicMock()
    response.status_code = status
    response.json.return_value = payload
    if status >= 400:
        error = requests.exceptions.HTTPError(f"{status} Error")
        error.response = response
        response.raise_for_status.side_effect = error
    return response


@pytest.fixture
def client():
    client = HAClient("http://ha.local:8123/", "token123")
    client.session = MagicMock()
    return client


def test_auth_headers():
    client = HAClient("http://ha.local:8123/", "token123")
    assert client.base_url == "http://ha.local:8123"
    assert client.session.headers["Authorization"] == "Bearer token123"


def test_parse_history_skips_unusable_states():
    states = [
        {"state": "21.5", "last_updated": "2024-01-15T10:00:00+00:00"},
        {"state": "unavailable", "last_updated": "2024-01-15T10:01:00+00:00"},
        {"state": "unknown", "last_updated": "2024-01-15T10:02:00+00:00"},
        {"state": "n/a", "last_updated": "2024-01-15T10:03:00+00:00"},
        {"state": "22", "last_changed": "2024-01-15T10:04:00Z"},
        {"state": "23"},
    ]

    samples = parse_history(states)

    assert [s.value for s in samples] == [21.5, 22.0]
    assert samples[0].timestamp == datetime(2024, 1, 15, 10, 0, tzinfo=timezone.utc)
    assert samples[1].timestamp == datetime(2024, 1, 15, 10, 4, tzinfo=timezone.utc)


def test_parse_history_prefers_last_updated():
    states = [
        {
            "state": "50",
            "last_changed": "2024-01-15T09:00:00+00:00",
            "last_updated": "2024-01-15T10:00:00+00:00",
        }
    ]
    assert parse_history(states)[0].timestamp.hour == 10


def test_get_history_request_shape(client):
    client.session.get.return_value = _response(
        [[{"state": "20.0", "last_updated": "2024-01-15T10:00:00+00:00"}]]
    )

    samples = client.get_history("sensor.living_temperature", START, END)

    assert len(samples) == 1
    url = client.session.get.call_args.args[0]
    params = client.session.get.call_args.kwargs["params"]
    assert url == f"http://ha.local:8123/api/history/period/{START.isoformat()}"
    assert params == {"filter_entity_id": "sensor.living_temperature", "end_time": END.isoformat()}


def test_get_history_empty_response(client):
    client.session.get.return_value = _response([])
    assert client.get_history("sensor.t", START, END) == []


def test_get_history_http_error(client):
    client.session.get.return_value = _response(status=401)
    with pytest.raises(HAConnectionError, match="sensor.t"):
        client.get_history("sensor.t", START, END)


def test_get_history_connection_error(client):
    client.session.get.side_effect = requests.exceptions.ConnectionError("refused")
    with pytest.raises(HAConnectionError):
        client.get_history("sensor.t", START, END)


def test_get_history_malformed_payload(client):
    client.session.get.return_value = _response({"message": "oops"})
    with pytest.raises(HAConnectionError, match="Unexpected"):
        client.get_history("sensor.t", START, END)


def test_get_state_not_found(client):
    client.session.get.return_value = _response(status=404)
    with pytest.raises(SensorError, match="not found"):
        client.get_state("sensor.missing")


def test_get_numeric_state(client):
    client.session.get.return_value = _response(
        {"state": "45.2", "last_updated": "2024-01-15T10:00:00+00:00", "attributes": {}}
    )
    sample = client.get_numeric_state("sensor.h")
    assert sample.value == 45.2


def test_get_numeric_state_unavailable(client):
    client.session.get.return_value = _response(
        {"state": "unavailable", "last_updated": "2024-01-15T10:00:00+00:00"}
    )
    with pytest.raises(SensorError):
        client.get_numeric_state("sensor.h")
