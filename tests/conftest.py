"""Pytest configuration and fixtures."""

import asyncio
import json
import tempfile
from pathlib import Path

import httpx
import pytest

from caelum.models.weather import (
    Condition,
    ConditionKind,
    Coordinates,
    ForecastDay,
    Unit,
    WeatherSnapshot,
)
from caelum.services.errors import LocationPermissionError
from caelum.services.forecast_client import ForecastClient
from caelum.services.geocoding import SearchResolver
from caelum.services.geolocation import LocationProvider

ROMA = Coordinates(latitude=41.9028, longitude=12.4964)
MILANO = Coordinates(latitude=45.4642, longitude=9.19)


def make_snapshot(
    place_name: str = "Roma", temperature: int = 20, unit: Unit = Unit.CELSIUS
) -> WeatherSnapshot:
    """Build a valid snapshot with a 7-day forecast."""
    return WeatherSnapshot(
        place_name=place_name,
        temperature=temperature,
        feels_like=temperature - 1,
        humidity=55,
        wind_speed=3.2,
        condition=Condition(kind=ConditionKind.CLEAR, description="Clear sky"),
        forecast=tuple(
            ForecastDay(day_label=f"Day {i}", temp_max=25, temp_min=15, kind=ConditionKind.CLEAR)
            for i in range(7)
        ),
        unit=unit,
    )


class FakeForecastClient(ForecastClient):
    """Forecast client returning canned snapshots with optional per-call delays."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[Coordinates, Unit, str | None]] = []
        self.delays: list[float] = []
        self.errors: list[Exception | None] = []

    async def fetch_snapshot(self, coords, unit, known_name=None):
        self.calls.append((coords, unit, known_name))
        call_number = len(self.calls)
        delay = self.delays.pop(0) if self.delays else 0
        error = self.errors.pop(0) if self.errors else None
        await asyncio.sleep(delay)
        if error is not None:
            raise error
        # Temperature identifies which call produced the snapshot
        return make_snapshot(known_name or coords.label, temperature=call_number, unit=unit)


class FakeSearchResolver(SearchResolver):
    """Search resolver answering from a fixed table or raising a given error."""

    def __init__(self, results=None, error: Exception | None = None) -> None:
        super().__init__()
        self.results = results or {}
        self.error = error
        self.queries: list[str] = []

    async def resolve_query(self, text):
        self.queries.append(text)
        if self.error is not None:
            raise self.error
        return self.results[text]


class FakeLocationProvider(LocationProvider):
    """Device position source that answers after a delay, fails, or never answers."""

    def __init__(
        self,
        coords: Coordinates | None = None,
        delay: float = 0.0,
        error: Exception | None = None,
        never: bool = False,
    ) -> None:
        self.coords = coords
        self.delay = delay
        self.error = error
        self.never = never
        self.requests: list[tuple[bool, float]] = []

    async def get_current_position(self, *, high_accuracy, timeout):
        self.requests.append((high_accuracy, timeout))
        if self.never:
            await asyncio.Event().wait()
        await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        return self.coords


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def sample_config_data():
    """Sample configuration data for testing."""
    return {
        "location": {
            "name": "London",
            "latitude": 51.5074,
            "longitude": -0.1278,
        },
        "geolocation": {
            "provider": "none",
            "timeout_ms": 2500,
            "device_timeout_ms": 3000,
            "high_accuracy": False,
        },
        "providers": {
            "language": "de",
            "timeout_seconds": 10,
        },
        "settings": {
            "unit": "F",
            "refresh_interval_minutes": 5,
            "log_level": "DEBUG",
        },
    }


@pytest.fixture
def sample_config_file(temp_dir, sample_config_data):
    """Create a sample config file for testing."""
    config_path = temp_dir / "config.json"
    with open(config_path, "w") as f:
        json.dump(sample_config_data, f)
    return config_path


@pytest.fixture
def forecast_payload():
    """Open-Meteo style payload; 2024-01-14 is a Sunday."""
    return {
        "latitude": 41.9,
        "longitude": 12.5,
        "timezone": "Europe/Rome",
        "current": {
            "time": "2024-01-14T12:00",
            "temperature_2m": 12.5,
            "apparent_temperature": 10.4,
            "precipitation": 0.0,
            "weathercode": 2,
            "relative_humidity_2m": 71,
            "wind_speed_10m": 3.4,
        },
        "daily": {
            "time": [f"2024-01-{day}" for day in range(14, 21)],
            "weathercode": [0, 3, 61, 81, 95, 71, 1000],
            "temperature_2m_max": [14.5, 13.2, 11.0, 9.7, 10.1, 2.4, 8.0],
            "temperature_2m_min": [5.5, 4.4, 6.1, 3.0, 2.2, -1.5, 9.0],
        },
    }


@pytest.fixture
def reverse_payload():
    return {
        "display_name": "Roma, Roma Capitale, Lazio, Italia",
        "address": {"city": "Roma", "state": "Lazio", "country": "Italia"},
    }


@pytest.fixture
def search_payload():
    return [
        {
            "lat": "45.4641943",
            "lon": "9.1896346",
            "display_name": "Milano, Lombardia, Italia",
        }
    ]


class ProviderStub:
    """Routes requests to canned JSON bodies by URL path and records them."""

    def __init__(self, routes: dict[str, tuple[int, object]]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        for path, (status, body) in self.routes.items():
            if request.url.path.endswith(path):
                if isinstance(body, Exception):
                    raise body
                if isinstance(body, str):
                    return httpx.Response(status, text=body)
                return httpx.Response(status, json=body)
        return httpx.Response(404, json={"error": "no route"})

    def requests_to(self, path: str) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith(path)]

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def provider_stub(forecast_payload, reverse_payload, search_payload):
    """HTTP stub for the forecast, reverse and search endpoints."""
    return ProviderStub(
        {
            "/v1/forecast": (200, forecast_payload),
            "/reverse": (200, reverse_payload),
            "/search": (200, search_payload),
            "/json/": (200, {"latitude": 45.4642, "longitude": 9.19}),
        }
    )


@pytest.fixture
def denied_provider():
    return FakeLocationProvider(error=LocationPermissionError("location access denied"))


@pytest.fixture
def roma():
    return ROMA


@pytest.fixture
def milano():
    return MILANO


@pytest.fixture
def snapshot_factory():
    return make_snapshot


@pytest.fixture
def fake_forecast():
    return FakeForecastClient()


@pytest.fixture
def location_provider_factory():
    return FakeLocationProvider


@pytest.fixture
def search_resolver_factory():
    return FakeSearchResolver
