"""Forecast client using Open-Meteo API."""

import logging
import math
from datetime import datetime

import httpx

from ..models.weather import Coordinates, ForecastDay, Unit, WeatherSnapshot
from .conditions import classify
from .errors import NetworkError
from .geocoding import PlaceNameResolver

logger = logging.getLogger(__name__)

# Open-Meteo API base URL (free, no API key required)
API_BASE_URL = "https://api.open-meteo.com/v1/forecast"

FORECAST_DAYS = 7

CURRENT_FIELDS = (
    "temperature_2m,apparent_temperature,precipitation,weathercode,"
    "relative_humidity_2m,wind_speed_10m"
)
HOURLY_FIELDS = "temperature_2m,weathercode,precipitation_probability"
DAILY_FIELDS = "weathercode,temperature_2m_max,temperature_2m_min"

# Indexed 0=Sunday..6=Saturday
WEEKDAY_NAMES = (
    "Dies Solis",
    "Dies Lunae",
    "Dies Martis",
    "Dies Mercurii",
    "Dies Iovis",
    "Dies Veneris",
    "Dies Saturni",
)


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties toward positive infinity."""
    return math.floor(value + 0.5)


def daily_temperature(value: float | None) -> int:
    """Rounded daily temperature. Gaps in the provider series read as 0."""
    if value is None:
        return 0
    return round_half_up(value)


def day_label(date_str: str) -> str:
    """Weekday name for a provider date, read at local noon."""
    noon = datetime.fromisoformat(f"{date_str[:10]}T12:00:00")
    return WEEKDAY_NAMES[noon.isoweekday() % 7]


class ForecastClient:
    """Fetches and normalizes weather snapshots from Open-Meteo."""

    def __init__(
        self,
        place_resolver: PlaceNameResolver | None = None,
        url: str = API_BASE_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.place_resolver = place_resolver
        self.url = url
        self.timeout = timeout
        self._transport = transport

    def build_params(self, coords: Coordinates, unit: Unit) -> dict:
        """Query parameters for a forecast request."""
        return {
            "latitude": coords.latitude,
            "longitude": coords.longitude,
            "current": CURRENT_FIELDS,
            "hourly": HOURLY_FIELDS,
            "daily": DAILY_FIELDS,
            "timezone": "auto",
            "forecast_days": FORECAST_DAYS,
            "temperature_unit": unit.provider_token,
            "wind_speed_unit": "ms",
            "precipitation_unit": "mm",
        }

    async def fetch_snapshot(
        self, coords: Coordinates, unit: Unit, known_name: str | None = None
    ) -> WeatherSnapshot:
        """Fetch current conditions and the 7-day forecast for coordinates.

        When ``known_name`` is not given the place name is reverse
        geocoded, falling back to the formatted coordinates.

        Raises:
            NetworkError: the provider could not be reached, answered with a
                non-success status, or returned an unusable payload.
        """
        params = self.build_params(coords, unit)

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(self.url, params=params)
                response.raise_for_status()
                data = response.json()

        except httpx.TimeoutException as e:
            logger.warning(f"Timeout fetching weather for {coords.label}")
            raise NetworkError("forecast unavailable") from e

        except httpx.HTTPStatusError as e:
            logger.error(f"HTTP error fetching weather: {e.response.status_code}")
            raise NetworkError("forecast unavailable") from e

        except httpx.HTTPError as e:
            logger.error(f"Connection error fetching weather: {e}")
            raise NetworkError("forecast unavailable") from e

        except ValueError as e:
            logger.error(f"Weather response is not valid JSON: {e}")
            raise NetworkError("forecast unavailable") from e

        name = known_name
        if not name and self.place_resolver is not None:
            name = await self.place_resolver.resolve_name(coords)

        return self._parse_response(data, name or coords.label, unit)

    def _parse_response(self, data: dict, place_name: str, unit: Unit) -> WeatherSnapshot:
        """Parse the Open-Meteo API response."""
        try:
            current_data = data["current"]
            daily_data = data["daily"]

            times = daily_data["time"]
            codes = daily_data["weathercode"]
            temp_maxs = daily_data["temperature_2m_max"]
            temp_mins = daily_data["temperature_2m_min"]

            # Daily arrays are aligned by index
            forecast = tuple(
                ForecastDay(
                    day_label=day_label(date_str),
                    temp_max=daily_temperature(temp_maxs[i]),
                    temp_min=daily_temperature(temp_mins[i]),
                    kind=classify(codes[i]).kind,
                )
                for i, date_str in enumerate(times[:FORECAST_DAYS])
            )

            return WeatherSnapshot(
                place_name=place_name,
                temperature=round_half_up(current_data["temperature_2m"]),
                feels_like=round_half_up(current_data["apparent_temperature"]),
                humidity=round_half_up(current_data["relative_humidity_2m"]),
                wind_speed=current_data["wind_speed_10m"],
                condition=classify(current_data["weathercode"]),
                forecast=forecast,
                unit=unit,
            )

        except (KeyError, IndexError, TypeError, ValueError) as e:
            # pydantic's ValidationError is a ValueError
            logger.error(f"Error parsing weather response: {e}")
            raise NetworkError("forecast unavailable") from e
