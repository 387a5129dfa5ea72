"""Services for locating the user and fetching weather."""

from .conditions import classify
from .errors import (
    CapabilityError,
    LocationPermissionError,
    NetworkError,
    NotFoundError,
    WeatherError,
)
from .forecast_client import ForecastClient
from .geocoding import PlaceNameResolver, SearchResolver
from .geolocation import GeoResolver, IpLocationProvider, LocationProvider
from .scheduler import SyncScheduler

__all__ = [
    "CapabilityError",
    "ForecastClient",
    "GeoResolver",
    "IpLocationProvider",
    "LocationPermissionError",
    "LocationProvider",
    "NetworkError",
    "NotFoundError",
    "PlaceNameResolver",
    "SearchResolver",
    "SyncScheduler",
    "WeatherError",
    "classify",
]
