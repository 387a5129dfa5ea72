"""Data models for the weather engine."""

from .config import Config, GeolocationConfig, LocationConfig, ProviderConfig, Settings
from .sync_state import ErrorInfo, ErrorKind, SyncState
from .weather import (
    Condition,
    ConditionKind,
    Coordinates,
    ForecastDay,
    LocationFix,
    Unit,
    WeatherSnapshot,
)

__all__ = [
    "Condition",
    "ConditionKind",
    "Config",
    "Coordinates",
    "ErrorInfo",
    "ErrorKind",
    "ForecastDay",
    "GeolocationConfig",
    "LocationConfig",
    "LocationFix",
    "ProviderConfig",
    "Settings",
    "SyncState",
    "Unit",
    "WeatherSnapshot",
]
