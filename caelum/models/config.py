"""Configuration models using Pydantic for validation."""

import json
from pathlib import Path
from typing import Literal
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator

from .weather import Coordinates, Unit


def _validate_http_url(v: str) -> str:
    try:
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https"):
            raise ValueError(f"URL must use http or https scheme, got '{parsed.scheme}'")
        if not parsed.netloc:
            raise ValueError("URL must have a valid host")
    except Exception as e:
        raise ValueError(f"Invalid URL '{v}': {e}")
    return v


class LocationConfig(BaseModel):
    """Fallback location used when device geolocation is unavailable."""

    name: str = Field(default="Roma", min_length=1, max_length=100)
    latitude: float = 41.9028
    longitude: float = 12.4964

    @field_validator("latitude")
    @classmethod
    def validate_latitude(cls, v: float) -> float:
        """Validate latitude is in valid range."""
        if not -90 <= v <= 90:
            raise ValueError(f"Latitude must be between -90 and 90, got {v}")
        return v

    @field_validator("longitude")
    @classmethod
    def validate_longitude(cls, v: float) -> float:
        """Validate longitude is in valid range."""
        if not -180 <= v <= 180:
            raise ValueError(f"Longitude must be between -180 and 180, got {v}")
        return v

    @property
    def coordinates(self) -> Coordinates:
        return Coordinates(latitude=self.latitude, longitude=self.longitude)


class GeolocationConfig(BaseModel):
    """Device geolocation settings."""

    provider: Literal["ip", "none"] = "ip"
    timeout_ms: int = Field(default=4000, ge=0)  # Fallback timer
    device_timeout_ms: int = Field(default=5000, gt=0)  # Bounded wait passed to the device
    high_accuracy: bool = True
    ip_lookup_url: str = "https://ipapi.co/json/"

    @field_validator("ip_lookup_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate that URL is a valid HTTP/HTTPS URL."""
        return _validate_http_url(v)


class ProviderConfig(BaseModel):
    """Remote weather and geocoding endpoints."""

    forecast_url: str = "https://api.open-meteo.com/v1/forecast"
    reverse_url: str = "https://nominatim.openstreetmap.org/reverse"
    search_url: str = "https://nominatim.openstreetmap.org/search"
    language: str = "en"
    timeout_seconds: float = Field(default=30.0, gt=0)

    @field_validator("forecast_url", "reverse_url", "search_url")
    @classmethod
    def validate_url(cls, v: str) -> str:
        """Validate that URL is a valid HTTP/HTTPS URL."""
        return _validate_http_url(v)


class Settings(BaseModel):
    """General application settings."""

    unit: Unit = Unit.CELSIUS
    refresh_interval_minutes: float = Field(default=10, gt=0)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"


class Config(BaseModel):
    """Main configuration model."""

    location: LocationConfig = Field(default_factory=LocationConfig)
    geolocation: GeolocationConfig = Field(default_factory=GeolocationConfig)
    providers: ProviderConfig = Field(default_factory=ProviderConfig)
    settings: Settings = Field(default_factory=Settings)

    @classmethod
    def load(cls, path: Path | str = "config.json") -> "Config":
        """Load configuration from a JSON file."""
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")

        with open(path) as f:
            data = json.load(f)

        return cls.model_validate(data)

    @classmethod
    def load_or_default(cls, path: Path | str = "config.json") -> "Config":
        """Load configuration or return default if file doesn't exist."""
        try:
            return cls.load(path)
        except FileNotFoundError:
            return cls()
