"""Weather data models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Unit(str, Enum):
    """Temperature unit selection."""

    CELSIUS = "C"
    FAHRENHEIT = "F"

    @property
    def provider_token(self) -> str:
        """Open-Meteo token for this unit."""
        return "celsius" if self is Unit.CELSIUS else "fahrenheit"

    @property
    def symbol(self) -> str:
        return "°C" if self is Unit.CELSIUS else "°F"

    def toggled(self) -> "Unit":
        return Unit.FAHRENHEIT if self is Unit.CELSIUS else Unit.CELSIUS


class ConditionKind(str, Enum):
    """Semantic weather condition categories."""

    CLEAR = "clear"
    CLOUDS = "clouds"
    RAIN = "rain"
    DRIZZLE = "drizzle"
    THUNDERSTORM = "thunderstorm"
    SNOW = "snow"
    MIST = "mist"
    FOG = "fog"
    UNKNOWN = "unknown"


class Coordinates(BaseModel):
    """A latitude/longitude pair."""

    model_config = ConfigDict(frozen=True)

    latitude: float
    longitude: float

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
    def label(self) -> str:
        """Coordinates formatted as a place name of last resort."""
        return f"{self.latitude:.2f}, {self.longitude:.2f}"


class Condition(BaseModel):
    """Classified weather condition."""

    model_config = ConfigDict(frozen=True)

    kind: ConditionKind
    description: str


class ForecastDay(BaseModel):
    """Daily forecast entry.

    temp_max >= temp_min is not guaranteed; values are taken from the
    provider as-is.
    """

    model_config = ConfigDict(frozen=True)

    day_label: str
    temp_max: int
    temp_min: int
    kind: ConditionKind


class WeatherSnapshot(BaseModel):
    """Complete weather result for one location at one point in time."""

    model_config = ConfigDict(frozen=True)

    place_name: str
    temperature: int
    feels_like: int
    humidity: int = Field(ge=0, le=100)
    wind_speed: float
    condition: Condition
    forecast: tuple[ForecastDay, ...] = Field(min_length=7, max_length=7)
    unit: Unit = Unit.CELSIUS

    @property
    def today(self) -> ForecastDay:
        return self.forecast[0]


class LocationFix(BaseModel):
    """Outcome of a geolocation attempt."""

    model_config = ConfigDict(frozen=True)

    coordinates: Coordinates
    name: str | None = None
