"""UI components for the weather app."""

from .status_bar import StatusBar
from .weather_panel import WeatherPanel

__all__ = ["StatusBar", "WeatherPanel"]
