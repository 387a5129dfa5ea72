"""Exceptions raised by the weather and location services."""

from ..models.sync_state import ErrorInfo, ErrorKind


class WeatherError(Exception):
    """Base class for recoverable engine failures."""

    kind: ErrorKind = ErrorKind.NETWORK

    def to_info(self) -> ErrorInfo:
        return ErrorInfo(kind=self.kind, message=str(self))


class NetworkError(WeatherError):
    """Transport failure or non-success response from a provider."""

    kind = ErrorKind.NETWORK


class NotFoundError(WeatherError):
    """A search query matched no place."""

    kind = ErrorKind.NOT_FOUND


class LocationPermissionError(WeatherError):
    """Device geolocation was denied."""

    kind = ErrorKind.PERMISSION


class CapabilityError(WeatherError):
    """The platform offers no geolocation capability."""

    kind = ErrorKind.CAPABILITY
