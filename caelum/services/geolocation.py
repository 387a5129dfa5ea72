"""Device geolocation and the initial location race."""

import asyncio
import logging
from abc import ABC, abstractmethod

import httpx

from ..models.weather import Coordinates, LocationFix
from .errors import CapabilityError, LocationPermissionError, NetworkError, WeatherError

logger = logging.getLogger(__name__)

IP_LOOKUP_URL = "https://ipapi.co/json/"


class LocationProvider(ABC):
    """A one-shot source of the device's current position."""

    @abstractmethod
    async def get_current_position(self, *, high_accuracy: bool, timeout: float) -> Coordinates:
        """Return the current position.

        Raises:
            LocationPermissionError: the user or platform denied access.
            NetworkError: the position could not be determined.
        """


class IpLocationProvider(LocationProvider):
    """Approximate position from an IP geolocation service."""

    def __init__(self, url: str = IP_LOOKUP_URL, transport: httpx.AsyncBaseTransport | None = None):
        self.url = url
        self._transport = transport

    async def get_current_position(self, *, high_accuracy: bool, timeout: float) -> Coordinates:
        if high_accuracy:
            logger.debug("IP geolocation is city-level; high accuracy not available")

        try:
            async with httpx.AsyncClient(timeout=timeout, transport=self._transport) as client:
                response = await client.get(self.url)
                response.raise_for_status()
                data = response.json()

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status in (401, 403):
                raise LocationPermissionError("location access denied") from e
            raise NetworkError(f"location lookup failed: HTTP {status}") from e

        except httpx.HTTPError as e:
            raise NetworkError("location lookup failed") from e

        except ValueError as e:
            raise NetworkError("location lookup returned invalid data") from e

        if data.get("error"):
            raise NetworkError(f"location lookup failed: {data.get('reason', 'unknown reason')}")

        try:
            return Coordinates(latitude=float(data["latitude"]), longitude=float(data["longitude"]))
        except (KeyError, TypeError, ValueError) as e:
            raise NetworkError("location lookup returned invalid data") from e


class GeoResolver:
    """Resolves a starting location by racing the device against a timer."""

    def __init__(
        self,
        provider: LocationProvider | None,
        high_accuracy: bool = True,
        device_timeout_ms: int = 5000,
    ):
        self.provider = provider
        self.high_accuracy = high_accuracy
        self.device_timeout_ms = device_timeout_ms
        # Device requests that outlived their race
        self._pending: set[asyncio.Task] = set()

    @property
    def has_capability(self) -> bool:
        return self.provider is not None

    async def _request_position(self) -> Coordinates:
        if self.provider is None:
            raise CapabilityError("geolocation not supported")
        return await self.provider.get_current_position(
            high_accuracy=self.high_accuracy,
            timeout=self.device_timeout_ms / 1000,
        )

    async def acquire_initial_location(
        self, fallback: Coordinates, fallback_name: str, timeout_ms: int
    ) -> LocationFix:
        """Resolve the starting location exactly once.

        The device request and a fallback timer of ``timeout_ms`` run
        concurrently. A device success yields its coordinates with no
        name; a device failure or the timer firing first yields the
        fallback. Whichever signal settles the race first wins and the
        other becomes inert. Never raises.
        """
        fallback_fix = LocationFix(coordinates=fallback, name=fallback_name)

        if not self.has_capability:
            logger.info(f"No geolocation capability, using {fallback_name}")
            return fallback_fix

        loop = asyncio.get_running_loop()
        latch: asyncio.Future[LocationFix] = loop.create_future()

        def settle(fix: LocationFix, source: str) -> None:
            if latch.done():
                logger.debug(f"Ignoring {source}, location already resolved")
                return
            logger.debug(f"Location resolved by {source}")
            latch.set_result(fix)

        def on_device_done(task: asyncio.Task) -> None:
            self._pending.discard(task)
            if task.cancelled():
                return
            error = task.exception()
            if error is None:
                settle(LocationFix(coordinates=task.result()), "device position")
                return
            if isinstance(error, WeatherError):
                logger.info(f"Device geolocation failed ({error}), using {fallback_name}")
            else:
                logger.warning(f"Unexpected geolocation error: {error}")
            settle(fallback_fix, "device failure")

        timer = loop.call_later(timeout_ms / 1000, settle, fallback_fix, "fallback timer")
        device = asyncio.create_task(self._request_position())
        self._pending.add(device)
        device.add_done_callback(on_device_done)

        try:
            return await latch
        finally:
            timer.cancel()

    async def locate(self) -> LocationFix:
        """Interactive one-shot lookup with no fallback.

        Raises:
            CapabilityError: no geolocation capability is configured.
            LocationPermissionError: access was denied.
            NetworkError: the position could not be determined.
        """
        try:
            coords = await self._request_position()
        except WeatherError:
            raise
        except Exception as e:
            logger.error(f"Unexpected geolocation error: {e}")
            raise NetworkError("location unavailable") from e
        return LocationFix(coordinates=coords)
