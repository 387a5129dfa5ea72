"""Keeps the current weather snapshot fresh.

The scheduler owns the single ``SyncState`` of a running instance. Fetches
are started by startup, unit changes, manual refreshes, searches and a
periodic timer. They are never serialized or cancelled: each fetch is
tagged with a sequence number when it starts and its outcome is installed
only if it is newer than the last installed outcome, so an older request
finishing late can never overwrite a newer one.
"""

import asyncio
import itertools
import logging
from collections.abc import Callable, Coroutine
from datetime import datetime

import httpx

from ..models.config import Config
from ..models.sync_state import SyncState
from ..models.weather import Coordinates, LocationFix, Unit
from .errors import WeatherError
from .forecast_client import ForecastClient
from .geocoding import PlaceNameResolver, SearchResolver
from .geolocation import GeoResolver, IpLocationProvider

logger = logging.getLogger(__name__)

REFRESH_INTERVAL_MINUTES = 10
GEOLOCATION_TIMEOUT_MS = 4000

StateListener = Callable[[SyncState], None]


class SyncScheduler:
    """Owns the current location, unit and snapshot."""

    def __init__(
        self,
        forecast_client: ForecastClient,
        search_resolver: SearchResolver,
        geo_resolver: GeoResolver,
        unit: Unit = Unit.CELSIUS,
        refresh_interval: float = REFRESH_INTERVAL_MINUTES * 60,
        geolocation_timeout_ms: int = GEOLOCATION_TIMEOUT_MS,
    ):
        self.forecast_client = forecast_client
        self.search_resolver = search_resolver
        self.geo_resolver = geo_resolver
        self.refresh_interval = refresh_interval
        self.geolocation_timeout_ms = geolocation_timeout_ms

        self._state = SyncState(unit=unit)
        self._known_name: str | None = None
        self._listeners: list[StateListener] = []

        self._sequence = itertools.count(1)
        self._applied_seq = 0
        self._in_flight = 0

        self._refresh_task: asyncio.Task | None = None
        self._closed = False
        self._tasks: set[asyncio.Task] = set()

    @classmethod
    def from_config(
        cls, config: Config, transport: httpx.AsyncBaseTransport | None = None
    ) -> "SyncScheduler":
        """Wire up the scheduler and its collaborators from configuration."""
        providers = config.providers
        http = {
            "language": providers.language,
            "timeout": providers.timeout_seconds,
            "transport": transport,
        }
        place_resolver = PlaceNameResolver(providers.reverse_url, **http)
        forecast_client = ForecastClient(
            place_resolver,
            url=providers.forecast_url,
            timeout=providers.timeout_seconds,
            transport=transport,
        )

        geo = config.geolocation
        provider = None
        if geo.provider == "ip":
            provider = IpLocationProvider(geo.ip_lookup_url, transport=transport)

        return cls(
            forecast_client,
            SearchResolver(providers.search_url, **http),
            GeoResolver(
                provider,
                high_accuracy=geo.high_accuracy,
                device_timeout_ms=geo.device_timeout_ms,
            ),
            unit=config.settings.unit,
            refresh_interval=config.settings.refresh_interval_minutes * 60,
            geolocation_timeout_ms=geo.timeout_ms,
        )

    @property
    def state(self) -> SyncState:
        return self._state

    @property
    def unit(self) -> Unit:
        return self._state.unit

    @property
    def known_name(self) -> str | None:
        """Place name reused for refetches of the current coordinates."""
        return self._known_name

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with every new state."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _install(self, **changes) -> None:
        """Replace the state in one step and notify listeners."""
        self._state = self._state.model_copy(update=changes)
        for listener in list(self._listeners):
            try:
                listener(self._state)
            except Exception as e:
                logger.error(f"State listener failed: {e}")

    # Operations

    async def start(self, fallback: Coordinates, fallback_name: str) -> None:
        """Resolve the initial location and perform the first fetch."""
        fix = await self.geo_resolver.acquire_initial_location(
            fallback, fallback_name, self.geolocation_timeout_ms
        )
        logger.info(f"Starting at {fix.name or fix.coordinates.label}")
        await self._set_location(fix)

    async def set_unit(self, unit: Unit) -> None:
        """Switch units and refetch the current location."""
        if unit == self._state.unit:
            return
        logger.info(f"Unit changed to {unit.symbol}")
        self._install(unit=unit)
        if self._state.coordinates is not None:
            await self._fetch(self._state.coordinates, unit, self._known_name)

    async def refresh_now(self) -> None:
        """Refetch the current location; does nothing without coordinates."""
        coords = self._state.coordinates
        if coords is None:
            logger.debug("Refresh skipped, no location yet")
            return
        await self._fetch(coords, self._state.unit, self._known_name)

    async def search(self, text: str) -> None:
        """Move to a searched place and fetch its weather.

        Blank queries are ignored. Lookup failures are reported through
        ``state.error`` without touching the current location or snapshot.
        """
        if not text.strip():
            return

        try:
            fix = await self.search_resolver.resolve_query(text)
        except WeatherError as e:
            logger.info(f"Search for '{text.strip()}' failed: {e}")
            self._install(error=e.to_info())
            return

        await self._set_location(fix)

    async def locate(self) -> None:
        """Move to the device's current position ("locate me")."""
        try:
            fix = await self.geo_resolver.locate()
        except WeatherError as e:
            logger.info(f"Locate failed: {e}")
            self._install(error=e.to_info())
            return

        await self._set_location(fix)

    async def shutdown(self) -> None:
        """Stop the periodic refresh for good. In-flight fetches are left to finish."""
        self._closed = True
        task, self._refresh_task = self._refresh_task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        logger.debug("Scheduler shut down")

    # Internals

    async def _set_location(self, fix: LocationFix) -> None:
        self._known_name = fix.name
        self._install(coordinates=fix.coordinates)
        self._restart_refresh_timer()
        await self._fetch(fix.coordinates, self._state.unit, fix.name)

    async def _fetch(self, coords: Coordinates, unit: Unit, known_name: str | None) -> None:
        """Run one fetch cycle and install its outcome unless superseded."""
        seq = next(self._sequence)
        self._in_flight += 1
        self._install(loading=True, error=None, last_updated=datetime.now())

        outcome: dict = {}
        try:
            snapshot = await self.forecast_client.fetch_snapshot(coords, unit, known_name)
            outcome = {"snapshot": snapshot, "error": None}
        except WeatherError as e:
            outcome = {"error": e.to_info()}
        finally:
            self._in_flight -= 1
            if seq <= self._applied_seq:
                logger.debug(f"Discarding result of fetch #{seq}, #{self._applied_seq} is newer")
                outcome = {}
            elif outcome:
                self._applied_seq = seq
            self._install(loading=self._in_flight > 0, **outcome)

        snapshot = outcome.get("snapshot")
        if snapshot is not None and coords == self._state.coordinates:
            self._known_name = snapshot.place_name

    def _spawn(self, coro: Coroutine) -> asyncio.Task:
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def _restart_refresh_timer(self) -> None:
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            self._refresh_task = None
        if self._closed:
            return
        self._refresh_task = asyncio.create_task(self._refresh_loop())

    async def _refresh_loop(self) -> None:
        while self._state.coordinates is not None:
            await asyncio.sleep(self.refresh_interval)
            if self._closed:
                return
            logger.debug("Periodic refresh")
            self._spawn(self.refresh_now())
