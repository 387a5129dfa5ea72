"""Tests for device geolocation and the initial location race."""

import asyncio
import logging

import httpx
import pytest

from caelum.models.weather import Coordinates
from caelum.services.errors import CapabilityError, LocationPermissionError, NetworkError
from caelum.services.geolocation import GeoResolver, IpLocationProvider


def _elapsed_since(start: float) -> float:
    return asyncio.get_running_loop().time() - start


class TestAcquireInitialLocation:
    """Tests for the device-versus-timer race."""

    @pytest.mark.asyncio
    async def test_timer_wins_when_device_never_answers(
        self, location_provider_factory, roma
    ):
        """Test the fallback resolves at the timeout and not before."""
        resolver = GeoResolver(location_provider_factory(never=True))
        start = asyncio.get_running_loop().time()

        fix = await resolver.acquire_initial_location(roma, "Roma", timeout_ms=300)

        assert _elapsed_since(start) >= 0.29
        assert fix.coordinates == roma
        assert fix.name == "Roma"

    @pytest.mark.asyncio
    async def test_device_wins_before_timeout(self, location_provider_factory, roma, milano):
        """Test a device answer before the timeout wins with no name."""
        resolver = GeoResolver(location_provider_factory(coords=milano, delay=0.05))
        start = asyncio.get_running_loop().time()

        fix = await resolver.acquire_initial_location(roma, "Roma", timeout_ms=2000)

        assert _elapsed_since(start) < 1.0
        assert fix.coordinates == milano
        assert fix.name is None

    @pytest.mark.asyncio
    async def test_device_failure_resolves_fallback_immediately(self, denied_provider, roma):
        """Test a denial does not wait out the timer."""
        resolver = GeoResolver(denied_provider)
        start = asyncio.get_running_loop().time()

        fix = await resolver.acquire_initial_location(roma, "Roma", timeout_ms=5000)

        assert _elapsed_since(start) < 1.0
        assert fix.coordinates == roma
        assert fix.name == "Roma"

    @pytest.mark.asyncio
    async def test_unexpected_device_error_resolves_fallback(
        self, location_provider_factory, roma
    ):
        """Test unexpected device errors never propagate."""
        resolver = GeoResolver(location_provider_factory(error=RuntimeError("driver crashed")))
        fix = await resolver.acquire_initial_location(roma, "Roma", timeout_ms=5000)
        assert fix.name == "Roma"

    @pytest.mark.asyncio
    async def test_no_capability_skips_race(self, roma):
        """Test a missing capability resolves the fallback at once."""
        resolver = GeoResolver(None)
        assert resolver.has_capability is False

        fix = await resolver.acquire_initial_location(roma, "Roma", timeout_ms=60_000)

        assert fix.coordinates == roma
        assert fix.name == "Roma"

    @pytest.mark.asyncio
    async def test_late_device_answer_is_ignored(
        self, location_provider_factory, roma, milano, caplog
    ):
        """Test a device answer arriving after the timer is dropped by the latch."""
        provider = location_provider_factory(coords=milano, delay=0.15)
        resolver = GeoResolver(provider)

        with caplog.at_level(logging.DEBUG, logger="caelum.services.geolocation"):
            fix = await resolver.acquire_initial_location(roma, "Roma", timeout_ms=20)
            assert fix.coordinates == roma
            assert "Ignoring device position" not in caplog.text

            await asyncio.sleep(0.25)

        assert "Location resolved by fallback timer" in caplog.text
        assert "Ignoring device position, location already resolved" in caplog.text
        assert "Location resolved by device position" not in caplog.text
        assert resolver._pending == set()

    @pytest.mark.asyncio
    async def test_requests_high_accuracy_with_bounded_wait(
        self, location_provider_factory, roma, milano
    ):
        """Test the device is asked for high accuracy and a timeout."""
        provider = location_provider_factory(coords=milano)
        resolver = GeoResolver(provider, high_accuracy=True, device_timeout_ms=5000)

        await resolver.acquire_initial_location(roma, "Roma", timeout_ms=4000)

        assert provider.requests == [(True, 5.0)]


class TestLocate:
    """Tests for the interactive one-shot lookup."""

    @pytest.mark.asyncio
    async def test_success(self, location_provider_factory, milano):
        """Test a device answer yields its coordinates with no name."""
        resolver = GeoResolver(location_provider_factory(coords=milano))
        fix = await resolver.locate()
        assert fix.coordinates == milano
        assert fix.name is None

    @pytest.mark.asyncio
    async def test_denied(self, denied_provider):
        """Test a denial is reported, not replaced by a fallback."""
        with pytest.raises(LocationPermissionError):
            await GeoResolver(denied_provider).locate()

    @pytest.mark.asyncio
    async def test_no_capability(self):
        """Test a missing capability is reported."""
        with pytest.raises(CapabilityError):
            await GeoResolver(None).locate()

    @pytest.mark.asyncio
    async def test_unexpected_error_becomes_network_error(self, location_provider_factory):
        """Test unexpected device errors are normalized."""
        resolver = GeoResolver(location_provider_factory(error=RuntimeError("boom")))
        with pytest.raises(NetworkError):
            await resolver.locate()


class TestIpLocationProvider:
    """Tests for IP-based geolocation."""

    @pytest.mark.asyncio
    async def test_success(self, provider_stub):
        """Test coordinates are read from the lookup response."""
        provider = IpLocationProvider(transport=provider_stub.transport)
        coords = await provider.get_current_position(high_accuracy=True, timeout=5.0)
        assert coords == Coordinates(latitude=45.4642, longitude=9.19)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [401, 403])
    async def test_forbidden_is_permission_error(self, provider_stub, status):
        """Test access refusals map to a permission error."""
        provider_stub.routes["/json/"] = (status, {"error": True})
        provider = IpLocationProvider(transport=provider_stub.transport)
        with pytest.raises(LocationPermissionError):
            await provider.get_current_position(high_accuracy=False, timeout=5.0)

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "route",
        [
            (500, {"error": True}),
            (200, {"error": True, "reason": "RateLimited"}),
            (200, {"city": "Nowhere"}),
            (200, "garbage"),
            (0, httpx.ConnectError("offline")),
        ],
    )
    async def test_failures(self, provider_stub, route):
        """Test lookup failures raise NetworkError."""
        provider_stub.routes["/json/"] = route
        provider = IpLocationProvider(transport=provider_stub.transport)
        with pytest.raises(NetworkError):
            await provider.get_current_position(high_accuracy=False, timeout=5.0)
