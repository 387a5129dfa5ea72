"""Place name lookups using the Nominatim geocoding API."""

import logging

import httpx

from .. import __version__
from ..models.weather import Coordinates, LocationFix
from .errors import NetworkError, NotFoundError

logger = logging.getLogger(__name__)

REVERSE_URL = "https://nominatim.openstreetmap.org/reverse"
SEARCH_URL = "https://nominatim.openstreetmap.org/search"


def _first_segment(display_name: str) -> str:
    """Return the leading comma-delimited part of a display address."""
    return display_name.split(",")[0].strip()


class _NominatimClient:
    """Shared request plumbing for the Nominatim endpoints."""

    def __init__(
        self,
        url: str,
        language: str = "en",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.language = language
        self.timeout = timeout
        self._transport = transport

    @property
    def headers(self) -> dict[str, str]:
        return {
            "Accept-Language": self.language,
            "User-Agent": f"caelum/{__version__}",
        }

    async def _get_json(self, params: dict) -> object:
        async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
            response = await client.get(self.url, params=params, headers=self.headers)
            response.raise_for_status()
            return response.json()


class PlaceNameResolver(_NominatimClient):
    """Best-effort reverse geocoding of coordinates to a display name."""

    def __init__(self, url: str = REVERSE_URL, **kwargs):
        super().__init__(url, **kwargs)

    async def resolve_name(self, coords: Coordinates) -> str | None:
        """Look up a display name for coordinates.

        Returns None on any failure; never raises.
        """
        params = {
            "format": "json",
            "lat": coords.latitude,
            "lon": coords.longitude,
            "zoom": 10,
        }

        try:
            data = await self._get_json(params)
            address = data.get("address") or {}
            name = address.get("city") or address.get("town")
            if not name and data.get("display_name"):
                name = _first_segment(data["display_name"])
            return name or None

        except httpx.HTTPStatusError as e:
            logger.warning(f"Reverse geocoding HTTP error: {e.response.status_code}")
        except httpx.HTTPError as e:
            logger.warning(f"Reverse geocoding failed for {coords.label}: {e}")
        except Exception as e:
            logger.warning(f"Unreadable reverse geocoding response for {coords.label}: {e}")
        return None


class SearchResolver(_NominatimClient):
    """Forward geocoding of a free-text place query."""

    def __init__(self, url: str = SEARCH_URL, **kwargs):
        super().__init__(url, **kwargs)

    async def resolve_query(self, text: str) -> LocationFix:
        """Look up the best match for a place query.

        Raises NotFoundError when nothing matches and NetworkError on
        transport or parse failures. Callers must not pass blank text.
        """
        query = text.strip()
        if not query:
            raise ValueError("Search query must not be blank")

        params = {"format": "json", "q": query, "limit": 1}

        try:
            results = await self._get_json(params)
        except httpx.HTTPStatusError as e:
            logger.error(f"Search HTTP error: {e.response.status_code}")
            raise NetworkError("search unavailable") from e
        except httpx.HTTPError as e:
            logger.error(f"Search request failed: {e}")
            raise NetworkError("search unavailable") from e
        except ValueError as e:
            logger.error(f"Search returned invalid JSON: {e}")
            raise NetworkError("search unavailable") from e

        if not isinstance(results, list):
            logger.error(f"Unexpected search payload: {type(results).__name__}")
            raise NetworkError("search unavailable")
        if not results:
            logger.info(f"No place found for '{query}'")
            raise NotFoundError("place not found")

        place = results[0]
        try:
            coords = Coordinates(latitude=float(place["lat"]), longitude=float(place["lon"]))
            name = _first_segment(place["display_name"])
        except (KeyError, TypeError, ValueError) as e:
            logger.error(f"Error parsing search result: {e}")
            raise NetworkError("search unavailable") from e

        logger.debug(f"Resolved '{query}' to {name} ({coords.label})")
        return LocationFix(coordinates=coords, name=name)
