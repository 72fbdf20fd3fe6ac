"""Geocoding service — Nominatim lookups for addresses given without coordinates."""

import logging

import httpx

from tripcost.config import settings
from tripcost.data.country_rates import ALPHA2_TO_ALPHA3
from tripcost.services.trip_costs.errors import GeocodingNotFound, ProviderFailure
from tripcost.services.trip_costs.models import Coordinates

logger = logging.getLogger(__name__)

_ALPHA3_TO_ALPHA2 = {alpha3: alpha2 for alpha2, alpha3 in ALPHA2_TO_ALPHA3.items()}


def _country_filter(country: str | None) -> str | None:
    """Nominatim filters on lowercase alpha-2 codes; names are left to the query."""
    if not country:
        return None
    code = country.strip().upper()
    if len(code) == 3:
        code = _ALPHA3_TO_ALPHA2.get(code, "")
    return code.lower() if len(code) == 2 else None


class NominatimGeocoder:
    """Async adapter for the Nominatim search endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        user_agent: str | None = None,
        timeout: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = (base_url or settings.nominatim_base_url).rstrip("/")
        self.user_agent = user_agent or settings.nominatim_user_agent
        self.timeout = timeout if timeout is not None else settings.nominatim_timeout_seconds
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(self.timeout, connect=10.0),
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def geocode(self, street: str | None, city: str | None, country: str | None) -> Coordinates:
        query = ", ".join(part for part in (street, city) if part)
        if not query:
            raise GeocodingNotFound("address has neither street nor city")

        params = {"q": query, "format": "json", "limit": 1}
        country_code = _country_filter(country)
        if country_code:
            params["countrycodes"] = country_code
        elif country:
            params["q"] = f"{query}, {country}"

        client = await self._get_client()
        try:
            resp = await client.get(f"{self.base_url}/search", params=params)
            resp.raise_for_status()
            results = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            raise ProviderFailure("nominatim", str(e)) from e

        if not results:
            raise GeocodingNotFound(f"No geocoding result for: {params['q']}")

        first = results[0]
        try:
            coordinates = Coordinates(float(first["lat"]), float(first["lon"]))
        except (KeyError, TypeError, ValueError) as e:
            raise ProviderFailure("nominatim", f"malformed result: {e}") from e
        logger.debug(f"Geocoded {params['q']!r} -> {coordinates.lat:.5f},{coordinates.lng:.5f}")
        return coordinates
