"""Distance service — OSRM road distances with a great-circle fallback."""

import asyncio
import logging
import math

import httpx

from tripcost.config import settings
from tripcost.services.providers import DistanceResult, TollRoute
from tripcost.services.trip_costs.errors import ProviderFailure, RouteUnreachable
from tripcost.services.trip_costs.models import Coordinates, Location

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371.0
NO_ROUTE_CODES = ("NoRoute", "NoSegment")


def _coordinates(location: Location) -> Coordinates:
    if location.coordinates is None:
        raise ProviderFailure("distance", f"location has no coordinates: {location.address}")
    return location.coordinates


def haversine_km(a: Coordinates, b: Coordinates) -> float:
    """Great-circle distance between two points in km."""
    lat1, lon1 = math.radians(a.lat), math.radians(a.lng)
    lat2, lon2 = math.radians(b.lat), math.radians(b.lng)
    dlat = lat2 - lat1
    dlon = lon2 - lon1
    h = math.sin(dlat / 2) ** 2 + math.cos(lat1) * math.cos(lat2) * math.sin(dlon / 2) ** 2
    return 2 * EARTH_RADIUS_KM * math.asin(math.sqrt(h))


class OSRMDistanceProvider:
    """Async adapter for the OSRM route endpoint."""

    def __init__(
        self,
        base_url: str | None = None,
        profile: str | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
        backoff_seconds: float | None = None,
        client: httpx.AsyncClient | None = None,
    ):
        self.base_url = (base_url or settings.osrm_base_url).rstrip("/")
        self.profile = profile or settings.osrm_profile
        self.timeout = timeout if timeout is not None else settings.osrm_timeout_seconds
        self.max_retries = max_retries if max_retries is not None else settings.osrm_max_retries
        self.backoff_seconds = (
            backoff_seconds if backoff_seconds is not None else settings.osrm_backoff_seconds
        )
        self._client = client

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=httpx.Timeout(self.timeout, connect=10.0))
        return self._client

    async def close(self):
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _route(self, points: list[Coordinates]) -> dict:
        coordinate_str = ";".join(f"{p.lng},{p.lat}" for p in points)
        url = f"{self.base_url}/route/v1/{self.profile}/{coordinate_str}"
        client = await self._get_client()

        attempt = 0
        while True:
            try:
                resp = await client.get(url, params={"overview": "false"})
                # OSRM answers routing failures with a 400 and a JSON code
                if resp.status_code != 400:
                    resp.raise_for_status()
                data = resp.json()
                if data.get("code") in NO_ROUTE_CODES:
                    raise RouteUnreachable(data.get("message", data["code"]))
                if data.get("code") != "Ok" or not data.get("routes"):
                    raise ProviderFailure("osrm", data.get("message", "no route found"))
                return data["routes"][0]
            except ProviderFailure:
                raise
            except (httpx.HTTPError, ValueError) as e:
                attempt += 1
                if attempt > self.max_retries:
                    logger.warning(f"OSRM route failed after {self.max_retries} retries: {e}")
                    raise ProviderFailure("osrm", str(e)) from e
                wait_time = self.backoff_seconds * (2 ** (attempt - 1))
                logger.debug(f"OSRM error, retrying in {wait_time:.1f}s (attempt {attempt}/{self.max_retries}): {e}")
                await asyncio.sleep(wait_time)

    async def distance(self, origin: Location, destination: Location) -> DistanceResult:
        route = await self._route([_coordinates(origin), _coordinates(destination)])
        return DistanceResult(
            distance_km=route["distance"] / 1000,
            duration_minutes=route["duration"] / 60,
            source="osrm",
        )

    async def route_with_tolls(
        self,
        origin: Location,
        destination: Location,
        waypoints: list[Location],
    ) -> TollRoute:
        """OSRM has no toll data; returns the full path with zero toll."""
        points = [_coordinates(origin), *(_coordinates(w) for w in waypoints), _coordinates(destination)]
        route = await self._route(points)
        return TollRoute(
            toll_cost=0.0,
            distance_km=route["distance"] / 1000,
            duration_minutes=route["duration"] / 60,
            source="none",
        )


class HaversineDistanceProvider:
    """Straight-line distance stretched by a detour factor at an average speed."""

    def __init__(self, average_speed_kmh: float | None = None, detour_factor: float | None = None):
        self.average_speed_kmh = average_speed_kmh or settings.fallback_average_speed_kmh
        self.detour_factor = detour_factor or settings.fallback_detour_factor

    async def distance(self, origin: Location, destination: Location) -> DistanceResult:
        km = haversine_km(_coordinates(origin), _coordinates(destination)) * self.detour_factor
        return DistanceResult(
            distance_km=km,
            duration_minutes=km / self.average_speed_kmh * 60,
            source="haversine",
        )


class FallbackDistanceProvider:
    """Tries each provider in order; the last failure propagates.

    RouteUnreachable is an answer, not a failure, and is never retried.
    """

    def __init__(self, *providers):
        if not providers:
            raise ValueError("FallbackDistanceProvider needs at least one provider")
        self.providers = providers

    async def distance(self, origin: Location, destination: Location) -> DistanceResult:
        last_error: Exception | None = None
        for provider in self.providers:
            try:
                return await provider.distance(origin, destination)
            except ProviderFailure as e:
                logger.warning(f"{type(provider).__name__} failed, trying next: {e}")
                last_error = e
        raise last_error
