"""Collaborator interfaces — geocoding, distance, tolls, flight search and rates."""

from dataclasses import dataclass, field
from datetime import date
from typing import Protocol

from tripcost.services.trip_costs.models import (
    Coordinates,
    FlightItinerary,
    Location,
    Rate,
    RentalCar,
)


@dataclass(frozen=True)
class DistanceResult:
    distance_km: float
    duration_minutes: float
    source: str = "osrm"


@dataclass(frozen=True)
class TollRoute:
    toll_cost: float = 0.0
    distance_km: float = 0.0
    duration_minutes: float = 0.0
    toll_details: list[dict] = field(default_factory=list)
    source: str = "none"


@dataclass(frozen=True)
class Airport:
    code: str
    name: str | None = None
    city: str | None = None
    coordinates: Coordinates | None = None


@dataclass(frozen=True)
class FlightSearchResult:
    """What a flight search returns; any part may be empty."""
    options: list[FlightItinerary] = field(default_factory=list)
    median: FlightItinerary | None = None
    rental_cars: list[RentalCar] = field(default_factory=list)
    origin_airport: Airport | None = None
    destination_airport: Airport | None = None
    statistics: dict | None = None

    @property
    def is_empty(self) -> bool:
        return not self.options and self.median is None

    def representative(self) -> FlightItinerary | None:
        """Provider median if given, else the median-priced option."""
        if self.median is not None:
            return self.median
        if not self.options:
            return None
        by_price = sorted(self.options, key=lambda option: option.parent_price)
        return by_price[len(by_price) // 2]


class Geocoder(Protocol):
    async def geocode(self, street: str | None, city: str | None, country: str | None) -> Coordinates: ...


class DistanceProvider(Protocol):
    async def distance(self, origin: Location, destination: Location) -> DistanceResult: ...


class TollProvider(Protocol):
    async def route_with_tolls(
        self,
        origin: Location,
        destination: Location,
        waypoints: list[Location],
    ) -> TollRoute: ...


class FlightSearchProvider(Protocol):
    async def search_flights(
        self,
        origin: Location,
        destination: Location,
        depart_date: date,
        return_date: date | None = None,
    ) -> FlightSearchResult: ...


class RatesResolver(Protocol):
    async def get_rate(self, country: str, city: str | None = None) -> Rate: ...
