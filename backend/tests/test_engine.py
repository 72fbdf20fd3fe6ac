import asyncio
from datetime import date

import pytest

from fakes import (
    DictRatesResolver,
    GridDistanceProvider,
    StubFlightSearch,
    make_rate,
)
from tripcost.services.providers import FlightSearchResult
from tripcost.services.trip_costs.config import TripCostConfiguration
from tripcost.services.trip_costs.engine import TripCostEngine, calculate_multi_stop_trip_costs
from tripcost.services.trip_costs.errors import InvalidInput, ProviderFailure
from tripcost.services.trip_costs.models import Coordinates, FlightItinerary, FlightLeg


class DummyGeocoder:
    def __init__(self, known: dict[str, tuple[float, float]]):
        self.known = known
        self.calls = []

    async def geocode(self, street, city, country):
        self.calls.append(city)
        if city not in self.known:
            raise ProviderFailure("geocoder", f"no result for {city}")
        return Coordinates(*self.known[city])


class FailingRatesResolver:
    async def get_rate(self, country, city=None):
        raise ProviderFailure("rates", "timeout")


def _stop(cid: str, lat: float, work_hours: float = 8, country: str = "DEU", **extra) -> dict:
    return {
        "customer_id": cid,
        "coordinates": {"lat": lat, "lng": 0},
        "country": country,
        "city": f"City {cid}",
        "work_hours": work_hours,
        **extra,
    }


def _request(*stops, **extra) -> dict:
    return {
        "base_location": {"coordinates": {"lat": 0, "lng": 0}},
        "stops": list(stops),
        "trip_date": "2025-03-10",
        **extra,
    }


def _engine(flights=None, distance=None, rates=None, **kwargs) -> TripCostEngine:
    return TripCostEngine(
        distance or GridDistanceProvider(),
        rates or DictRatesResolver({"DEU": make_rate(), "ESP": make_rate(country_code="ESP")}),
        flight_provider=flights,
        config=TripCostConfiguration(),
        **kwargs,
    )


def _run(engine: TripCostEngine, request: dict):
    return asyncio.run(engine.calculate_multi_stop_trip_costs(request))


def test_one_day_road_trip():
    flights = StubFlightSearch()
    request = _request(_stop("C1", 1.5), billing_settings={"defaultStartTime": "05:30"})

    result = _run(_engine(flights), request)

    assert result.recommended == "road"
    assert result.flight_option is None
    assert flights.calls == []
    road = result.road_option
    assert road.days_required == 1
    assert road.travel_cost == pytest.approx(532)
    assert road.total_cost == pytest.approx(1588)
    assert road.grand_total == pytest.approx(1588)
    assert result.work_cost_total == 1056
    assert result.total_days_required == 1
    assert result.hotel_total == 0
    assert result.per_customer_costs is None
    assert result.road_not_available is None
    assert len(result.legs) == 2


def test_default_departure_makes_it_two_days():
    result = _run(_engine(), _request(_stop("C1", 1.5)))

    assert result.road_option.days_required == 2
    assert result.road_option.hotel_nights == 1
    assert result.hotel_total == 80


def test_result_serializes():
    data = _run(_engine(), _request(_stop("C1", 1.5))).to_dict()

    assert data["recommended"] == "road"
    assert data["arbeitszeit_total"] == 1056
    assert data["metadata"]["optimized_sequence"] == ["C1"]
    assert data["metadata"]["trip_date"] == "2025-03-10"
    assert data["trip_fees"]["note"] == "Fees applied once per trip (not per day)"
    assert [leg["from"] for leg in data["legs"]] == ["Base", "City C1"]


def test_multi_customer_sequence_and_allocation():
    request = _request(
        _stop("far", 3, work_hours=4),
        _stop("near", 1, work_hours=2),
        cost_percentages={"far": 70, "near": 30},
    )

    result = _run(_engine(), request)

    assert result.metadata["optimized_sequence"] == ["near", "far"]
    assert result.total_work_hours == 6
    allocations = {a.customer_id: a for a in result.per_customer_costs}
    assert allocations["far"].allocated_cost > allocations["near"].allocated_cost
    assert sum(a.allocated_cost for a in allocations.values()) == pytest.approx(
        result.road_option.grand_total
    )


def test_no_allocation_without_percentages():
    result = _run(_engine(), _request(_stop("A", 1, work_hours=2), _stop("B", 2, work_hours=2)))

    assert result.per_customer_costs is None


def test_unknown_country_uses_default_rate():
    result = _run(_engine(), _request(_stop("C1", 1.5, country="Atlantis")))

    assert result.metadata["rate_fallback"] is True
    assert result.metadata["rates_used"]["source"] == "default"
    assert result.work_cost_total == 8 * 98


def test_rates_provider_failure_uses_default_rate():
    result = _run(_engine(rates=FailingRatesResolver()), _request(_stop("C1", 1.5)))

    assert result.recommended == "road"
    assert result.metadata["rate_fallback"] is True
    assert result.metadata["rates_used"]["source"] == "default"
    assert result.work_cost_total == 8 * 98


def test_billing_rates_override_statutory_rate():
    request = _request(
        _stop("C1", 1.5),
        billing_settings={"workingHourRate": 150, "travelHourRate": 80, "kmRateOwnCar": 0.5},
    )

    result = _run(_engine(), request)

    assert result.work_cost_total == 1200
    assert result.road_option.travel_time_cost == 320
    assert result.road_option.mileage_cost == 150


def test_trip_fees_applied_once():
    rates = DictRatesResolver({"DEU": make_rate(agent_fee=30, company_fee=20)})

    result = _run(_engine(rates=rates), _request(_stop("C1", 1.5)))

    road = result.road_option
    assert road.trip_fees.total_fees == 50
    assert road.grand_total == pytest.approx(road.total_cost + 50)


def test_long_drive_recommends_flight():
    itinerary = FlightItinerary(
        price=350,
        outbound=FlightLeg(departure_time="07:00", arrival_time="09:00", duration_minutes=120),
        return_leg=FlightLeg(departure_time="19:00", duration_minutes=120),
    )
    flights = StubFlightSearch(FlightSearchResult(options=[itinerary]))

    result = _run(_engine(flights), _request(_stop("C1", 12, work_hours=4, country="ESP")))

    assert result.road_option is None
    assert result.road_not_available["reason"] == "Driving time exceeds 15 hours"
    assert result.recommended == "flight"
    assert result.flight_option.flight_cost == 350
    assert result.total_days_required == result.flight_option.days_required
    assert result.allowance_breakdown == result.flight_option.allowances


def test_nothing_available_recommends_none():
    distance = GridDistanceProvider(unreachable={(0, 4)})

    result = _run(_engine(distance=distance), _request(_stop("C1", 4)))

    assert result.road_option is None
    assert result.flight_option is None
    assert result.recommended == "none"
    assert result.total_days_required == 1
    assert result.road_not_available["not_reachable_by_road"] is True
    assert result.to_dict()["tagesspesen_breakdown"] == []


def test_addresses_are_geocoded():
    geocoder = DummyGeocoder({"Kassel": (1.5, 0)})
    request = _request(
        {"customer_id": 7, "city": "Kassel", "country": "DEU", "work_hours": 8},
        billing_settings={"defaultStartTime": "05:30"},
    )

    result = _run(_engine(geocoder=geocoder), request)

    assert geocoder.calls == ["Kassel"]
    assert result.metadata["optimized_sequence"] == ["7"]
    assert result.road_option.total_cost == pytest.approx(1588)


def test_geocoding_failure_leaves_stop_unroutable():
    geocoder = DummyGeocoder({})
    request = _request({"customer_id": "C1", "city": "Nowhere", "country": "DEU", "work_hours": 2})

    result = _run(_engine(geocoder=geocoder), request)

    assert result.road_option is None
    assert result.road_not_available["not_reachable_by_road"] is True


@pytest.mark.parametrize(
    "request_data",
    [
        _request(),
        _request(*[_stop(f"C{i}", i) for i in range(9)]),
        {**_request(_stop("C1", 1)), "trip_date": "10.03.2025"},
        {"stops": [_stop("C1", 1)], "trip_date": "2025-03-10"},
        _request({"customer_id": "C1", "country": "DEU"}),
        _request(_stop("C1", 1, work_hours=-1)),
        _request(_stop("C1", 1), cost_percentages={"C1": 120}),
        _request(_stop("C1", 1), selected_flight={"price": 200, "outbound": {"duration_minutes": "2h 10m"}}),
        _request(_stop("C1", 1), segment_flights={"0": {"mode": "fly", "flight": {"return": {"duration_minutes": "long"}}}}),
        ["not", "a", "mapping"],
    ],
)
def test_invalid_requests_raise(request_data):
    with pytest.raises(InvalidInput):
        _run(_engine(), request_data)


def test_module_level_entry_point():
    result = asyncio.run(calculate_multi_stop_trip_costs(
        _request(_stop("C1", 1.5)),
        GridDistanceProvider(),
        DictRatesResolver({"DEU": make_rate()}),
        config=TripCostConfiguration(),
    ))

    assert result.recommended == "road"
    assert result.metadata["trip_date"] == date(2025, 3, 10).isoformat()
