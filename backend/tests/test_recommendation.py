import pytest

from fakes import make_flight_option, make_rate, make_road_option
from tripcost.services.trip_costs.recommendation import (
    FLIGHT,
    NONE,
    ROAD,
    apply_fees,
    calculate_trip_fees,
    recommend,
)


def test_trip_fees_are_flat_plus_percentage():
    fees = calculate_trip_fees(1000, make_rate(agent_fee=25, company_fee=10, additional_fee_percent=5))

    assert fees.additional_fee_amount == 50
    assert fees.total_fees == 85


def test_percentage_fee_rounds_to_cents():
    fees = calculate_trip_fees(1234.56, make_rate(additional_fee_percent=2.5))

    assert fees.additional_fee_amount == 30.86
    assert fees.total_fees == 30.86


def test_no_fees_configured():
    fees = calculate_trip_fees(1000, make_rate())

    assert fees.total_fees == 0
    assert fees.additional_fee_amount == 0


def test_apply_fees_sets_fee_inclusive_total():
    option = apply_fees(make_road_option(), make_rate(agent_fee=20))

    assert option.trip_fees.total_fees == 20
    assert option.total_cost_with_fees == pytest.approx(552)
    assert option.grand_total == pytest.approx(552)
    assert option.total_cost == 532


def test_apply_fees_passes_through_missing_option():
    assert apply_fees(None, make_rate(agent_fee=20)) is None


def test_cheaper_road_wins():
    assert recommend(make_road_option(), make_flight_option()) == ROAD


def test_cheaper_flight_wins():
    assert recommend(make_road_option(travel_time=2000), make_flight_option()) == FLIGHT


def test_tie_goes_to_road():
    road = make_road_option()
    flight = make_flight_option(flight=367, travel_time=0)
    assert flight.total_cost == road.total_cost

    assert recommend(road, flight) == ROAD


@pytest.mark.parametrize(
    "road, flight, expected",
    [
        (None, None, NONE),
        ("road", None, ROAD),
        (None, "flight", FLIGHT),
    ],
)
def test_single_or_no_option(road, flight, expected):
    road = make_road_option() if road else None
    flight = make_flight_option() if flight else None

    assert recommend(road, flight) == expected
