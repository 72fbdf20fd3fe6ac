import pytest

from tripcost.services.trip_costs.config import AirportTimes, WorkingDay
from tripcost.services.trip_costs.day_count import (
    DayPhase,
    estimate_flight_days,
    estimate_road_days,
    outbound_arrival_hour,
    parse_flight_clock,
)
from tripcost.services.trip_costs.models import FlightLeg

DAY = WorkingDay()
EARLY = WorkingDay(departure_hour=5.5)


def test_road_same_day_when_work_fits_and_day_not_too_long():
    result = estimate_road_days(4, 8, EARLY)

    assert result.phase is DayPhase.CAN_START_SAME_DAY
    assert result.arrival_hour == 7.5
    assert result.work_start_hour == 8.0
    assert result.days == 1


def test_road_same_day_work_but_too_long_day_needs_overnight():
    # arrive 11:00, 3h of work fits, but 10h driving + 3h work exceeds 12h
    result = estimate_road_days(10, 3, WorkingDay(departure_hour=6))

    assert result.phase is DayPhase.CAN_START_SAME_DAY
    assert result.days == 2


def test_road_default_departure_spills_into_second_day():
    # arrive 10:00, start 10:30, 5.5h available, 2.5h left over
    result = estimate_road_days(4, 8, DAY)

    assert result.phase is DayPhase.MULTI_DAY
    assert result.days == 2


def test_road_arriving_after_closing_starts_next_day():
    result = estimate_road_days(18, 10, DAY)

    assert result.phase is DayPhase.NOT_ARRIVED_YET
    assert result.work_start_hour is None
    assert result.days == 1 + 2


def test_zero_work_is_same_day():
    assert estimate_road_days(10, 0, DAY).days == 1
    late = estimate_road_days(20, 0, DAY)
    assert late.phase is DayPhase.CAN_START_SAME_DAY
    assert late.days == 2


@pytest.mark.parametrize(
    "value, expected",
    [
        ("14:30", 14.5),
        ("07:05", 7 + 5 / 60),
        ("2025-03-10T09:45:00", 9.75),
        ("2025-03-10T09:45:00Z", 9.75),
        ("garbage", None),
        (None, None),
    ],
)
def test_parse_flight_clock(value, expected):
    assert parse_flight_clock(value) == (pytest.approx(expected) if expected is not None else None)


def test_outbound_arrival_defaults():
    assert outbound_arrival_hour(None) == 12.0
    assert outbound_arrival_hour(FlightLeg(duration_minutes=90)) == 11.5
    assert outbound_arrival_hour(FlightLeg(departure_time="06:00", duration_minutes=120)) == 8.0
    assert outbound_arrival_hour(FlightLeg(arrival_time="09:15")) == 9.25


def test_flight_morning_arrival_back_same_day():
    outbound = FlightLeg(arrival_time="07:00")
    inbound = FlightLeg(departure_time="20:00")

    result = estimate_flight_days(outbound, inbound, 4, DAY, AirportTimes())

    # 07:00 + 45 + 60 minutes = 08:45, start 09:15, done 13:15, must leave by 18:15
    assert result.arrival_hour == pytest.approx(8.75)
    assert result.days == 1


def test_flight_return_too_early_needs_second_day():
    outbound = FlightLeg(arrival_time="07:00")
    inbound = FlightLeg(departure_time="13:00")

    assert estimate_flight_days(outbound, inbound, 4, DAY, AirportTimes()).days == 2


def test_flight_default_times_with_long_job():
    # arrive 12:00 + 1.75h → 13:45, start 14:15, 1.75h on day 1, 14.25h left
    result = estimate_flight_days(None, None, 16, DAY, AirportTimes())

    assert result.phase is DayPhase.MULTI_DAY
    assert result.days == 3
