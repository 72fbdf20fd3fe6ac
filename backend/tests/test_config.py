import pytest

from tripcost.config import Settings
from tripcost.schemas.trip_cost import BillingSettings, TechnicianSettings, TravelTimes
from tripcost.services.trip_costs.config import TripCostConfiguration, parse_clock


@pytest.mark.parametrize(
    "value, expected",
    [("05:30", 5.5), ("8:15", 8.25), ("7", 7.0), (6.5, 6.5), ("", 8.0), (None, 8.0), ("soon", 8.0)],
)
def test_parse_clock(value, expected):
    assert parse_clock(value, 8.0) == expected


def test_from_settings():
    config = TripCostConfiguration.from_settings(
        Settings(default_departure_time="06:30", max_driving_hours_one_way=12, taxi_cost_one_way=50)
    )

    assert config.working_day.departure_hour == 6.5
    assert config.thresholds.max_driving_hours == 12
    assert config.ground.taxi_cost == 50
    assert config.airport_times.security_boarding == 120


def test_settings_read_prefixed_environment(monkeypatch):
    monkeypatch.setenv("TRIPCOST_FUEL_RATE_PER_LITER", "1.85")

    assert Settings().fuel_rate_per_liter == 1.85


def test_billing_overrides_accept_camel_case():
    billing = BillingSettings.model_validate(
        {"defaultStartTime": "05:30", "customerWorkHoursEnd": 17, "fuelRate": 1.8}
    )

    config = TripCostConfiguration().with_overrides(billing=billing)

    assert config.working_day.departure_hour == 5.5
    assert config.working_day.window_end == 17
    assert config.working_day.window_start == 8
    assert config.fuel.fuel_rate == 1.8


def test_technician_and_travel_time_overrides():
    config = TripCostConfiguration().with_overrides(
        technician=TechnicianSettings.model_validate(
            {"transportToAirport": "Car", "parkingCostPerDay": 20, "timeToAirport": 30}
        ),
        travel_times=TravelTimes.model_validate({"securityBoarding": 90}),
    )

    assert config.ground.mode == "Car"
    assert config.ground.parking_per_day == 20
    assert config.airport_times.time_to_airport == 30
    assert config.airport_times.security_boarding == 90
    assert config.airport_times.deboarding_luggage == 45


def test_zero_overrides_keep_defaults():
    config = TripCostConfiguration().with_overrides(
        billing=BillingSettings(fuel_rate=0, max_daily_hours=0),
        technician=TechnicianSettings(taxi_cost=0),
    )

    assert config.fuel.fuel_rate == 2.0
    assert config.working_day.max_daily_hours == 8
    assert config.ground.taxi_cost == 45


def test_overrides_do_not_mutate_original():
    original = TripCostConfiguration()

    original.with_overrides(billing=BillingSettings(default_start_time="05:00"))

    assert original.working_day.departure_hour == 8.0
