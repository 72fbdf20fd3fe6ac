"""Trip cost configuration — single source for every engine default."""

from dataclasses import dataclass, field, replace
from typing import Any

from tripcost.config import Settings, settings


def parse_clock(value: str | float | int | None, default: float) -> float:
    """Convert "HH:MM" (or a plain number of hours) to decimal hours."""
    if value is None or value == "":
        return default
    if isinstance(value, (int, float)):
        return float(value)
    try:
        if ":" in value:
            hours, minutes = value.split(":", 1)
            return int(hours) + int(minutes[:2]) / 60
        return float(value)
    except ValueError:
        return default


@dataclass(frozen=True)
class WorkingDay:
    """Technician departure and the customer's working-hours window."""
    departure_hour: float = 8.0          # 08:00
    window_start: float = 8.0
    window_end: float = 16.0
    setup_hours: float = 0.5             # before work can start after arrival
    max_same_day_hours: float = 12.0     # travel + work for a one-day trip
    max_daily_hours: float = 8.0         # used to estimate the flight return date

    @property
    def window_length(self) -> float:
        return self.window_end - self.window_start


@dataclass(frozen=True)
class FuelModel:
    """Fuel price and consumption (EUR, L/100km)."""
    fuel_rate: float = 2.00
    consumption_rate: float = 7.0
    rental_consumption_rate: float = 7.0

    def liters(self, distance_km: float, rental: bool = False) -> float:
        rate = self.rental_consumption_rate if rental else self.consumption_rate
        return (distance_km / 100) * rate


@dataclass(frozen=True)
class AirportTimes:
    """Door-to-door buffers around each flight, in minutes."""
    time_to_airport: int = 45
    security_boarding: int = 120
    deboarding_luggage: int = 45
    airport_to_destination: int = 60
    default_flight: int = 105      # when an itinerary carries no duration
    estimated_flight: int = 120    # before any itinerary is known


@dataclass(frozen=True)
class GroundTransport:
    """Ground transport at home (airport) and destination (rental car)."""
    mode: str | None = None         # "Taxi" | "Car" | None
    default_cost: float = 90.0
    taxi_cost: float = 45.0         # one way
    parking_per_day: float = 15.0
    rental_price_per_day: float = 75.0
    km_per_ground_minute: float = 0.8


@dataclass(frozen=True)
class Thresholds:
    """Road feasibility and flight-search cut-offs, in hours one way."""
    max_driving_hours: float = 15.0
    flight_search_min_driving_hours: float = 4.0


@dataclass(frozen=True)
class TripCostConfiguration:
    """Top-level config aggregating all sub-configs."""
    working_day: WorkingDay = field(default_factory=WorkingDay)
    fuel: FuelModel = field(default_factory=FuelModel)
    airport_times: AirportTimes = field(default_factory=AirportTimes)
    ground: GroundTransport = field(default_factory=GroundTransport)
    thresholds: Thresholds = field(default_factory=Thresholds)
    allowance_reduction: float = 0.0

    @classmethod
    def from_settings(cls, source: Settings | None = None) -> "TripCostConfiguration":
        s = source or settings
        return cls(
            working_day=WorkingDay(
                departure_hour=parse_clock(s.default_departure_time, 8.0),
                window_start=s.customer_work_hours_start,
                window_end=s.customer_work_hours_end,
                setup_hours=s.min_setup_hours,
                max_same_day_hours=s.max_same_day_hours,
                max_daily_hours=s.max_daily_hours,
            ),
            fuel=FuelModel(
                fuel_rate=s.fuel_rate_per_liter,
                consumption_rate=s.fuel_consumption_l_per_100km,
                rental_consumption_rate=s.rental_fuel_consumption_l_per_100km,
            ),
            airport_times=AirportTimes(
                time_to_airport=s.time_to_airport_minutes,
                security_boarding=s.security_boarding_minutes,
                deboarding_luggage=s.deboarding_luggage_minutes,
                airport_to_destination=s.airport_to_destination_minutes,
                default_flight=s.default_flight_minutes,
                estimated_flight=s.estimated_flight_minutes,
            ),
            ground=GroundTransport(
                default_cost=s.default_ground_transport,
                taxi_cost=s.taxi_cost_one_way,
                parking_per_day=s.parking_cost_per_day,
                rental_price_per_day=s.rental_car_price_per_day,
            ),
            thresholds=Thresholds(
                max_driving_hours=s.max_driving_hours_one_way,
                flight_search_min_driving_hours=s.flight_search_threshold_hours,
            ),
        )

    def with_overrides(
        self,
        billing: Any = None,
        technician: Any = None,
        travel_times: Any = None,
    ) -> "TripCostConfiguration":
        """Apply per-request billing / technician / travel-time settings.

        Falsy override values keep the configured default.
        """
        working_day = self.working_day
        fuel = self.fuel
        airport_times = self.airport_times
        ground = self.ground

        if billing is not None:
            working_day = replace(
                working_day,
                departure_hour=parse_clock(billing.default_start_time, working_day.departure_hour),
                window_start=billing.customer_work_hours_start or working_day.window_start,
                window_end=billing.customer_work_hours_end or working_day.window_end,
                setup_hours=billing.min_work_time or working_day.setup_hours,
                max_daily_hours=billing.max_daily_hours or working_day.max_daily_hours,
            )
            fuel = replace(fuel, fuel_rate=billing.fuel_rate or fuel.fuel_rate)

        if technician is not None:
            fuel = replace(
                fuel,
                consumption_rate=technician.fuel_consumption_rate or fuel.consumption_rate,
            )
            airport_times = replace(
                airport_times,
                time_to_airport=technician.time_to_airport or airport_times.time_to_airport,
            )
            ground = replace(
                ground,
                mode=technician.transport_to_airport or ground.mode,
                taxi_cost=technician.taxi_cost or ground.taxi_cost,
                parking_per_day=technician.parking_cost_per_day or ground.parking_per_day,
            )

        if travel_times is not None:
            airport_times = replace(
                airport_times,
                security_boarding=travel_times.security_boarding or airport_times.security_boarding,
                deboarding_luggage=travel_times.deboarding_luggage or airport_times.deboarding_luggage,
                airport_to_destination=(
                    travel_times.airport_to_destination or airport_times.airport_to_destination
                ),
            )

        return replace(
            self,
            working_day=working_day,
            fuel=fuel,
            airport_times=airport_times,
            ground=ground,
        )
