"""Day count estimator — calendar days a trip spans, per travel mode.

Phases:
    NOT_ARRIVED_YET     arrival + setup is past the customer's closing time
    CAN_START_SAME_DAY  all work fits into the first day
    MULTI_DAY           work spills over into further days

Only CAN_START_SAME_DAY depends on the mode: road checks the length of the
working day, flight checks whether the return flight can still be reached.
"""

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum

from tripcost.services.trip_costs.config import AirportTimes, WorkingDay
from tripcost.services.trip_costs.models import FlightLeg

logger = logging.getLogger(__name__)

DEFAULT_FLIGHT_DEPARTURE_HOUR = 10.0
DEFAULT_FLIGHT_ARRIVAL_HOUR = 12.0


class DayPhase(str, Enum):
    NOT_ARRIVED_YET = "not_arrived_yet"
    CAN_START_SAME_DAY = "can_start_same_day"
    MULTI_DAY = "multi_day"


@dataclass(frozen=True)
class DayCount:
    phase: DayPhase
    days: int
    arrival_hour: float
    work_start_hour: float | None = None

    def to_dict(self) -> dict:
        return {
            "phase": self.phase.value,
            "days": self.days,
            "arrival_hour": round(self.arrival_hour, 2),
            "work_start_hour": (
                round(self.work_start_hour, 2) if self.work_start_hour is not None else None
            ),
        }


def parse_flight_clock(value: str | None) -> float | None:
    """Clock hour from "HH:MM" or an ISO datetime; None when unparsable."""
    if not value:
        return None
    try:
        if "T" in value:
            parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
            return parsed.hour + parsed.minute / 60
        if ":" in value:
            hours, minutes = value.split(":", 1)
            return int(hours) + int(minutes[:2]) / 60
    except ValueError:
        logger.debug(f"Unparsable flight time: {value!r}")
    return None


def _classify(arrival_hour: float, work_hours: float, day: WorkingDay) -> tuple[DayPhase, float | None, float]:
    """Returns (phase, work start hour, remaining hours after day 1)."""
    if work_hours > 0 and arrival_hour + day.setup_hours > day.window_end:
        return DayPhase.NOT_ARRIVED_YET, None, work_hours

    work_start = max(arrival_hour + day.setup_hours, day.window_start)
    available = max(0.0, day.window_end - work_start)
    remaining = max(0.0, work_hours - available)
    if remaining > 0:
        return DayPhase.MULTI_DAY, work_start, remaining
    return DayPhase.CAN_START_SAME_DAY, work_start, 0.0


def _days_for_remaining(remaining: float, day: WorkingDay) -> int:
    return 1 + math.ceil(remaining / day.window_length)


def estimate_road_days(
    round_trip_travel_hours: float,
    work_hours: float,
    day: WorkingDay,
) -> DayCount:
    """Arrival is the departure time plus half the round trip."""
    arrival = day.departure_hour + round_trip_travel_hours / 2
    phase, work_start, remaining = _classify(arrival, work_hours, day)

    if phase is DayPhase.CAN_START_SAME_DAY:
        days = 1 if round_trip_travel_hours + work_hours <= day.max_same_day_hours else 2
    else:
        days = _days_for_remaining(remaining, day)

    return DayCount(phase, days, arrival, work_start)


def outbound_arrival_hour(outbound: FlightLeg | None) -> float:
    if outbound is None:
        return DEFAULT_FLIGHT_ARRIVAL_HOUR
    arrival = parse_flight_clock(outbound.arrival_time)
    if arrival is not None:
        return arrival
    if outbound.duration_minutes:
        departure = parse_flight_clock(outbound.departure_time)
        if departure is None:
            departure = DEFAULT_FLIGHT_DEPARTURE_HOUR
        return departure + outbound.duration_minutes / 60
    return DEFAULT_FLIGHT_ARRIVAL_HOUR


def estimate_flight_days(
    outbound: FlightLeg | None,
    return_leg: FlightLeg | None,
    work_hours: float,
    day: WorkingDay,
    airport_times: AirportTimes,
) -> DayCount:
    """Arrival at the customer is landing plus deboarding and the ride out."""
    buffer_hours = (airport_times.deboarding_luggage + airport_times.airport_to_destination) / 60
    arrival = outbound_arrival_hour(outbound) + buffer_hours
    phase, work_start, remaining = _classify(arrival, work_hours, day)

    if phase is DayPhase.CAN_START_SAME_DAY:
        return_departure = parse_flight_clock(return_leg.departure_time) if return_leg else None
        if return_departure is None:
            return_departure = day.window_end + 1
        work_end = work_start + work_hours
        days = 1 if work_end <= return_departure - buffer_hours else 2
    else:
        days = _days_for_remaining(remaining, day)

    return DayCount(phase, days, arrival, work_start)
