"""Recommendation selector — trip fees and the road-vs-flight decision."""

import logging

from tripcost.services.trip_costs.models import (
    FlightOption,
    Rate,
    RoadOption,
    TravelOption,
    TripFees,
)
from tripcost.services.trip_costs.money import percent_of, round_money

logger = logging.getLogger(__name__)

ROAD = "road"
FLIGHT = "flight"
NONE = "none"


def calculate_trip_fees(total_cost: float, rate: Rate) -> TripFees:
    """Agent + company fee plus a percentage of the option total, once per trip."""
    agent_fee = rate.agent_fee or 0.0
    company_fee = rate.company_fee or 0.0
    percent = rate.additional_fee_percent or 0.0
    additional = percent_of(total_cost, percent) if percent else 0.0
    return TripFees(
        agent_fee=agent_fee,
        company_fee=company_fee,
        additional_fee_percent=percent,
        additional_fee_amount=additional,
        total_fees=round_money(agent_fee + company_fee + additional),
    )


def apply_fees(option: TravelOption | None, rate: Rate) -> TravelOption | None:
    if option is None:
        return None
    return option.with_fees(calculate_trip_fees(option.total_cost, rate))


def recommend(road: RoadOption | None, flight: FlightOption | None) -> str:
    """Cheaper fee-inclusive total wins; a tie goes to the road."""
    if road is None:
        return FLIGHT if flight is not None else NONE
    if flight is None:
        return ROAD

    choice = FLIGHT if flight.grand_total < road.grand_total else ROAD
    logger.info(f"Recommended {choice}: road €{road.grand_total:.2f} vs flight €{flight.grand_total:.2f}")
    return choice
