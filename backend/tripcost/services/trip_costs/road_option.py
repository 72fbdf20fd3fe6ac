"""Road option evaluator — cost of driving the whole route in the technician's car."""

import logging
from dataclasses import dataclass

from tripcost.services.providers import TollProvider, TollRoute
from tripcost.services.trip_costs.allowances import calculate_allowances
from tripcost.services.trip_costs.config import TripCostConfiguration
from tripcost.services.trip_costs.day_count import DayCount, estimate_road_days
from tripcost.services.trip_costs.models import Leg, Location, Rate, RoadOption, Stop
from tripcost.services.trip_costs.money import format_hours, plural, round_money

logger = logging.getLogger(__name__)

NOT_REACHABLE_REASON = "not reachable by road"


@dataclass(frozen=True)
class RoadEvaluation:
    option: RoadOption | None
    reachable: bool
    travel_hours: float
    one_way_hours: float
    day_count: DayCount | None = None
    reason: str | None = None

    def not_available(self) -> dict | None:
        if self.option is not None:
            return None
        return {
            "reason": self.reason,
            "driving_hours": round_money(self.travel_hours) if self.reachable else None,
            "not_reachable_by_road": not self.reachable,
        }


def route_hours(legs: list[Leg]) -> float:
    return sum(leg.duration_minutes for leg in legs) / 60


def route_km(legs: list[Leg]) -> float:
    return sum(leg.distance_km for leg in legs)


async def _tolls(toll_provider: TollProvider | None, base: Location, stops: list[Stop]) -> TollRoute:
    if toll_provider is None:
        return TollRoute(source="unavailable")
    try:
        return await toll_provider.route_with_tolls(base, base, [s.location for s in stops])
    except Exception as e:
        logger.warning(f"Toll lookup failed, assuming no tolls: {e}")
        return TollRoute(source="unavailable")


def _toll_explanation(toll: TollRoute) -> str:
    if toll.toll_cost <= 0:
        return "No toll roads on your route - no extra cost."
    found = (
        f" ({plural(len(toll.toll_details), 'toll')} identified)"
        if toll.toll_details
        else " (estimated total)"
    )
    return f"You need to pay €{toll.toll_cost:.2f} for toll roads on your route{found}."


def hotel_explanation(nights: int, rate: float) -> str:
    if nights <= 0:
        return "No hotel needed - you can return home the same day."
    return (
        f"You need {plural(nights, 'hotel night')} because the trip takes more than one day. "
        f"Each night costs €{rate:.2f}."
    )


async def evaluate_road(
    legs: list[Leg],
    reachable: bool,
    base: Location,
    stops: list[Stop],
    rate: Rate,
    work_hours: float,
    work_cost: float,
    config: TripCostConfiguration,
    toll_provider: TollProvider | None = None,
) -> RoadEvaluation:
    if not reachable or not legs:
        logger.info("Road option unavailable: first leg could not be routed")
        return RoadEvaluation(None, False, 0.0, 0.0, reason=NOT_REACHABLE_REASON)

    hours = route_hours(legs)
    km = route_km(legs)
    one_way = hours / 2
    day_count = estimate_road_days(hours, work_hours, config.working_day)

    max_hours = config.thresholds.max_driving_hours
    if one_way > max_hours:
        logger.info(f"Driving time {one_way:.1f}h one way exceeds {max_hours:g}h limit - hiding road option")
        return RoadEvaluation(
            None, True, hours, one_way, day_count,
            reason=f"Driving time exceeds {max_hours:g} hours",
        )

    days = day_count.days
    allowances = calculate_allowances(days, hours + work_hours, rate, config.allowance_reduction)
    hotel_nights = max(0, days - 1)
    hotel_cost = round_money(hotel_nights * rate.hotel_rate_max)

    travel_time_cost = round_money(hours * rate.travel_hour_rate)
    mileage_cost = round_money(km * rate.mileage_rate)
    toll = await _tolls(toll_provider, base, stops)
    toll_cost = round_money(toll.toll_cost)

    liters = config.fuel.liters(km)
    fuel_cost = round_money(liters * config.fuel.fuel_rate)

    travel_cost = round_money(
        travel_time_cost + mileage_cost + allowances.total + hotel_cost + toll_cost
    )
    total_cost = round_money(travel_cost + work_cost)

    breakdown = {
        "travel_time": {
            "hours": round_money(hours),
            "rate": rate.travel_hour_rate,
            "cost": travel_time_cost,
            "explanation": (
                f"You spend {format_hours(hours)} traveling. "
                f"Each hour is paid at €{rate.travel_hour_rate:.2f} per hour."
            ),
        },
        "mileage": {
            "km": round_money(km),
            "rate": rate.mileage_rate,
            "cost": mileage_cost,
            "explanation": (
                f"You drive {km:.1f} kilometers. You get reimbursed €{rate.mileage_rate:.2f} for each "
                f"kilometer you drive (fuel cost is included in this reimbursement)."
            ),
        },
        "tolls": {
            "cost": toll_cost,
            "details": toll.toll_details,
            "source": toll.source,
            "explanation": _toll_explanation(toll),
        },
        "daily_allowances": allowances.to_dict(),
        "hotel": {
            "nights": hotel_nights,
            "rate": rate.hotel_rate_max,
            "cost": hotel_cost,
            "explanation": hotel_explanation(hotel_nights, rate.hotel_rate_max),
        },
    }

    option = RoadOption(
        total_cost=total_cost,
        travel_cost=travel_cost,
        travel_hours=hours,
        travel_time_cost=travel_time_cost,
        days_required=days,
        hotel_nights=hotel_nights,
        hotel_cost=hotel_cost,
        allowances=allowances,
        breakdown=breakdown,
        distance_km=km,
        mileage_cost=mileage_cost,
        toll_cost=toll_cost,
        fuel_cost=fuel_cost,
        fuel_consumption_liters=round_money(liters),
        fuel_rate=config.fuel.fuel_rate,
        fuel_consumption_rate=config.fuel.consumption_rate,
    )
    logger.info(f"Road option: {km:.0f} km, {days} day(s), total €{total_cost:.2f}")
    return RoadEvaluation(option, True, hours, one_way, day_count)
