"""Allowance calculator — statutory per-diem breakdown for a trip."""

import logging

from tripcost.services.trip_costs.models import AllowanceBreakdown, AllowanceDay, Rate
from tripcost.services.trip_costs.money import round_money

logger = logging.getLogger(__name__)

PARTIAL_DAY_MIN_HOURS = 8


def calculate_allowances(
    days_required: int,
    total_trip_hours: float,
    rate: Rate,
    reduction: float = 0.0,
) -> AllowanceBreakdown:
    """First and last day earn the 8h rate, days in between the 24h rate.

    A single-day trip earns the 8h rate only when it lasts more than 8 hours.
    """
    rate_8h = rate.daily_allowance_8h
    rate_24h = rate.daily_allowance_24h
    final_8h = max(0.0, rate_8h - reduction)
    final_24h = max(0.0, rate_24h - reduction)

    days: list[AllowanceDay] = []
    partial_count = 0
    full_count = 0

    if days_required <= 1:
        if total_trip_hours > PARTIAL_DAY_MIN_HOURS:
            partial_count = 1
            days.append(AllowanceDay("Day 1 (Single Day)", rate_8h, reduction, final_8h, "8h"))
    else:
        partial_count = 2
        full_count = days_required - 2
        days.append(AllowanceDay("Day 1 (Departure)", rate_8h, reduction, final_8h, "8h"))
        if full_count > 0:
            days.append(AllowanceDay(
                f"Days 2-{days_required - 1} ({full_count} Full Days)",
                rate_24h,
                reduction,
                round_money(final_24h * full_count),
                "24h",
                count=full_count,
            ))
        days.append(AllowanceDay(f"Day {days_required} (Return)", rate_8h, reduction, final_8h, "8h"))

    return AllowanceBreakdown(
        full_day_count=full_count,
        full_day_rate=rate_24h,
        partial_day_count=partial_count,
        partial_day_rate=rate_8h,
        total_24h=round_money(final_24h * full_count),
        total_8h=round_money(final_8h * partial_count),
        days=tuple(days),
    )
