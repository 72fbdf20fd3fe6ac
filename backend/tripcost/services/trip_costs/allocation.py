"""Cost allocator — splits shared trip costs between customers.

Work time is metered per customer and never split. Every other line of the
selected option (travel time, transport, allowances, hotel, trip fees) is
shared by cost percentage. The cent left over by rounding goes to the
customer with the largest percentage.
"""

import logging
from dataclasses import replace

from tripcost.services.trip_costs.errors import InvalidInput
from tripcost.services.trip_costs.models import (
    PerCustomerAllocation,
    Rate,
    Stop,
    TravelOption,
)
from tripcost.services.trip_costs.money import percent_of, round_money

logger = logging.getLogger(__name__)


def work_cost(stop: Stop, rate: Rate) -> float:
    return round_money(stop.work_hours * rate.work_hour_rate)


def resolve_percentages(stops: list[Stop], percentages: dict[str, float]) -> dict[str, float]:
    """Customers missing from the mapping get an equal share."""
    default = 100 / len(stops)
    resolved = {}
    for stop in stops:
        pct = percentages.get(stop.customer_id, default)
        if pct is None or pct < 0:
            raise InvalidInput(f"Invalid cost percentage for customer {stop.customer_id}: {pct}")
        resolved[stop.customer_id] = float(pct)
    return resolved


def allocate_costs(
    stops: list[Stop],
    option: TravelOption,
    rate: Rate,
    percentages: dict[str, float],
) -> list[PerCustomerAllocation]:
    shares = resolve_percentages(stops, percentages)

    lines = option.shared_lines()
    lines["trip_fees"] = option.trip_fees.total_fees if option.trip_fees else 0.0
    shared_total = round_money(sum(lines.values()))

    work_costs = {s.customer_id: work_cost(s, rate) for s in stops}
    target = round_money(
        sum(work_costs.values()) + shared_total * sum(shares.values()) / 100
    )

    allocations: list[PerCustomerAllocation] = []
    for stop in stops:
        pct = shares[stop.customer_id]
        shared = percent_of(shared_total, pct)
        allocations.append(PerCustomerAllocation(
            customer_id=stop.customer_id,
            customer_name=stop.name or stop.city or stop.customer_id,
            cost_percentage=pct,
            work_hours=stop.work_hours,
            allocated_cost=round_money(work_costs[stop.customer_id] + shared),
            breakdown={
                "work_cost": work_costs[stop.customer_id],
                "work_rate": rate.work_hour_rate,
                "shared_cost": shared,
                "shared_lines": {name: percent_of(amount, pct) for name, amount in lines.items()},
            },
        ))

    residual = round_money(target - sum(a.allocated_cost for a in allocations))
    if residual and allocations:
        largest = max(range(len(allocations)), key=lambda i: allocations[i].cost_percentage)
        a = allocations[largest]
        allocations[largest] = replace(
            a,
            allocated_cost=round_money(a.allocated_cost + residual),
            breakdown={**a.breakdown, "rounding_adjustment": residual},
        )

    logger.info(
        f"Allocated €{target:.2f} across {len(allocations)} customers "
        f"(shared €{shared_total:.2f})"
    )
    return allocations
