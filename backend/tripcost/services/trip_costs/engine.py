"""Trip cost engine — orchestrates one multi-stop cost calculation end to end."""

import asyncio
import logging

from tripcost.schemas.trip_cost import BillingSettings, TripCostRequest, parse_request
from tripcost.services.providers import (
    DistanceProvider,
    FlightSearchProvider,
    Geocoder,
    RatesResolver,
    TollProvider,
)
from tripcost.services.trip_costs.allocation import allocate_costs, work_cost
from tripcost.services.trip_costs.config import TripCostConfiguration
from tripcost.services.trip_costs.errors import RateNotFound
from tripcost.services.trip_costs.flight_option import FlightOptionEvaluator
from tripcost.services.trip_costs.models import CostBreakdown, Location, Rate, Stop
from tripcost.services.trip_costs.money import round_money
from tripcost.services.trip_costs.recommendation import apply_fees, recommend
from tripcost.services.trip_costs.road_option import (
    NOT_REACHABLE_REASON,
    RoadEvaluation,
    evaluate_road,
    route_hours,
)
from tripcost.services.trip_costs.route_optimizer import RouteOptimizer, build_legs

logger = logging.getLogger(__name__)


def default_rate(country: str, city: str | None = None) -> Rate:
    """Used when no statutory rate matches the first stop."""
    return Rate(
        country_code=country,
        country_name=country,
        city_name=city,
        daily_allowance_8h=50.0,
        daily_allowance_24h=100.0,
        hotel_rate_max=150.0,
        mileage_rate=0.30,
        travel_hour_rate=98.0,
        work_hour_rate=98.0,
        source="default",
    )


class TripCostEngine:
    """Computes road and flight costs for a technician visiting 1–8 customers."""

    def __init__(
        self,
        distance_provider: DistanceProvider,
        rates_resolver: RatesResolver,
        flight_provider: FlightSearchProvider | None = None,
        toll_provider: TollProvider | None = None,
        geocoder: Geocoder | None = None,
        config: TripCostConfiguration | None = None,
    ):
        self.distance_provider = distance_provider
        self.rates_resolver = rates_resolver
        self.flight_provider = flight_provider
        self.toll_provider = toll_provider
        self.geocoder = geocoder
        self.config = config or TripCostConfiguration.from_settings()

    async def _geocode(self, location: Location) -> Location:
        if location.is_resolved or self.geocoder is None or location.address is None:
            return location
        address = location.address
        try:
            coordinates = await self.geocoder.geocode(address.street, address.city, address.country)
        except Exception as e:
            logger.warning(f"Geocoding failed for {address}: {e}")
            return location
        return location.with_coordinates(coordinates)

    async def _resolve_locations(self, base: Location, stops: list[Stop]) -> tuple[Location, list[Stop]]:
        resolved = await asyncio.gather(
            self._geocode(base),
            *(self._geocode(s.location) for s in stops),
        )
        return resolved[0], [
            Stop(s.customer_id, loc, s.country, s.city, s.work_hours, s.name)
            for s, loc in zip(stops, resolved[1:])
        ]

    async def _rate(self, stop: Stop, billing: BillingSettings | None) -> tuple[Rate, bool]:
        """Rate for the first stop, with billing overrides; flags the default fallback."""
        fallback = False
        try:
            rate = await self.rates_resolver.get_rate(stop.country, stop.city)
        except RateNotFound as e:
            logger.warning(f"{e} - using default rates")
            rate = default_rate(stop.country, stop.city)
            fallback = True
        except Exception as e:
            logger.warning(f"Rates lookup failed for {stop.country}: {e} - using default rates")
            rate = default_rate(stop.country, stop.city)
            fallback = True

        if billing is not None:
            rate = rate.with_billing_overrides(
                work_hour_rate=billing.working_hour_rate,
                travel_hour_rate=billing.travel_hour_rate,
                mileage_rate=billing.km_rate_own_car,
            )
        return rate, fallback

    async def calculate_multi_stop_trip_costs(self, request: TripCostRequest | dict) -> CostBreakdown:
        req = parse_request(request)
        config = self.config.with_overrides(
            req.billing_settings, req.technician_settings, req.travel_times
        )

        base, stops = await self._resolve_locations(
            req.base_location.to_location(), [s.to_stop() for s in req.stops]
        )
        ordered = await RouteOptimizer(self.distance_provider).optimize(base, stops)
        legs, reachable = await build_legs(self.distance_provider, base, ordered)

        rate, rate_fallback = await self._rate(ordered[0], req.billing_settings)
        total_work_hours = sum(s.work_hours for s in ordered)
        work_cost_total = round_money(sum(work_cost(s, rate) for s in ordered))
        one_way_hours = route_hours(legs) / 2 if reachable else 0.0

        selected_flight = req.to_selected_flight()
        segment_flights = req.to_segment_flights()
        selected_rental = req.to_rental_car()

        flight_evaluator = FlightOptionEvaluator(config, self.distance_provider, self.flight_provider)
        road_result, flight_result = await asyncio.gather(
            evaluate_road(
                legs, reachable, base, ordered, rate,
                total_work_hours, work_cost_total, config, self.toll_provider,
            ),
            flight_evaluator.evaluate(
                base, ordered, rate, total_work_hours, work_cost_total, req.trip_date,
                driving_possible=reachable,
                one_way_driving_hours=one_way_hours,
                selected_flight=selected_flight,
                segment_flights=segment_flights,
                selected_rental=selected_rental,
                excess_baggage=req.excess_baggage_cost,
            ),
            return_exceptions=True,
        )

        if isinstance(road_result, Exception):
            logger.warning(f"Road evaluation failed: {road_result}")
            road_result = RoadEvaluation(
                None, reachable, route_hours(legs), one_way_hours,
                reason=str(road_result) if reachable else NOT_REACHABLE_REASON,
            )
        if isinstance(flight_result, Exception):
            logger.warning(f"Flight evaluation failed: {flight_result}")
            flight_result = None

        road_option = apply_fees(road_result.option, rate)
        flight_option = apply_fees(flight_result, rate)
        recommended = recommend(road_option, flight_option)

        selected = road_option if recommended == "road" else flight_option
        reference = selected or road_option or flight_option

        per_customer = None
        if len(ordered) > 1 and req.cost_percentages is not None and selected is not None:
            per_customer = allocate_costs(ordered, selected, rate, req.cost_percentages)

        if road_option is not None:
            total_days = road_option.days_required
        elif flight_option is not None:
            total_days = flight_option.days_required
        else:
            total_days = 1

        return CostBreakdown(
            legs=legs,
            total_work_hours=total_work_hours,
            total_days_required=total_days,
            work_cost_total=work_cost_total,
            allowance_breakdown=reference.allowances if reference else None,
            hotel_total=reference.hotel_cost if reference else 0.0,
            trip_fees={
                "agent_fee": rate.agent_fee,
                "company_fee": rate.company_fee,
                "additional_fee_percent": rate.additional_fee_percent,
                "note": "Fees applied once per trip (not per day)",
            },
            road_option=road_option,
            flight_option=flight_option,
            recommended=recommended,
            per_customer_costs=per_customer,
            road_not_available=road_result.not_available(),
            metadata={
                "optimized_sequence": [s.customer_id for s in ordered],
                "rates_used": rate.to_dict(),
                "rate_fallback": rate_fallback,
                "trip_date": req.trip_date.isoformat(),
            },
        )


async def calculate_multi_stop_trip_costs(
    request: TripCostRequest | dict,
    distance_provider: DistanceProvider,
    rates_resolver: RatesResolver,
    **collaborators,
) -> CostBreakdown:
    """Convenience wrapper building a one-off engine."""
    engine = TripCostEngine(distance_provider, rates_resolver, **collaborators)
    return await engine.calculate_multi_stop_trip_costs(request)
