"""Flight option evaluator — door-to-door cost of flying to the customers.

Itineraries come from, in order of preference:
    1. caller-chosen segment flights (multi-customer trips)
    2. a caller-selected flight
    3. a search: one round trip for a single customer, or an outbound and a
       return one-way search for several customers

The flight ticket price is resolved once, by resolve_flight_price, into an
immutable FlightPriceResolution that records where the amount came from.
"""

import asyncio
import logging
import math
from dataclasses import dataclass, field
from datetime import date, timedelta

from tripcost.services.providers import (
    Airport,
    DistanceProvider,
    FlightSearchProvider,
    FlightSearchResult,
)
from tripcost.services.trip_costs.allowances import calculate_allowances
from tripcost.services.trip_costs.config import GroundTransport, TripCostConfiguration
from tripcost.services.trip_costs.day_count import estimate_flight_days
from tripcost.services.trip_costs.models import (
    FlightItinerary,
    FlightLeg,
    FlightOption,
    FlightPriceResolution,
    Location,
    PricedLeg,
    Rate,
    RentalCar,
    SegmentFlight,
    Stop,
)
from tripcost.services.trip_costs.money import format_hours, plural, round_money
from tripcost.services.trip_costs.road_option import hotel_explanation

logger = logging.getLogger(__name__)

DEFAULT_SEGMENT_FLIGHT_MINUTES = 90


@dataclass
class ItinerarySelection:
    """Legs picked for costing plus whatever the searches returned."""
    outbound: PricedLeg | None = None
    inbound: PricedLeg | None = None
    same_ticket: bool = True
    segment_total: float = 0.0
    segment_details: list[dict] = field(default_factory=list)
    outbound_results: FlightSearchResult | None = None
    return_results: FlightSearchResult | None = None
    rental: RentalCar | None = None

    @property
    def complete(self) -> bool:
        return self.outbound is not None and self.inbound is not None


# ---------- Pure helpers ----------

def should_skip_flight_search(
    driving_possible: bool,
    one_way_driving_hours: float,
    has_selected_flight: bool,
    has_segment_flights: bool,
    config: TripCostConfiguration,
) -> bool:
    """Short drives don't get a flight search unless the caller picked a flight."""
    if not driving_possible:
        return False
    if has_selected_flight or has_segment_flights:
        return False
    return one_way_driving_hours < config.thresholds.flight_search_min_driving_hours


def estimated_return_date(
    trip_date: date,
    work_hours: float,
    ground_minutes: float,
    config: TripCostConfiguration,
) -> date:
    t = config.airport_times
    one_way = (
        t.time_to_airport + t.security_boarding + t.estimated_flight
        + t.deboarding_luggage + t.airport_to_destination
    )
    travel_hours = (one_way * 2 + ground_minutes) / 60
    days = max(1, math.ceil((work_hours + travel_hours) / config.working_day.max_daily_hours))
    return trip_date + timedelta(days=days - 1)


def median_rental(options: list[RentalCar]) -> RentalCar | None:
    priced = [o for o in options if o.price_per_day > 0]
    if not priced:
        return None
    prices = sorted(o.price_per_day for o in priced)
    median = prices[len(prices) // 2]
    return next(o for o in priced if o.price_per_day == median)


def ground_transport_cost(ground: GroundTransport, days: int) -> tuple[float, str]:
    if ground.mode == "Taxi":
        return round_money(ground.taxi_cost * 2), "Taxi (round-trip)"
    if ground.mode == "Car":
        return round_money(ground.parking_per_day * days), "Parking"
    return round_money(ground.default_cost), "Taxi (default)"


def resolve_flight_price(
    selection: ItinerarySelection,
    selected: FlightItinerary | None = None,
) -> FlightPriceResolution:
    """Walk the price sources in priority order; nothing is mutated."""
    out = selection.outbound
    ret = selection.inbound
    out_price = out.leg.own_price if out else 0.0
    ret_price = ret.leg.own_price if ret else 0.0

    def _resolved(amount: float, source: str) -> FlightPriceResolution:
        return FlightPriceResolution(round_money(amount), source, out_price, ret_price)

    if selection.segment_total > 0:
        return _resolved(selection.segment_total, "segment_total")

    if selected is not None:
        if selected.total_price > 0:
            return _resolved(selected.total_price, "explicit_total")
        if selected.price > 0:
            return _resolved(selected.price, "explicit_total")

    directions = [p for p in (out, ret) if p is not None]
    if selection.same_ticket:
        for priced in directions:
            if priced.parent_price > 0 and not priced.leg.own_price:
                return _resolved(priced.parent_price, "parent_round_trip")
        if out and out.leg.total_price > 0:
            return _resolved(out.leg.total_price, "leg_total")
        computed = sum(p.leg.price or p.leg.total_price / 2 for p in directions)
    else:
        # Separate one-way tickets: each direction resolves on its own
        if any(p.parent_price > 0 and not p.leg.own_price for p in directions):
            amount = sum(p.leg.own_price or p.parent_price for p in directions)
            return _resolved(amount, "parent_round_trip")
        computed = sum(p.leg.own_price for p in directions)

    if computed > 0:
        return _resolved(computed, "computed_sum")
    return _resolved(0.0, "none")


def _segment_selection(segments: list[SegmentFlight]) -> ItinerarySelection:
    details: list[dict] = []
    total = 0.0
    flown: list[FlightLeg] = []
    for segment in sorted(segments, key=lambda s: s.segment_index):
        if segment.is_flight:
            flight = segment.flight
            price = flight.parent_price or flight.outbound_leg.own_price
            duration = flight.outbound_leg.duration_minutes or DEFAULT_SEGMENT_FLIGHT_MINUTES
            routing = flight.outbound_leg.routing or "Unknown"
            total += price
            flown.append(FlightLeg(
                from_code=flight.outbound_leg.from_code,
                to_code=flight.outbound_leg.to_code,
                duration_minutes=duration,
                routing=routing,
                price=price,
                total_price=price,
            ))
            details.append({
                "segment": segment.segment_index,
                "mode": "fly",
                "price": price,
                "duration_minutes": duration,
                "routing": routing,
            })
        elif segment.mode == "drive":
            details.append({"segment": segment.segment_index, "mode": "drive", "price": 0})

    if not flown:
        return ItinerarySelection(segment_details=details)
    return ItinerarySelection(
        outbound=PricedLeg(flown[0], flown[0].price),
        inbound=PricedLeg(flown[-1], flown[-1].price),
        same_ticket=False,
        segment_total=round_money(total),
        segment_details=details,
    )


def _round_trip_selection(itinerary: FlightItinerary) -> ItinerarySelection:
    return ItinerarySelection(
        outbound=PricedLeg(itinerary.outbound_leg, itinerary.parent_price),
        inbound=PricedLeg(itinerary.inbound_leg, itinerary.parent_price),
        same_ticket=True,
    )


# ---------- Evaluator ----------

class FlightOptionEvaluator:
    """Builds the flight option; provider failures degrade it to None."""

    def __init__(
        self,
        config: TripCostConfiguration,
        distance_provider: DistanceProvider,
        flight_provider: FlightSearchProvider | None = None,
    ):
        self.config = config
        self.distance_provider = distance_provider
        self.flight_provider = flight_provider

    async def _search(
        self,
        origin: Location,
        destination: Location,
        depart: date,
        return_date: date | None,
    ) -> FlightSearchResult | None:
        if self.flight_provider is None:
            return None
        try:
            return await self.flight_provider.search_flights(origin, destination, depart, return_date)
        except Exception as e:
            logger.warning(f"Flight search {depart} failed: {e}")
            return None

    async def _ground_between_stops(self, stops: list[Stop]) -> tuple[float, float]:
        """Minutes and km driven between consecutive customers."""
        minutes = 0.0
        km = 0.0
        for origin, destination in zip(stops, stops[1:]):
            try:
                result = await self.distance_provider.distance(origin.location, destination.location)
            except Exception as e:
                logger.warning(f"Ground leg {origin.label} -> {destination.label} unavailable: {e}")
                continue
            minutes += result.duration_minutes
            km += result.distance_km
        return minutes, km

    async def _airport_km(self, airport: Airport | None, stop: Stop) -> float:
        fallback = self.config.airport_times.airport_to_destination * self.config.ground.km_per_ground_minute
        if airport is None or airport.coordinates is None or stop.location.coordinates is None:
            return fallback
        try:
            result = await self.distance_provider.distance(
                Location(coordinates=airport.coordinates), stop.location
            )
            return result.distance_km
        except Exception as e:
            logger.warning(f"Airport {airport.code} -> {stop.label} distance unavailable: {e}")
            return fallback

    async def _rental_distance(
        self,
        stops: list[Stop],
        ground_km: float,
        selection: ItinerarySelection,
    ) -> float:
        arrival = selection.outbound_results.destination_airport if selection.outbound_results else None
        if len(stops) == 1:
            return await self._airport_km(arrival, stops[0]) * 2

        departure = selection.return_results.origin_airport if selection.return_results else None
        first_km, last_km = await asyncio.gather(
            self._airport_km(arrival, stops[0]),
            self._airport_km(departure, stops[-1]),
        )
        return first_km + ground_km + last_km

    async def _select_itineraries(
        self,
        base: Location,
        stops: list[Stop],
        trip_date: date,
        return_date: date,
        selected: FlightItinerary | None,
        segments: list[SegmentFlight],
        selected_rental: RentalCar | None,
    ) -> ItinerarySelection:
        multi = len(stops) > 1

        if segments and multi:
            logger.info(f"Using {len(segments)} caller-chosen segment flights")
            selection = _segment_selection(segments)
        elif selected is not None:
            logger.info(f"Using selected flight {selected.id or 'unknown'}")
            selection = _round_trip_selection(selected)
            if selected.parent_price <= 0:
                logger.warning("Selected flight carries no price")
            if selected_rental is None:
                # Only for its rental-car options
                selection.outbound_results = await self._search(base, stops[0].location, trip_date, return_date)
        elif multi:
            outbound_results, return_results = await asyncio.gather(
                self._search(base, stops[0].location, trip_date, None),
                self._search(stops[-1].location, base, return_date, None),
            )
            selection = ItinerarySelection(same_ticket=False)
            selection.outbound_results = outbound_results
            selection.return_results = return_results
            out_pick = outbound_results.representative() if outbound_results else None
            ret_pick = return_results.representative() if return_results else None
            if out_pick is not None:
                selection.outbound = PricedLeg(out_pick.outbound_leg, out_pick.parent_price)
            if ret_pick is not None:
                selection.inbound = PricedLeg(ret_pick.inbound_leg, ret_pick.parent_price)
        else:
            results = await self._search(base, stops[0].location, trip_date, return_date)
            pick = results.representative() if results else None
            selection = _round_trip_selection(pick) if pick else ItinerarySelection()
            selection.outbound_results = results

        if selected_rental is not None:
            selection.rental = selected_rental
        elif selection.outbound_results is not None:
            selection.rental = median_rental(selection.outbound_results.rental_cars)
        return selection

    async def evaluate(
        self,
        base: Location,
        stops: list[Stop],
        rate: Rate,
        work_hours: float,
        work_cost: float,
        trip_date: date,
        driving_possible: bool,
        one_way_driving_hours: float,
        selected_flight: FlightItinerary | None = None,
        segment_flights: list[SegmentFlight] | None = None,
        selected_rental: RentalCar | None = None,
        excess_baggage: float = 0.0,
    ) -> FlightOption | None:
        segments = segment_flights or []
        if should_skip_flight_search(
            driving_possible, one_way_driving_hours, selected_flight is not None, bool(segments), self.config
        ):
            logger.info(
                f"Skipping flight search: driving time ({one_way_driving_hours:.2f}h) is less than "
                f"{self.config.thresholds.flight_search_min_driving_hours:g}h"
            )
            return None

        multi = len(stops) > 1
        ground_minutes, ground_km = (await self._ground_between_stops(stops)) if multi else (0.0, 0.0)
        return_date = estimated_return_date(trip_date, work_hours, ground_minutes, self.config)

        selection = await self._select_itineraries(
            base, stops, trip_date, return_date, selected_flight, segments, selected_rental
        )
        if not selection.complete:
            logger.info("No flight itineraries available - flight option skipped")
            return None

        t = self.config.airport_times
        outbound = selection.outbound.leg
        inbound = selection.inbound.leg
        out_minutes = outbound.duration_minutes or t.default_flight
        ret_minutes = inbound.duration_minutes or t.default_flight
        total_minutes = (
            t.time_to_airport + t.security_boarding + out_minutes + t.deboarding_luggage + t.airport_to_destination
            + ground_minutes
            + t.airport_to_destination + t.deboarding_luggage + ret_minutes + t.security_boarding + t.time_to_airport
        )
        hours = round_money(total_minutes / 60)
        travel_time_cost = round_money(hours * rate.travel_hour_rate)

        day_count = estimate_flight_days(
            outbound, inbound, work_hours, self.config.working_day, t
        )
        days = day_count.days
        hotel_nights = max(0, days - 1)
        hotel_cost = round_money(hotel_nights * rate.hotel_rate_max)
        allowances = calculate_allowances(days, hours + work_hours, rate, self.config.allowance_reduction)

        price = resolve_flight_price(selection, selected_flight)
        logger.info(f"Flight price €{price.amount:.2f} from {price.source}")

        rental_per_day = (
            selection.rental.price_per_day
            if selection.rental and selection.rental.price_per_day > 0
            else self.config.ground.rental_price_per_day
        )
        rental_cost = round_money(days * rental_per_day)

        rental_km = await self._rental_distance(stops, ground_km, selection)
        rental_liters = self.config.fuel.liters(rental_km, rental=True)
        rental_fuel_cost = round_money(rental_liters * self.config.fuel.fuel_rate)

        ground_cost, ground_type = ground_transport_cost(self.config.ground, days)
        baggage = round_money(excess_baggage)

        travel_cost = round_money(
            travel_time_cost + allowances.total + hotel_cost + price.amount
            + rental_cost + ground_cost + rental_fuel_cost + baggage
        )
        total_cost = round_money(travel_cost + work_cost)

        routing = outbound.routing or inbound.routing
        time_breakdown = {
            "to_airport": t.time_to_airport * 2,
            "security_boarding": t.security_boarding * 2,
            "flight_duration": out_minutes + ret_minutes,
            "outbound_flight": out_minutes,
            "return_flight": ret_minutes,
            "deboarding_luggage": t.deboarding_luggage * 2,
            "to_destination": t.airport_to_destination * 2,
            "ground_travel_between_customers": round_money(ground_minutes),
            "routing": routing or "Direct",
        }

        first, last = stops[0], stops[-1]
        if multi:
            flight_text = (
                f"Flight tickets cost €{price.amount:.2f}. This includes your outbound flight from base to "
                f"{first.city or 'first customer'} and return flight from {last.city or 'last customer'} to base."
            )
            fuel_text = (
                f"The rental car needs fuel to drive from the airport to all customers and back to the "
                f"airport ({rental_km:.2f}km total). Fuel costs €{rental_fuel_cost:.2f}."
            )
        else:
            flight_text = (
                f"Round-trip flight ticket costs €{price.amount:.2f}. This includes your outbound and "
                f"return flights{f' ({routing})' if routing else ''}."
            )
            fuel_text = (
                f"The rental car needs fuel to drive from the airport to the customer and back "
                f"({rental_km:.2f}km total). Fuel costs €{rental_fuel_cost:.2f}."
            )
        if ground_type.startswith("Taxi"):
            ground_text = f"Taxi to and from the airport costs €{ground_cost:.2f} (round-trip)."
        else:
            ground_text = f"Parking at the airport costs €{ground_cost:.2f} for {plural(days, 'day')}."

        breakdown = {
            "travel_time": {
                "hours": hours,
                "rate": rate.travel_hour_rate,
                "cost": travel_time_cost,
                "explanation": (
                    f"You spend {format_hours(hours)} traveling door-to-door (including airport time, flight, "
                    f"and ground transport). Each hour is paid at €{rate.travel_hour_rate:.2f} per hour."
                ),
            },
            "flight": {
                "cost": price.amount,
                "price_resolution": price.to_dict(),
                "explanation": flight_text,
            },
            "rental_car": {
                "days": days,
                "rate_per_day": rental_per_day,
                "cost": rental_cost,
                "explanation": (
                    f"You need a rental car for {plural(days, 'day')} at the destination. "
                    f"The rental costs €{rental_per_day:.2f} per day."
                ),
            },
            "fuel": {
                "distance_km": round_money(rental_km),
                "liters": round_money(rental_liters),
                "rate": self.config.fuel.fuel_rate,
                "cost": rental_fuel_cost,
                "explanation": fuel_text,
            },
            "ground_transport": {
                "type": ground_type,
                "cost": ground_cost,
                "explanation": ground_text,
            },
            "excess_baggage": {"cost": baggage},
            "daily_allowances": allowances.to_dict(),
            "hotel": {
                "nights": hotel_nights,
                "rate": rate.hotel_rate_max,
                "cost": hotel_cost,
                "explanation": hotel_explanation(hotel_nights, rate.hotel_rate_max),
            },
        }

        results = [r for r in (selection.outbound_results, selection.return_results) if r is not None]
        options_count = sum(len(r.options) for r in results) or (1 if selected_flight else 0)
        statistics = next((r.statistics for r in results if r.statistics), None)

        option = FlightOption(
            total_cost=total_cost,
            travel_cost=travel_cost,
            travel_hours=hours,
            travel_time_cost=travel_time_cost,
            days_required=days,
            hotel_nights=hotel_nights,
            hotel_cost=hotel_cost,
            allowances=allowances,
            breakdown=breakdown,
            flight_cost=price.amount,
            price_resolution=price,
            is_multi_customer=multi,
            rental_car_cost=rental_cost,
            rental_car_fuel_cost=rental_fuel_cost,
            rental_car_distance_km=rental_km,
            ground_transport=ground_cost,
            ground_transport_type=ground_type,
            excess_baggage_cost=baggage,
            time_breakdown=time_breakdown,
            departure_date=trip_date,
            return_date=return_date,
            outbound_flight=outbound,
            return_flight=inbound,
            rental_details=selection.rental,
            segment_details=tuple(selection.segment_details),
            statistics=statistics,
            options_count=options_count,
        )
        logger.info(f"Flight option: {days} day(s), {hours:.2f}h door-to-door, total €{total_cost:.2f}")
        return option
