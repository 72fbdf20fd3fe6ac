"""Trip cost value objects — inputs, derived legs, options and the final breakdown."""

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from typing import Any

from tripcost.services.trip_costs.money import round_money

logger = logging.getLogger(__name__)


# ---------- Inputs ----------

@dataclass(frozen=True)
class Coordinates:
    lat: float
    lng: float

    def to_dict(self) -> dict:
        return {"lat": self.lat, "lng": self.lng}


@dataclass(frozen=True)
class Address:
    street: str | None = None
    city: str | None = None
    country: str | None = None

    def __str__(self) -> str:
        return ", ".join(part for part in (self.street, self.city, self.country) if part)


@dataclass(frozen=True)
class Location:
    """A point given by coordinates, an address, or both."""
    coordinates: Coordinates | None = None
    address: Address | None = None

    @property
    def is_resolved(self) -> bool:
        return self.coordinates is not None

    def with_coordinates(self, coordinates: Coordinates) -> "Location":
        return replace(self, coordinates=coordinates)

    def to_dict(self) -> dict:
        if self.coordinates:
            return self.coordinates.to_dict()
        return {"address": str(self.address) if self.address else None}


@dataclass(frozen=True)
class Stop:
    """One customer visit on the trip."""
    customer_id: str
    location: Location
    country: str
    city: str | None = None
    work_hours: float = 0.0
    name: str | None = None

    @property
    def label(self) -> str:
        return self.name or self.city or self.customer_id


# ---------- Derived ----------

@dataclass(frozen=True)
class Leg:
    """One consecutive hop of Base → Stop1 → … → StopN → Base."""
    from_label: str
    to_label: str
    distance_km: float
    duration_minutes: float

    def to_dict(self) -> dict:
        return {
            "from": self.from_label,
            "to": self.to_label,
            "distance_km": round_money(self.distance_km),
            "duration_minutes": round_money(self.duration_minutes),
        }


@dataclass(frozen=True)
class Rate:
    """Statutory allowances plus company billing rates for one country/city."""
    country_code: str
    country_name: str
    daily_allowance_8h: float
    daily_allowance_24h: float
    hotel_rate_max: float
    mileage_rate: float = 0.30
    travel_hour_rate: float = 98.0
    work_hour_rate: float = 132.0
    agent_fee: float = 0.0
    company_fee: float = 0.0
    additional_fee_percent: float = 0.0
    city_name: str | None = None
    source: str = "static"
    source_reference: str | None = None

    _MONEY_FIELDS = (
        "daily_allowance_8h", "daily_allowance_24h", "hotel_rate_max",
        "mileage_rate", "travel_hour_rate", "work_hour_rate",
        "agent_fee", "company_fee", "additional_fee_percent",
    )

    def __post_init__(self):
        for name in self._MONEY_FIELDS:
            if getattr(self, name) < 0:
                raise ValueError(f"Rate field {name} must be non-negative")

    def with_billing_overrides(
        self,
        work_hour_rate: float | None = None,
        travel_hour_rate: float | None = None,
        mileage_rate: float | None = None,
    ) -> "Rate":
        return replace(
            self,
            work_hour_rate=work_hour_rate or self.work_hour_rate,
            travel_hour_rate=travel_hour_rate or self.travel_hour_rate,
            mileage_rate=mileage_rate or self.mileage_rate,
        )

    def to_dict(self) -> dict:
        return {
            "country_code": self.country_code,
            "country_name": self.country_name,
            "city_name": self.city_name,
            "daily_allowance_8h": self.daily_allowance_8h,
            "daily_allowance_24h": self.daily_allowance_24h,
            "hotel_rate": self.hotel_rate_max,
            "mileage_rate": self.mileage_rate,
            "travel_hour_rate": self.travel_hour_rate,
            "work_hour_rate": self.work_hour_rate,
            "agent_fee": self.agent_fee,
            "company_fee": self.company_fee,
            "additional_fee_percent": self.additional_fee_percent,
            "source": self.source,
            "source_reference": self.source_reference,
        }


@dataclass(frozen=True)
class AllowanceDay:
    """One line of the per-diem audit trail."""
    day: str
    rate: float
    reduction: float
    final: float
    type: str          # "8h" | "24h"
    count: int = 1

    def to_dict(self) -> dict:
        data = {
            "day": self.day,
            "rate": self.rate,
            "reduction": self.reduction,
            "final": self.final,
            "type": self.type,
        }
        if self.type == "24h":
            data["count"] = self.count
        return data


@dataclass(frozen=True)
class AllowanceBreakdown:
    full_day_count: int
    full_day_rate: float
    partial_day_count: int
    partial_day_rate: float
    total_24h: float
    total_8h: float
    days: tuple[AllowanceDay, ...] = ()

    @property
    def total(self) -> float:
        return round_money(self.total_24h + self.total_8h)

    @property
    def explanation(self) -> str:
        if not self.days:
            return "No daily allowances needed for this trip."
        listed = ", ".join(f"{d.day} = €{d.final:.2f}" for d in self.days)
        return f"Daily meal allowances: {listed}. Total: €{self.total:.2f}"

    def to_dict(self) -> dict:
        return {
            "days_24h": self.full_day_count,
            "days_8h": self.partial_day_count,
            "rate_24h": self.full_day_rate,
            "rate_8h": self.partial_day_rate,
            "cost_24h": self.total_24h,
            "cost_8h": self.total_8h,
            "total": self.total,
            "details": [d.to_dict() for d in self.days],
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class TripFees:
    """Per-trip fees, applied once (never per day)."""
    agent_fee: float = 0.0
    company_fee: float = 0.0
    additional_fee_percent: float = 0.0
    additional_fee_amount: float = 0.0
    total_fees: float = 0.0

    def to_dict(self) -> dict:
        return {
            "agent_fee": self.agent_fee,
            "company_fee": self.company_fee,
            "additional_fee_percent": self.additional_fee_percent,
            "additional_fee_amount": self.additional_fee_amount,
            "total_fees": self.total_fees,
        }


# ---------- Flights ----------

def _price(value: Any) -> float:
    try:
        return float(value or 0)
    except (TypeError, ValueError):
        return 0.0


@dataclass(frozen=True)
class FlightLeg:
    """One direction of an itinerary."""
    from_code: str | None = None
    to_code: str | None = None
    departure_time: str | None = None
    arrival_time: str | None = None
    duration_minutes: int | None = None
    routing: str | None = None
    flight_number: str | None = None
    price: float = 0.0
    total_price: float = 0.0

    @classmethod
    def from_dict(cls, data: dict) -> "FlightLeg":
        duration = data.get("duration_minutes")
        return cls(
            from_code=data.get("from"),
            to_code=data.get("to"),
            departure_time=data.get("departure_time"),
            arrival_time=data.get("arrival_time"),
            duration_minutes=int(duration) if duration else None,
            routing=data.get("routing"),
            flight_number=data.get("flight_number"),
            price=_price(data.get("price")),
            total_price=_price(data.get("total_price")),
        )

    @property
    def own_price(self) -> float:
        return self.price or self.total_price

    def to_dict(self) -> dict:
        return {
            "from": self.from_code,
            "to": self.to_code,
            "departure_time": self.departure_time,
            "arrival_time": self.arrival_time,
            "duration_minutes": self.duration_minutes,
            "routing": self.routing,
            "flight_number": self.flight_number,
            "price": self.price,
            "total_price": self.total_price,
        }


@dataclass(frozen=True)
class FlightItinerary:
    """A priced itinerary: round trip (outbound + return) or a single one-way leg."""
    id: str | None = None
    price: float = 0.0
    total_price: float = 0.0
    outbound: FlightLeg | None = None
    return_leg: FlightLeg | None = None
    source: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "FlightItinerary":
        outbound = data.get("outbound")
        inbound = data.get("return")
        return cls(
            id=data.get("id") or data.get("flight_number"),
            price=_price(data.get("price")),
            total_price=_price(data.get("total_price")),
            # A flat one-way itinerary is its own outbound leg
            outbound=FlightLeg.from_dict(outbound) if outbound else FlightLeg.from_dict(data),
            return_leg=FlightLeg.from_dict(inbound) if inbound else None,
            source=data.get("source"),
        )

    @property
    def parent_price(self) -> float:
        return self.price or self.total_price

    @property
    def outbound_leg(self) -> FlightLeg:
        return self.outbound or FlightLeg()

    @property
    def inbound_leg(self) -> FlightLeg:
        return self.return_leg or self.outbound_leg

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "price": self.price,
            "total_price": self.total_price,
            "outbound": self.outbound.to_dict() if self.outbound else None,
            "return": self.return_leg.to_dict() if self.return_leg else None,
            "source": self.source,
        }


@dataclass(frozen=True)
class SegmentFlight:
    """A caller-chosen mode for one leg of a multi-customer route."""
    segment_index: int
    mode: str                      # "fly" | "drive"
    flight: FlightItinerary | None = None

    @property
    def is_flight(self) -> bool:
        return self.mode == "fly" and self.flight is not None


@dataclass(frozen=True)
class PricedLeg:
    """A leg chosen for costing, with the price of the itinerary it came from."""
    leg: FlightLeg
    parent_price: float = 0.0


@dataclass(frozen=True)
class FlightPriceResolution:
    amount: float
    source: str     # segment_total | explicit_total | parent_round_trip | leg_total | computed_sum | none
    outbound_price: float = 0.0
    return_price: float = 0.0

    def to_dict(self) -> dict:
        return {
            "amount": self.amount,
            "source": self.source,
            "outbound_price": self.outbound_price,
            "return_price": self.return_price,
        }


@dataclass(frozen=True)
class RentalCar:
    price_per_day: float
    name: str | None = None
    provider: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "RentalCar":
        return cls(
            price_per_day=_price(data.get("price_per_day")),
            name=data.get("name") or data.get("vehicle") or data.get("category"),
            provider=data.get("provider") or data.get("company"),
        )

    def to_dict(self) -> dict:
        return {"price_per_day": self.price_per_day, "name": self.name, "provider": self.provider}


# ---------- Options ----------

@dataclass(frozen=True, kw_only=True)
class TravelOption:
    """Fields shared by road and flight options.

    Subclasses provide transport_cost.
    """
    type: str
    total_cost: float
    travel_cost: float
    travel_hours: float
    travel_time_cost: float
    days_required: int
    hotel_nights: int
    hotel_cost: float
    allowances: AllowanceBreakdown
    breakdown: dict = field(default_factory=dict)
    trip_fees: TripFees | None = None
    total_cost_with_fees: float | None = None

    @property
    def grand_total(self) -> float:
        if self.total_cost_with_fees is not None:
            return self.total_cost_with_fees
        return self.total_cost

    def shared_lines(self) -> dict[str, float]:
        """Cost lines that are split between customers (everything but work)."""
        return {
            "travel_time": self.travel_time_cost,
            "transport": self.transport_cost,
            "allowances": self.allowances.total,
            "hotel": self.hotel_cost,
        }

    def with_fees(self, fees: TripFees) -> "TravelOption":
        return replace(
            self,
            trip_fees=fees,
            total_cost_with_fees=round_money(self.total_cost + fees.total_fees),
        )

    def _base_dict(self) -> dict:
        return {
            "type": self.type,
            "total_cost": self.total_cost,
            "travel_cost": self.travel_cost,
            "days_required": self.days_required,
            "hotel_nights": self.hotel_nights,
            "hotel_cost": self.hotel_cost,
            "allowances_total": self.allowances.total,
            "travel_time_cost": self.travel_time_cost,
            "breakdown": self.breakdown,
            "trip_fees": self.trip_fees.to_dict() if self.trip_fees else None,
            "total_cost_with_fees": self.total_cost_with_fees,
        }


@dataclass(frozen=True, kw_only=True)
class RoadOption(TravelOption):
    type: str = "road"
    distance_km: float
    mileage_cost: float
    toll_cost: float
    fuel_cost: float
    fuel_consumption_liters: float
    fuel_rate: float
    fuel_consumption_rate: float

    @property
    def transport_cost(self) -> float:
        return round_money(self.mileage_cost + self.toll_cost)

    def to_dict(self) -> dict:
        data = self._base_dict()
        data.update({
            "distance_km": round_money(self.distance_km),
            "duration_hours": round_money(self.travel_hours),
            "toll_cost": self.toll_cost,
            "fuel_cost": self.fuel_cost,
            "fuel_consumption_liters": self.fuel_consumption_liters,
            "fuel_rate": self.fuel_rate,
            "fuel_consumption_rate": self.fuel_consumption_rate,
        })
        return data


@dataclass(frozen=True, kw_only=True)
class FlightOption(TravelOption):
    type: str = "flight"
    flight_cost: float
    price_resolution: FlightPriceResolution
    is_multi_customer: bool
    rental_car_cost: float
    rental_car_fuel_cost: float
    rental_car_distance_km: float
    ground_transport: float
    ground_transport_type: str
    excess_baggage_cost: float
    time_breakdown: dict
    departure_date: date
    return_date: date
    outbound_flight: FlightLeg | None = None
    return_flight: FlightLeg | None = None
    rental_details: RentalCar | None = None
    segment_details: tuple[dict, ...] = ()
    statistics: dict | None = None
    options_count: int = 0

    @property
    def transport_cost(self) -> float:
        return round_money(
            self.flight_cost
            + self.rental_car_cost
            + self.ground_transport
            + self.rental_car_fuel_cost
            + self.excess_baggage_cost
        )

    def to_dict(self) -> dict:
        data = self._base_dict()
        data.update({
            "flight_cost": self.flight_cost,
            "flight_price_source": self.price_resolution.source,
            "is_round_trip": not self.is_multi_customer,
            "is_multi_customer": self.is_multi_customer,
            "rental_car_cost": self.rental_car_cost,
            "rental_car_fuel_cost": self.rental_car_fuel_cost,
            "rental_car_distance_km": round_money(self.rental_car_distance_km),
            "ground_transport": self.ground_transport,
            "ground_transport_type": self.ground_transport_type,
            "total_travel_hours": self.travel_hours,
            "ue_gepack": self.excess_baggage_cost,
            "time_breakdown": self.time_breakdown,
            "departure_date": self.departure_date.isoformat(),
            "return_date": self.return_date.isoformat(),
            "outbound_flight": self.outbound_flight.to_dict() if self.outbound_flight else None,
            "return_flight": self.return_flight.to_dict() if self.return_flight else None,
            "rental_details": self.rental_details.to_dict() if self.rental_details else None,
            "segment_details": list(self.segment_details),
            "statistics": self.statistics,
            "options_count": self.options_count,
        })
        return data


# ---------- Allocation & result ----------

@dataclass(frozen=True)
class PerCustomerAllocation:
    customer_id: str
    customer_name: str
    cost_percentage: float
    work_hours: float
    allocated_cost: float
    breakdown: dict

    def to_dict(self) -> dict:
        return {
            "customer_id": self.customer_id,
            "customer_name": self.customer_name,
            "cost_percentage": self.cost_percentage,
            "work_hours": self.work_hours,
            "allocated_cost": self.allocated_cost,
            "breakdown": self.breakdown,
        }


@dataclass
class CostBreakdown:
    """Complete result of one multi-stop cost calculation."""
    legs: list[Leg]
    total_work_hours: float
    total_days_required: int
    work_cost_total: float
    allowance_breakdown: AllowanceBreakdown | None
    hotel_total: float
    trip_fees: dict
    road_option: RoadOption | None
    flight_option: FlightOption | None
    recommended: str                  # "road" | "flight" | "none"
    per_customer_costs: list[PerCustomerAllocation] | None = None
    road_not_available: dict | None = None
    metadata: dict = field(default_factory=dict)

    @property
    def selected_option(self) -> TravelOption | None:
        if self.recommended == "road":
            return self.road_option
        if self.recommended == "flight":
            return self.flight_option
        return None

    def to_dict(self) -> dict:
        return {
            "legs": [leg.to_dict() for leg in self.legs],
            "total_work_hours": self.total_work_hours,
            "total_days_required": self.total_days_required,
            "arbeitszeit_total": self.work_cost_total,
            "tagesspesen_breakdown": (
                [d.to_dict() for d in self.allowance_breakdown.days]
                if self.allowance_breakdown
                else []
            ),
            "hotel_total": self.hotel_total,
            "trip_fees": self.trip_fees,
            "road_option": self.road_option.to_dict() if self.road_option else None,
            "flight_option": self.flight_option.to_dict() if self.flight_option else None,
            "recommended": self.recommended,
            "per_customer_costs": (
                [c.to_dict() for c in self.per_customer_costs]
                if self.per_customer_costs is not None
                else None
            ),
            "road_not_available": self.road_not_available,
            "metadata": self.metadata,
        }
