from datetime import date
from typing import Literal

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic.alias_generators import to_camel

from tripcost.services.trip_costs.errors import InvalidInput
from tripcost.services.trip_costs.models import (
    Address,
    Coordinates,
    FlightItinerary,
    Location,
    RentalCar,
    SegmentFlight,
    Stop,
)

MAX_STOPS = 8

_camel_config = {"alias_generator": to_camel, "populate_by_name": True}


class CoordinatesIn(BaseModel):
    lat: float = Field(ge=-90, le=90)
    lng: float = Field(ge=-180, le=180)


class LocationIn(BaseModel):
    coordinates: CoordinatesIn | None = None
    street: str | None = None
    city: str | None = None
    country: str | None = None

    @model_validator(mode="after")
    def _needs_coordinates_or_address(self):
        if self.coordinates is None and not (self.street or self.city):
            raise ValueError("location needs coordinates or an address")
        return self

    def to_location(self) -> Location:
        return Location(
            coordinates=Coordinates(self.coordinates.lat, self.coordinates.lng) if self.coordinates else None,
            address=Address(self.street, self.city, self.country),
        )


class StopIn(BaseModel):
    customer_id: str
    name: str | None = None
    coordinates: CoordinatesIn | None = None
    street: str | None = None
    city: str | None = None
    country: str
    work_hours: float = Field(default=0.0, ge=0)

    @field_validator("customer_id", mode="before")
    @classmethod
    def _id_as_string(cls, value):
        return str(value) if value is not None else value

    @model_validator(mode="after")
    def _needs_coordinates_or_address(self):
        if self.coordinates is None and not (self.street or self.city):
            raise ValueError(f"stop {self.customer_id} needs coordinates or an address")
        return self

    def to_stop(self) -> Stop:
        location = Location(
            coordinates=Coordinates(self.coordinates.lat, self.coordinates.lng) if self.coordinates else None,
            address=Address(self.street, self.city, self.country),
        )
        return Stop(
            customer_id=self.customer_id,
            location=location,
            country=self.country,
            city=self.city,
            work_hours=self.work_hours,
            name=self.name,
        )


class BillingSettings(BaseModel):
    """Per-request billing overrides; the UI sends camelCase keys."""
    default_start_time: str | None = None
    customer_work_hours_start: float | None = None
    customer_work_hours_end: float | None = None
    min_work_time: float | None = None
    max_daily_hours: float | None = None
    fuel_rate: float | None = Field(default=None, ge=0)
    working_hour_rate: float | None = Field(default=None, ge=0)
    travel_hour_rate: float | None = Field(default=None, ge=0)
    km_rate_own_car: float | None = Field(default=None, ge=0)

    model_config = _camel_config


class TechnicianSettings(BaseModel):
    fuel_consumption_rate: float | None = Field(default=None, ge=0)
    time_to_airport: int | None = Field(default=None, ge=0)
    transport_to_airport: Literal["Taxi", "Car"] | None = None
    taxi_cost: float | None = Field(default=None, ge=0)
    parking_cost_per_day: float | None = Field(default=None, ge=0)

    model_config = _camel_config


class TravelTimes(BaseModel):
    security_boarding: int | None = Field(default=None, ge=0)
    deboarding_luggage: int | None = Field(default=None, ge=0)
    airport_to_destination: int | None = Field(default=None, ge=0)

    model_config = _camel_config


class SegmentFlightIn(BaseModel):
    mode: Literal["fly", "drive"]
    flight: dict | None = None


class ExcessBaggage(BaseModel):
    cost: float = Field(default=0.0, ge=0)


class TripMetadata(BaseModel):
    excess_baggage: ExcessBaggage | None = None

    model_config = {"extra": "allow"}


class TripCostRequest(BaseModel):
    base_location: LocationIn
    stops: list[StopIn] = Field(min_length=1, max_length=MAX_STOPS)
    trip_date: date
    selected_flight: dict | None = None
    segment_flights: dict[int, SegmentFlightIn] | None = None
    selected_rental_car: dict | None = None
    billing_settings: BillingSettings | None = None
    technician_settings: TechnicianSettings | None = None
    travel_times: TravelTimes | None = None
    cost_percentages: dict[str, float] | None = None
    metadata: TripMetadata | None = None

    @field_validator("cost_percentages")
    @classmethod
    def _percentages_in_range(cls, value):
        if value is None:
            return value
        for customer_id, pct in value.items():
            if pct < 0 or pct > 100:
                raise ValueError(f"cost percentage for {customer_id} must be between 0 and 100")
        return value

    @model_validator(mode="after")
    def _flight_payloads_convert(self):
        try:
            self.to_selected_flight()
            self.to_segment_flights()
            self.to_rental_car()
        except (TypeError, ValueError) as e:
            raise ValueError(f"invalid flight or rental car payload: {e}") from e
        return self

    def to_selected_flight(self) -> FlightItinerary | None:
        return FlightItinerary.from_dict(self.selected_flight) if self.selected_flight else None

    def to_segment_flights(self) -> list[SegmentFlight]:
        if not self.segment_flights:
            return []
        return [
            SegmentFlight(
                segment_index=index,
                mode=segment.mode,
                flight=FlightItinerary.from_dict(segment.flight) if segment.flight else None,
            )
            for index, segment in sorted(self.segment_flights.items())
        ]

    def to_rental_car(self) -> RentalCar | None:
        return RentalCar.from_dict(self.selected_rental_car) if self.selected_rental_car else None

    @property
    def excess_baggage_cost(self) -> float:
        if self.metadata and self.metadata.excess_baggage:
            return self.metadata.excess_baggage.cost
        return 0.0


def parse_request(data: "TripCostRequest | dict") -> TripCostRequest:
    """Validate a raw request; validation errors surface as InvalidInput."""
    if isinstance(data, TripCostRequest):
        return data
    if not isinstance(data, dict):
        raise InvalidInput("Trip cost request must be a mapping")
    try:
        return TripCostRequest.model_validate(data)
    except ValidationError as e:
        raise InvalidInput(str(e)) from e
