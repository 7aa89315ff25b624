from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, EmailStr, Field, condecimal, constr

from app.application.interfaces.payment_gateway import PaymentSession
from app.domain.entities.booking import Booking, describe_itinerary

Money = condecimal(max_digits=12, decimal_places=2)


class TripType(str, Enum):
    ONE_WAY = "one-way"
    ROUND_TRIP = "round-trip"


class Passenger(BaseModel):
    model_config = ConfigDict(extra="forbid")

    first_name: constr(strip_whitespace=True, min_length=1)
    last_name: constr(strip_whitespace=True, min_length=1)
    gender: constr(strip_whitespace=True, min_length=1)
    date_of_birth: date
    nationality: constr(strip_whitespace=True, min_length=2)
    passport_number: str | None = None


class FlightBookingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    trip_type: TripType = TripType.ONE_WAY
    outbound_flight_id: constr(strip_whitespace=True, min_length=1)
    return_flight_id: constr(strip_whitespace=True, min_length=1) | None = None
    passengers: list[Passenger] = Field(default_factory=list)
    payer_email: EmailStr | None = None


class HotelBookingRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    hotel_id: constr(strip_whitespace=True, min_length=1)
    rooms: int = 1
    check_in: datetime
    check_out: datetime
    payer_email: EmailStr | None = None


class PaymentSessionOut(BaseModel):
    model_config = ConfigDict(json_encoders={Decimal: lambda v: format(v, ".2f")})

    reference: str
    amount: Money
    amount_minor_units: int
    currency: constr(min_length=3, max_length=3)
    payer_email: str
    authorization_url: str | None = None
    access_code: str | None = None

    @classmethod
    def from_session(cls, session: PaymentSession) -> "PaymentSessionOut":
        return cls(
            reference=session.reference,
            amount=session.amount.amount,
            amount_minor_units=session.amount_minor_units,
            currency=session.currency,
            payer_email=session.payer_email,
            authorization_url=session.authorization_url,
            access_code=session.access_code,
        )


class BookingOut(BaseModel):
    model_config = ConfigDict(json_encoders={Decimal: lambda v: format(v, ".2f")})

    id: str
    user_id: str
    kind: str
    itinerary: dict[str, Any]
    quantity: int
    total_price: Money
    currency_code: str
    booking_status: str
    payment_status: str
    gateway_reference: str | None = None
    passengers: list[dict[str, Any]] = Field(default_factory=list)
    lock_version: int = 0
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_entity(cls, booking: Booking) -> "BookingOut":
        return cls(
            id=booking.id,
            user_id=booking.user_id,
            kind=booking.kind.value,
            itinerary=describe_itinerary(booking.itinerary),
            quantity=booking.quantity,
            total_price=booking.total_price,
            currency_code=booking.currency_code,
            booking_status=booking.booking_status.value,
            payment_status=booking.payment_status.value,
            gateway_reference=booking.gateway_reference,
            passengers=[p.to_dict() for p in booking.passengers],
            lock_version=booking.lock_version,
            created_at=booking.created_at,
            updated_at=booking.updated_at,
        )


class ReserveBookingResponse(BaseModel):
    booking: BookingOut
    payment: PaymentSessionOut


class UpdateBookingStatusRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    booking_status: str | None = None
    payment_status: str | None = None


class PaymentSessionRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    payer_email: EmailStr | None = None
