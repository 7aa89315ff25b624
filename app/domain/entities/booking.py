"""Entidad Booking - agregado raíz del dominio de reservas."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from app.domain.errors import InvalidBookingStatusError, ReferenceAlreadyAssignedError
from app.domain.value_objects.itinerary import HotelStay, Itinerary, OneWay, RoundTrip
from app.domain.value_objects.money import Money
from app.domain.value_objects.stay_range import StayRange


class BookingKind(str, Enum):
    """Tipo de booking."""

    FLIGHT = "flight"
    HOTEL = "hotel"


class BookingStatus(str, Enum):
    """Estados posibles de un booking."""

    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class PaymentStatus(str, Enum):
    """Estados de pago de un booking."""

    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


@dataclass
class Passenger:
    """Pasajero del manifiesto de un booking de vuelo."""

    first_name: str
    last_name: str
    gender: str
    date_of_birth: str
    nationality: str
    passport_number: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "first_name": self.first_name,
            "last_name": self.last_name,
            "gender": self.gender,
            "date_of_birth": self.date_of_birth,
            "nationality": self.nationality,
            "passport_number": self.passport_number,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Passenger":
        return cls(
            first_name=data["first_name"],
            last_name=data["last_name"],
            gender=data["gender"],
            date_of_birth=data["date_of_birth"],
            nationality=data["nationality"],
            passport_number=data.get("passport_number"),
        )


@dataclass
class Booking:
    """
    Booking de vuelo u hotel con su par de estados (booking, pago).

    Invariantes:
    - booking_status CONFIRMED implica payment_status COMPLETED, y ambos
      cambian en una sola escritura.
    - gateway_reference es inmutable una vez asignada.
    """

    id: str
    user_id: str
    kind: BookingKind
    itinerary: Itinerary
    quantity: int
    total_price: Decimal
    currency_code: str = "NGN"

    booking_status: BookingStatus = BookingStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    gateway_reference: str | None = None

    passengers: list[Passenger] = field(default_factory=list)

    # Control de concurrencia
    lock_version: int = 0

    created_at: datetime | None = None
    updated_at: datetime | None = None

    # === Propiedades calculadas ===

    @property
    def unit_ids(self) -> tuple[str, ...]:
        return self.itinerary.unit_ids

    @property
    def total(self) -> Money:
        return Money(amount=self.total_price, currency_code=self.currency_code)

    @property
    def expected_minor_units(self) -> int:
        return self.total.to_minor_units()

    @property
    def is_round_trip(self) -> bool:
        return isinstance(self.itinerary, RoundTrip)

    @property
    def is_cancelled(self) -> bool:
        return self.booking_status == BookingStatus.CANCELLED

    @property
    def is_paid(self) -> bool:
        return self.payment_status == PaymentStatus.COMPLETED

    @property
    def holds_inventory(self) -> bool:
        """Un booking no cancelado mantiene reservadas sus unidades."""
        return not self.is_cancelled

    @property
    def reference_prefix(self) -> str:
        return "FLT" if self.kind == BookingKind.FLIGHT else "HTL"

    def is_owned_by(self, user_id: str) -> bool:
        return str(self.user_id) == str(user_id)

    # === Métodos de negocio ===

    def assign_reference(self, reference: str) -> bool:
        """
        Asigna la referencia del gateway.

        Returns:
            True si se asignó, False si ya tenía esa misma referencia.
        """
        if self.gateway_reference == reference:
            return False
        if self.gateway_reference is not None:
            raise ReferenceAlreadyAssignedError(self.id, self.gateway_reference)
        self.gateway_reference = reference
        self.lock_version += 1
        return True

    def transition_to(
        self, booking_status: BookingStatus, payment_status: PaymentStatus
    ) -> None:
        """
        Aplica el par (booking, pago) en una sola escritura.

        Raises:
            InvalidBookingStatusError: Si el par rompe confirmed => completed.
        """
        if booking_status == BookingStatus.CONFIRMED and payment_status != PaymentStatus.COMPLETED:
            raise InvalidBookingStatusError(
                f"Un booking confirmed requiere pago completed, no {payment_status.value}"
            )
        self.booking_status = booking_status
        self.payment_status = payment_status
        self.lock_version += 1

    def cancel(self) -> None:
        """Cancela; un pago completado pasa a reembolsado."""
        self.booking_status = BookingStatus.CANCELLED
        if self.payment_status == PaymentStatus.COMPLETED:
            self.payment_status = PaymentStatus.REFUNDED
        self.lock_version += 1


def describe_itinerary(itinerary: Itinerary) -> dict[str, Any]:
    """Representación plana del itinerario para persistencia y respuestas."""
    if isinstance(itinerary, RoundTrip):
        return {
            "type": "round-trip",
            "outbound_unit_id": itinerary.outbound_unit_id,
            "return_unit_id": itinerary.return_unit_id,
        }
    if isinstance(itinerary, OneWay):
        return {"type": "one-way", "outbound_unit_id": itinerary.outbound_unit_id}
    if isinstance(itinerary, HotelStay):
        return {
            "type": "hotel-stay",
            "hotel_unit_id": itinerary.hotel_unit_id,
            "check_in": itinerary.check_in.isoformat(),
            "check_out": itinerary.check_out.isoformat(),
            "nights": itinerary.stay.nights,
        }
    raise TypeError(f"Itinerario desconocido: {type(itinerary)}")


def itinerary_from_dict(data: dict[str, Any]) -> Itinerary:
    """Inverso de describe_itinerary."""
    kind = data.get("type")
    if kind == "round-trip":
        return RoundTrip(
            outbound_unit_id=data["outbound_unit_id"],
            return_unit_id=data["return_unit_id"],
        )
    if kind == "one-way":
        return OneWay(outbound_unit_id=data["outbound_unit_id"])
    if kind == "hotel-stay":
        return HotelStay(
            hotel_unit_id=data["hotel_unit_id"],
            stay=StayRange(
                check_in=datetime.fromisoformat(data["check_in"]),
                check_out=datetime.fromisoformat(data["check_out"]),
            ),
        )
    raise ValueError(f"Tipo de itinerario desconocido: {kind}")
