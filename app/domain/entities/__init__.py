"""Entidades del dominio de reservas de viaje."""

from app.domain.entities.booking import (
    Booking,
    BookingKind,
    BookingStatus,
    Passenger,
    PaymentStatus,
    describe_itinerary,
    itinerary_from_dict,
)
from app.domain.entities.inventory_unit import InventoryKind, InventoryUnit
from app.domain.entities.payment_ledger_entry import LedgerStatus, PaymentLedgerEntry

__all__ = [
    # Booking
    "Booking",
    "BookingKind",
    "BookingStatus",
    "PaymentStatus",
    "Passenger",
    "describe_itinerary",
    "itinerary_from_dict",
    # InventoryUnit
    "InventoryUnit",
    "InventoryKind",
    # PaymentLedgerEntry
    "PaymentLedgerEntry",
    "LedgerStatus",
]
