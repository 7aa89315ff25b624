"""
Capa de Dominio - Motor de consistencia de reservas de viaje.

Esta capa contiene la lógica de negocio pura, sin dependencias de frameworks.
Incluye entidades, value objects, el reductor de conciliación y excepciones
de dominio.

Estructura:
- entities/: Entidades del dominio (InventoryUnit, Booking, PaymentLedgerEntry)
- value_objects/: Objetos de valor inmutables (Money, Itinerary, StayRange, etc.)
- settlement.py: Reductor puro de conciliación de pagos
- errors.py: Excepciones específicas del dominio
"""

from app.domain.entities import (
    Booking,
    BookingKind,
    BookingStatus,
    InventoryKind,
    InventoryUnit,
    LedgerStatus,
    Passenger,
    PaymentLedgerEntry,
    PaymentStatus,
)
from app.domain.errors import (
    AlreadyCancelledError,
    AmountMismatchError,
    BookingNotFoundError,
    DomainError,
    ForbiddenError,
    IdempotencyConflictError,
    InsufficientInventoryError,
    InvalidRouteError,
    InvalidWebhookSignatureError,
    InventoryUnitNotFoundError,
    OptimisticLockError,
    ReferenceMismatchError,
    UpstreamUnavailableError,
    ValidationError,
)
from app.domain.settlement import (
    SettlementAction,
    SettlementDecision,
    SettlementOutcome,
    SettlementState,
    reduce_settlement,
)
from app.domain.value_objects import (
    GatewayReference,
    HotelStay,
    Itinerary,
    Money,
    OneWay,
    RoundTrip,
    StayRange,
)

__all__ = [
    # Entities
    "Booking",
    "BookingKind",
    "BookingStatus",
    "PaymentStatus",
    "Passenger",
    "InventoryUnit",
    "InventoryKind",
    "PaymentLedgerEntry",
    "LedgerStatus",
    # Settlement
    "SettlementAction",
    "SettlementDecision",
    "SettlementOutcome",
    "SettlementState",
    "reduce_settlement",
    # Value Objects
    "Money",
    "GatewayReference",
    "Itinerary",
    "OneWay",
    "RoundTrip",
    "HotelStay",
    "StayRange",
    # Errors
    "DomainError",
    "ValidationError",
    "InvalidRouteError",
    "InventoryUnitNotFoundError",
    "InsufficientInventoryError",
    "BookingNotFoundError",
    "AlreadyCancelledError",
    "ForbiddenError",
    "OptimisticLockError",
    "ReferenceMismatchError",
    "AmountMismatchError",
    "UpstreamUnavailableError",
    "InvalidWebhookSignatureError",
    "IdempotencyConflictError",
]
