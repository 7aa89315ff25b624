"""Interfaces (Puertos) de la capa de aplicación."""

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock, FakeClock, SystemClock
from app.application.interfaces.idempotency_repo import IdempotencyRecord, IdempotencyRepo
from app.application.interfaces.inventory_repo import InventoryRepo
from app.application.interfaces.payment_gateway import (
    GatewayOutcome,
    PaymentGateway,
    PaymentSession,
    WebhookEvent,
)
from app.application.interfaces.payment_ledger_repo import PaymentLedgerRepo
from app.application.interfaces.principal import Principal
from app.application.interfaces.transaction_manager import TransactionManager

__all__ = [
    # Repositories
    "BookingRepo",
    "IdempotencyRecord",
    "IdempotencyRepo",
    "InventoryRepo",
    "PaymentLedgerRepo",
    # Gateways
    "PaymentGateway",
    "PaymentSession",
    "GatewayOutcome",
    "WebhookEvent",
    # Infrastructure
    "TransactionManager",
    # Identity
    "Principal",
    # Utilities
    "Clock",
    "SystemClock",
    "FakeClock",
]
