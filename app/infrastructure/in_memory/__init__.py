"""Implementaciones in-memory para desarrollo y testing."""

from app.infrastructure.in_memory.booking_repo import InMemoryBookingRepo
from app.infrastructure.in_memory.idempotency_repo import InMemoryIdempotencyRepo
from app.infrastructure.in_memory.inventory_repo import InMemoryInventoryRepo
from app.infrastructure.in_memory.payment_gateway import StubPaymentGateway
from app.infrastructure.in_memory.payment_ledger_repo import InMemoryPaymentLedgerRepo
from app.infrastructure.in_memory.store import InMemoryStore
from app.infrastructure.in_memory.transaction_manager import InMemoryTransactionManager

__all__ = [
    # Store
    "InMemoryStore",
    # Repositories
    "InMemoryBookingRepo",
    "InMemoryIdempotencyRepo",
    "InMemoryInventoryRepo",
    "InMemoryPaymentLedgerRepo",
    # Gateways
    "StubPaymentGateway",
    # Infrastructure
    "InMemoryTransactionManager",
]
