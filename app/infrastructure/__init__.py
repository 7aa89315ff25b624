"""
Capa de Infraestructura - Motor de reservas de viajes.

Esta capa contiene las implementaciones concretas de los puertos (interfaces).

Estructura:
- db/: Tablas, repositorios SQL, transacciones y reintentos ante deadlock
- gateways/: Adaptador HTTP del gateway de pagos y cache de token
- in_memory/: Implementaciones in-memory para desarrollo y testing
- circuit_breaker.py: Breaker compartido para llamadas al gateway
"""

from app.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from app.infrastructure.in_memory import (
    InMemoryBookingRepo,
    InMemoryIdempotencyRepo,
    InMemoryInventoryRepo,
    InMemoryPaymentLedgerRepo,
    InMemoryStore,
    InMemoryTransactionManager,
    StubPaymentGateway,
)

__all__ = [
    "SQLAlchemyTransactionManager",
    "InMemoryStore",
    "InMemoryBookingRepo",
    "InMemoryIdempotencyRepo",
    "InMemoryInventoryRepo",
    "InMemoryPaymentLedgerRepo",
    "InMemoryTransactionManager",
    "StubPaymentGateway",
]
