"""
Capa de Aplicación - Motor de reservas de viajes.

Esta capa contiene los casos de uso y las interfaces (puertos).
Orquesta reserva de inventario, pagos, conciliación y cancelación.

Estructura:
- use_cases/: Casos de uso del sistema
- interfaces/: Puertos (contratos para adaptadores)
"""

from app.application.interfaces import (
    BookingRepo,
    Clock,
    FakeClock,
    GatewayOutcome,
    IdempotencyRecord,
    IdempotencyRepo,
    InventoryRepo,
    PaymentGateway,
    PaymentLedgerRepo,
    PaymentSession,
    Principal,
    SystemClock,
    TransactionManager,
    WebhookEvent,
)

__all__ = [
    # Interfaces - Repositories
    "BookingRepo",
    "IdempotencyRecord",
    "IdempotencyRepo",
    "InventoryRepo",
    "PaymentLedgerRepo",
    # Interfaces - Gateways
    "PaymentGateway",
    "PaymentSession",
    "GatewayOutcome",
    "WebhookEvent",
    # Interfaces - Infrastructure
    "TransactionManager",
    "Principal",
    "Clock",
    "SystemClock",
    "FakeClock",
]
