"""Entidad PaymentLedgerEntry - rastro de auditoría de pagos por referencia."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from app.domain.value_objects.money import Money


class LedgerStatus(str, Enum):
    """Estados de una entrada del ledger."""

    PENDING = "pending"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    REFUNDED = "refunded"


@dataclass
class PaymentLedgerEntry:
    """
    Entrada de auditoría de un pago, llave única = referencia del gateway.

    Nunca es fuente de verdad del estado del booking.
    """

    reference: str
    booking_id: str
    booking_kind: str
    user_id: str
    amount: Decimal
    currency_code: str
    status: LedgerStatus = LedgerStatus.PENDING
    channel: str | None = None
    paid_at: datetime | None = None
    failure_reason: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def money(self) -> Money:
        return Money(amount=self.amount, currency_code=self.currency_code)
