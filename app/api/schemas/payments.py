from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, condecimal, constr

from app.domain.entities.booking import BookingKind
from app.domain.entities.payment_ledger_entry import PaymentLedgerEntry

Money = condecimal(max_digits=12, decimal_places=2)


class VerifyPaymentRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    reference: constr(strip_whitespace=True, min_length=1)
    booking_id: constr(strip_whitespace=True, min_length=1)
    booking_type: BookingKind


class WebhookAck(BaseModel):
    received: bool = True
    status: str


class PaymentLedgerOut(BaseModel):
    model_config = ConfigDict(json_encoders={Decimal: lambda v: format(v, ".2f")})

    reference: str
    booking_id: str
    booking_kind: str
    user_id: str
    amount: Money
    currency_code: str
    status: str
    channel: str | None = None
    paid_at: datetime | None = None
    failure_reason: str | None = None

    @classmethod
    def from_entity(cls, entry: PaymentLedgerEntry) -> "PaymentLedgerOut":
        return cls(
            reference=entry.reference,
            booking_id=entry.booking_id,
            booking_kind=entry.booking_kind,
            user_id=entry.user_id,
            amount=entry.amount,
            currency_code=entry.currency_code,
            status=entry.status.value,
            channel=entry.channel,
            paid_at=entry.paid_at,
            failure_reason=entry.failure_reason,
        )
