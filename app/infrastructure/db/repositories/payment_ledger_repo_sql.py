from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Sequence

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.payment_ledger_repo import PaymentLedgerRepo
from app.domain.entities.payment_ledger_entry import LedgerStatus, PaymentLedgerEntry
from app.infrastructure.db.tables import payment_ledger


def _to_entity(row: Any) -> PaymentLedgerEntry:
    return PaymentLedgerEntry(
        reference=row["reference"],
        booking_id=row["booking_id"],
        booking_kind=row["booking_kind"],
        user_id=row["user_id"],
        amount=Decimal(str(row["amount"])),
        currency_code=row["currency_code"],
        status=LedgerStatus(row["status"]),
        channel=row["channel"],
        paid_at=row["paid_at"],
        failure_reason=row["failure_reason"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class PaymentLedgerRepoSQL(PaymentLedgerRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_reference(self, reference: str) -> PaymentLedgerEntry | None:
        stmt = select(payment_ledger).where(payment_ledger.c.reference == reference).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return _to_entity(row) if row else None

    async def upsert(self, entry: PaymentLedgerEntry) -> None:
        values = {
            "booking_id": entry.booking_id,
            "booking_kind": entry.booking_kind,
            "user_id": entry.user_id,
            "amount": entry.amount,
            "currency_code": entry.currency_code,
            "status": entry.status.value,
            "channel": entry.channel,
            "paid_at": entry.paid_at,
            "failure_reason": entry.failure_reason,
            "updated_at": entry.updated_at,
        }
        result = await self._session.execute(
            update(payment_ledger)
            .where(payment_ledger.c.reference == entry.reference)
            .values(**values)
        )
        if result.rowcount == 0:
            await self._session.execute(
                insert(payment_ledger).values(
                    reference=entry.reference, created_at=entry.created_at, **values
                )
            )

    async def mark_status(
        self, reference: str, status: LedgerStatus, failure_reason: str | None = None
    ) -> bool:
        values: dict[str, Any] = {"status": status.value, "updated_at": datetime.now(timezone.utc)}
        if failure_reason is not None:
            values["failure_reason"] = failure_reason
        result = await self._session.execute(
            update(payment_ledger).where(payment_ledger.c.reference == reference).values(**values)
        )
        return result.rowcount > 0

    async def delete_by_reference(self, reference: str) -> int:
        result = await self._session.execute(
            delete(payment_ledger).where(payment_ledger.c.reference == reference)
        )
        return result.rowcount

    async def list_all(self) -> Sequence[PaymentLedgerEntry]:
        result = await self._session.execute(
            select(payment_ledger).order_by(payment_ledger.c.id.desc())
        )
        return [_to_entity(row) for row in result.mappings().all()]
