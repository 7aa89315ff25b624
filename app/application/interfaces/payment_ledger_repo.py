from typing import Sequence

from app.domain.entities.payment_ledger_entry import LedgerStatus, PaymentLedgerEntry


class PaymentLedgerRepo:
    """Ledger de auditoría de pagos, una entrada por referencia."""

    async def get_by_reference(self, reference: str) -> PaymentLedgerEntry | None:
        raise NotImplementedError

    async def upsert(self, entry: PaymentLedgerEntry) -> None:
        """Crea la entrada o la actualiza en sitio si la referencia ya existe."""
        raise NotImplementedError

    async def mark_status(
        self, reference: str, status: LedgerStatus, failure_reason: str | None = None
    ) -> bool:
        raise NotImplementedError

    async def delete_by_reference(self, reference: str) -> int:
        raise NotImplementedError

    async def list_all(self) -> Sequence[PaymentLedgerEntry]:
        raise NotImplementedError
