import copy
from typing import Sequence

from app.application.interfaces.payment_ledger_repo import PaymentLedgerRepo
from app.domain.entities.payment_ledger_entry import LedgerStatus, PaymentLedgerEntry
from app.infrastructure.in_memory.store import InMemoryStore


class InMemoryPaymentLedgerRepo(PaymentLedgerRepo):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get_by_reference(self, reference: str) -> PaymentLedgerEntry | None:
        entry = self._store.ledger.get(reference)
        return copy.deepcopy(entry) if entry else None

    async def upsert(self, entry: PaymentLedgerEntry) -> None:
        self._store.ledger[entry.reference] = copy.deepcopy(entry)

    async def mark_status(
        self, reference: str, status: LedgerStatus, failure_reason: str | None = None
    ) -> bool:
        entry = self._store.ledger.get(reference)
        if entry is None:
            return False
        entry.status = status
        if failure_reason is not None:
            entry.failure_reason = failure_reason
        return True

    async def delete_by_reference(self, reference: str) -> int:
        return 1 if self._store.ledger.pop(reference, None) is not None else 0

    async def list_all(self) -> Sequence[PaymentLedgerEntry]:
        return [copy.deepcopy(e) for e in self._store.ledger.values()]
