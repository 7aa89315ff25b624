import copy
from dataclasses import dataclass, field

from app.application.interfaces.idempotency_repo import IdempotencyRecord
from app.domain.entities.booking import Booking
from app.domain.entities.inventory_unit import InventoryUnit
from app.domain.entities.payment_ledger_entry import PaymentLedgerEntry


@dataclass
class InMemoryStore:
    """Estado compartido por los repositorios in-memory de un mismo proceso."""

    inventory: dict[str, InventoryUnit] = field(default_factory=dict)
    bookings: dict[str, Booking] = field(default_factory=dict)
    ledger: dict[str, PaymentLedgerEntry] = field(default_factory=dict)
    idempotency: dict[tuple[str, str], IdempotencyRecord] = field(default_factory=dict)

    def snapshot(self) -> "InMemoryStore":
        return copy.deepcopy(self)

    def restore(self, snapshot: "InMemoryStore") -> None:
        self.inventory = snapshot.inventory
        self.bookings = snapshot.bookings
        self.ledger = snapshot.ledger
        self.idempotency = snapshot.idempotency

    def clear(self) -> None:
        self.inventory.clear()
        self.bookings.clear()
        self.ledger.clear()
        self.idempotency.clear()
