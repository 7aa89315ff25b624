import logging

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.inventory_repo import InventoryRepo
from app.application.interfaces.payment_ledger_repo import PaymentLedgerRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.cancel_booking import release_booking_units
from app.domain.errors import BookingNotFoundError


class PurgeBookingUseCase:
    """Borrado administrativo; si el booking aún retenía unidades las devuelve."""

    def __init__(
        self,
        inventory_repo: InventoryRepo,
        booking_repo: BookingRepo,
        payment_ledger_repo: PaymentLedgerRepo,
        transaction_manager: TransactionManager,
    ) -> None:
        self._inventory_repo = inventory_repo
        self._booking_repo = booking_repo
        self._payment_ledger_repo = payment_ledger_repo
        self._transaction_manager = transaction_manager
        self._logger = logging.getLogger(__name__)

    async def execute(self, booking_id: str) -> None:
        async def purge() -> None:
            async with self._transaction_manager.start():
                booking = await self._booking_repo.get_for_update(booking_id)
                if booking is None:
                    raise BookingNotFoundError(booking_id)
                if booking.holds_inventory:
                    await release_booking_units(self._inventory_repo, booking)
                if booking.gateway_reference:
                    await self._payment_ledger_repo.delete_by_reference(booking.gateway_reference)
                await self._booking_repo.delete(booking_id)

        await self._transaction_manager.run(purge)
        self._logger.info("Booking purged", extra={"booking_id": booking_id})
