import logging

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.inventory_repo import InventoryRepo
from app.application.interfaces.payment_ledger_repo import PaymentLedgerRepo
from app.application.interfaces.principal import Principal
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.access import ensure_can_manage
from app.domain.entities.booking import Booking
from app.domain.entities.payment_ledger_entry import LedgerStatus
from app.domain.errors import AlreadyCancelledError, BookingNotFoundError

logger = logging.getLogger(__name__)


async def release_booking_units(inventory_repo: InventoryRepo, booking: Booking) -> None:
    """
    Devuelve al inventario las unidades que retiene el booking.

    Una unidad que ya no existe se registra y se omite; la operación que
    llama debe poder terminar igual.
    """
    for unit_id in booking.unit_ids:
        restored = await inventory_repo.release(unit_id, booking.quantity)
        if restored is None:
            logger.warning(
                "Inventory unit missing, restoration skipped",
                extra={"booking_id": booking.id, "unit_id": unit_id},
            )
        elif restored < booking.quantity:
            logger.warning(
                "Inventory restoration clamped to capacity",
                extra={
                    "booking_id": booking.id,
                    "unit_id": unit_id,
                    "requested": booking.quantity,
                    "restored": restored,
                },
            )


class CancelBookingUseCase:
    def __init__(
        self,
        inventory_repo: InventoryRepo,
        booking_repo: BookingRepo,
        payment_ledger_repo: PaymentLedgerRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._inventory_repo = inventory_repo
        self._booking_repo = booking_repo
        self._payment_ledger_repo = payment_ledger_repo
        self._transaction_manager = transaction_manager
        self._clock = clock

    async def execute(self, booking_id: str, principal: Principal) -> Booking:
        async def cancel() -> Booking:
            async with self._transaction_manager.start():
                booking = await self._booking_repo.get_for_update(booking_id)
                if booking is None:
                    raise BookingNotFoundError(booking_id)
                ensure_can_manage(principal, booking)
                if booking.is_cancelled:
                    raise AlreadyCancelledError(booking_id)

                await release_booking_units(self._inventory_repo, booking)

                was_paid = booking.is_paid
                expected_version = booking.lock_version
                booking.cancel()
                booking.updated_at = self._clock.now()
                await self._booking_repo.save(booking, expected_lock_version=expected_version)

                if was_paid and booking.gateway_reference:
                    await self._payment_ledger_repo.mark_status(
                        booking.gateway_reference, LedgerStatus.REFUNDED
                    )
                return booking

        booking = await self._transaction_manager.run(cancel)
        logger.info(
            "Booking cancelled",
            extra={
                "booking_id": booking.id,
                "payment_status": booking.payment_status.value,
                "cancelled_by": principal.user_id,
            },
        )
        return booking
