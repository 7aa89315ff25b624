import logging

from app.api.schemas.bookings import UpdateBookingStatusRequest
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.inventory_repo import InventoryRepo
from app.application.interfaces.payment_ledger_repo import PaymentLedgerRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.cancel_booking import release_booking_units
from app.domain.entities.booking import Booking, BookingStatus, PaymentStatus
from app.domain.entities.payment_ledger_entry import LedgerStatus
from app.domain.errors import BookingNotFoundError, InvalidBookingStatusError, ValidationError

_LEDGER_STATUS = {
    PaymentStatus.PENDING: LedgerStatus.PENDING,
    PaymentStatus.COMPLETED: LedgerStatus.SUCCEEDED,
    PaymentStatus.FAILED: LedgerStatus.FAILED,
    PaymentStatus.REFUNDED: LedgerStatus.REFUNDED,
}


def _parse(enum_cls, field: str, value: str | None):
    if value is None:
        return None
    try:
        return enum_cls(value)
    except ValueError as exc:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(field, f"'{value}' no es válido ({allowed})") from exc


class UpdateBookingStatusUseCase:
    """
    Cambio administrativo de estados.

    Pasar a cancelled libera el inventario una sola vez; un booking cancelado
    no se reabre porque sus unidades ya fueron devueltas.
    """

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
        self._logger = logging.getLogger(__name__)

    async def execute(self, booking_id: str, request: UpdateBookingStatusRequest) -> Booking:
        new_booking_status = _parse(BookingStatus, "booking_status", request.booking_status)
        new_payment_status = _parse(PaymentStatus, "payment_status", request.payment_status)
        if new_booking_status is None and new_payment_status is None:
            raise ValidationError("booking_status", "se requiere al menos un estado")

        async def update() -> Booking:
            async with self._transaction_manager.start():
                booking = await self._booking_repo.get_for_update(booking_id)
                if booking is None:
                    raise BookingNotFoundError(booking_id)

                target_booking = new_booking_status or booking.booking_status
                target_payment = new_payment_status or booking.payment_status

                if booking.is_cancelled and target_booking != BookingStatus.CANCELLED:
                    raise InvalidBookingStatusError(
                        f"El booking {booking_id} está cancelado y no puede reabrirse"
                    )

                if target_booking == BookingStatus.CANCELLED and not booking.is_cancelled:
                    await release_booking_units(self._inventory_repo, booking)

                payment_changed = target_payment != booking.payment_status
                expected_version = booking.lock_version
                booking.transition_to(target_booking, target_payment)
                booking.updated_at = self._clock.now()
                await self._booking_repo.save(booking, expected_lock_version=expected_version)

                if payment_changed and booking.gateway_reference:
                    await self._payment_ledger_repo.mark_status(
                        booking.gateway_reference, _LEDGER_STATUS[target_payment]
                    )
                return booking

        booking = await self._transaction_manager.run(update)
        self._logger.info(
            "Booking status updated",
            extra={
                "booking_id": booking_id,
                "booking_status": booking.booking_status.value,
                "payment_status": booking.payment_status.value,
            },
        )
        return booking
