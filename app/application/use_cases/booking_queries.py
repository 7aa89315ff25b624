from typing import Sequence

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.payment_ledger_repo import PaymentLedgerRepo
from app.application.interfaces.principal import Principal
from app.application.use_cases.access import ensure_can_manage
from app.domain.entities.booking import Booking
from app.domain.entities.payment_ledger_entry import PaymentLedgerEntry
from app.domain.errors import BookingNotFoundError


class GetBookingUseCase:
    def __init__(self, booking_repo: BookingRepo) -> None:
        self._booking_repo = booking_repo

    async def execute(self, booking_id: str, principal: Principal) -> Booking:
        booking = await self._booking_repo.get(booking_id)
        if booking is None:
            raise BookingNotFoundError(booking_id)
        ensure_can_manage(principal, booking)
        return booking


class ListBookingsUseCase:
    def __init__(self, booking_repo: BookingRepo) -> None:
        self._booking_repo = booking_repo

    async def for_user(self, principal: Principal) -> Sequence[Booking]:
        return await self._booking_repo.list_by_user(principal.user_id)

    async def all(self) -> Sequence[Booking]:
        return await self._booking_repo.list_all()


class ListPaymentsUseCase:
    def __init__(self, payment_ledger_repo: PaymentLedgerRepo) -> None:
        self._payment_ledger_repo = payment_ledger_repo

    async def execute(self) -> Sequence[PaymentLedgerEntry]:
        return await self._payment_ledger_repo.list_all()
