from typing import Sequence

from app.domain.entities.booking import Booking


class BookingRepo:
    async def add(self, booking: Booking) -> None:
        raise NotImplementedError

    async def get(self, booking_id: str) -> Booking | None:
        raise NotImplementedError

    async def get_for_update(self, booking_id: str) -> Booking | None:
        """Carga el booking bloqueando la fila hasta el fin de la transacción."""
        raise NotImplementedError

    async def find_by_reference(self, reference: str) -> Booking | None:
        raise NotImplementedError

    async def save(self, booking: Booking, expected_lock_version: int) -> None:
        """
        Persiste el booking.

        Raises:
            OptimisticLockError: Si la versión almacenada no es la esperada.
        """
        raise NotImplementedError

    async def delete(self, booking_id: str) -> bool:
        raise NotImplementedError

    async def list_by_user(self, user_id: str) -> Sequence[Booking]:
        raise NotImplementedError

    async def list_all(self) -> Sequence[Booking]:
        raise NotImplementedError
