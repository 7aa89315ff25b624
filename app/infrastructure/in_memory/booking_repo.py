import copy
from typing import Sequence

from app.application.interfaces.booking_repo import BookingRepo
from app.domain.entities.booking import Booking
from app.domain.errors import BookingNotFoundError, OptimisticLockError
from app.infrastructure.in_memory.store import InMemoryStore


class InMemoryBookingRepo(BookingRepo):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def add(self, booking: Booking) -> None:
        if booking.id in self._store.bookings:
            raise ValueError(f"Booking already exists: {booking.id}")
        if booking.gateway_reference and await self.find_by_reference(booking.gateway_reference):
            raise ValueError(f"Gateway reference already in use: {booking.gateway_reference}")
        self._store.bookings[booking.id] = copy.deepcopy(booking)

    async def get(self, booking_id: str) -> Booking | None:
        booking = self._store.bookings.get(booking_id)
        return copy.deepcopy(booking) if booking else None

    async def get_for_update(self, booking_id: str) -> Booking | None:
        # La exclusión la da el lock del transaction manager.
        return await self.get(booking_id)

    async def find_by_reference(self, reference: str) -> Booking | None:
        for booking in self._store.bookings.values():
            if booking.gateway_reference == reference:
                return copy.deepcopy(booking)
        return None

    async def save(self, booking: Booking, expected_lock_version: int) -> None:
        stored = self._store.bookings.get(booking.id)
        if stored is None:
            raise BookingNotFoundError(booking.id)
        if stored.lock_version != expected_lock_version:
            raise OptimisticLockError(booking.id, expected_lock_version, stored.lock_version)
        self._store.bookings[booking.id] = copy.deepcopy(booking)

    async def delete(self, booking_id: str) -> bool:
        return self._store.bookings.pop(booking_id, None) is not None

    async def list_by_user(self, user_id: str) -> Sequence[Booking]:
        return [
            copy.deepcopy(b)
            for b in self._store.bookings.values()
            if b.is_owned_by(user_id)
        ]

    async def list_all(self) -> Sequence[Booking]:
        return [copy.deepcopy(b) for b in self._store.bookings.values()]
