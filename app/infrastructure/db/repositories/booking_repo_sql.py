from decimal import Decimal
from typing import Any, Sequence

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.booking_repo import BookingRepo
from app.domain.entities.booking import (
    Booking,
    BookingKind,
    BookingStatus,
    Passenger,
    PaymentStatus,
    describe_itinerary,
    itinerary_from_dict,
)
from app.domain.errors import BookingNotFoundError, OptimisticLockError
from app.infrastructure.db.tables import bookings


def _to_entity(row: Any) -> Booking:
    return Booking(
        id=row["id"],
        user_id=row["user_id"],
        kind=BookingKind(row["kind"]),
        itinerary=itinerary_from_dict(row["itinerary"]),
        quantity=row["quantity"],
        total_price=Decimal(str(row["total_price"])),
        currency_code=row["currency_code"],
        booking_status=BookingStatus(row["booking_status"]),
        payment_status=PaymentStatus(row["payment_status"]),
        gateway_reference=row["gateway_reference"],
        passengers=[Passenger.from_dict(p) for p in (row["passengers"] or [])],
        lock_version=row["lock_version"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


def _values(booking: Booking) -> dict[str, Any]:
    return {
        "user_id": booking.user_id,
        "kind": booking.kind.value,
        "itinerary": describe_itinerary(booking.itinerary),
        "quantity": booking.quantity,
        "total_price": booking.total_price,
        "currency_code": booking.currency_code,
        "booking_status": booking.booking_status.value,
        "payment_status": booking.payment_status.value,
        "gateway_reference": booking.gateway_reference,
        "passengers": [p.to_dict() for p in booking.passengers],
        "lock_version": booking.lock_version,
        "updated_at": booking.updated_at,
    }


class BookingRepoSQL(BookingRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, booking: Booking) -> None:
        stmt = insert(bookings).values(
            id=booking.id, created_at=booking.created_at, **_values(booking)
        )
        await self._session.execute(stmt)

    async def get(self, booking_id: str) -> Booking | None:
        stmt = select(bookings).where(bookings.c.id == booking_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return _to_entity(row) if row else None

    async def get_for_update(self, booking_id: str) -> Booking | None:
        stmt = select(bookings).where(bookings.c.id == booking_id).with_for_update()
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return _to_entity(row) if row else None

    async def find_by_reference(self, reference: str) -> Booking | None:
        stmt = select(bookings).where(bookings.c.gateway_reference == reference).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return _to_entity(row) if row else None

    async def save(self, booking: Booking, expected_lock_version: int) -> None:
        stmt = (
            update(bookings)
            .where(
                bookings.c.id == booking.id,
                bookings.c.lock_version == expected_lock_version,
            )
            .values(**_values(booking))
        )
        result = await self._session.execute(stmt)
        if result.rowcount == 1:
            return

        current = await self._session.execute(
            select(bookings.c.lock_version).where(bookings.c.id == booking.id)
        )
        actual = current.scalar()
        if actual is None:
            raise BookingNotFoundError(booking.id)
        raise OptimisticLockError(booking.id, expected_lock_version, actual)

    async def delete(self, booking_id: str) -> bool:
        result = await self._session.execute(delete(bookings).where(bookings.c.id == booking_id))
        return result.rowcount > 0

    async def list_by_user(self, user_id: str) -> Sequence[Booking]:
        stmt = (
            select(bookings)
            .where(bookings.c.user_id == user_id)
            .order_by(bookings.c.created_at.desc())
        )
        result = await self._session.execute(stmt)
        return [_to_entity(row) for row in result.mappings().all()]

    async def list_all(self) -> Sequence[Booking]:
        result = await self._session.execute(select(bookings).order_by(bookings.c.created_at.desc()))
        return [_to_entity(row) for row in result.mappings().all()]
