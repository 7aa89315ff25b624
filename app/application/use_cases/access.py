"""Reglas de acceso a bookings por rol."""

from app.application.interfaces.principal import ADMIN, AIRLINE_STAFF, HOTEL_STAFF, Principal
from app.domain.entities.booking import Booking, BookingKind
from app.domain.errors import ForbiddenError

_STAFF_ROLES = {
    BookingKind.FLIGHT: (ADMIN, AIRLINE_STAFF),
    BookingKind.HOTEL: (ADMIN, HOTEL_STAFF),
}


def staff_roles_for(kind: BookingKind) -> tuple[str, ...]:
    return _STAFF_ROLES[kind]


def ensure_can_manage(principal: Principal, booking: Booking) -> None:
    """El dueño del booking o el staff del tipo correspondiente."""
    if booking.is_owned_by(principal.user_id):
        return
    if principal.has_any_role(*staff_roles_for(booking.kind)):
        return
    raise ForbiddenError()
