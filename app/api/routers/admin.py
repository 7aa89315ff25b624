"""Operaciones administrativas: inventario, estados y auditoría de pagos."""

from fastapi import APIRouter, Depends, Response, status

from app.api.dependencies import get_use_cases
from app.api.schemas.bookings import BookingOut, UpdateBookingStatusRequest
from app.api.schemas.inventory import CreateInventoryUnitRequest, InventoryUnitOut
from app.api.schemas.payments import PaymentLedgerOut
from app.api.security import require_roles
from app.application.interfaces.principal import ADMIN

router = APIRouter(prefix="/admin", dependencies=[Depends(require_roles(ADMIN))])


@router.post(
    "/inventory",
    response_model=InventoryUnitOut,
    status_code=status.HTTP_201_CREATED,
)
async def create_inventory_unit(
    payload: CreateInventoryUnitRequest,
    use_cases=Depends(get_use_cases),
) -> InventoryUnitOut:
    unit = await use_cases["create_inventory_unit"].execute(payload)
    return InventoryUnitOut.from_entity(unit)


@router.delete("/inventory/{unit_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_inventory_unit(
    unit_id: str,
    use_cases=Depends(get_use_cases),
) -> Response:
    await use_cases["delete_inventory_unit"].execute(unit_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/bookings", response_model=list[BookingOut])
async def list_all_bookings(use_cases=Depends(get_use_cases)) -> list[BookingOut]:
    bookings = await use_cases["list_bookings"].all()
    return [BookingOut.from_entity(b) for b in bookings]


@router.put("/bookings/{booking_id}/status", response_model=BookingOut)
async def update_booking_status(
    booking_id: str,
    payload: UpdateBookingStatusRequest,
    use_cases=Depends(get_use_cases),
) -> BookingOut:
    booking = await use_cases["update_booking_status"].execute(booking_id, payload)
    return BookingOut.from_entity(booking)


@router.delete("/bookings/{booking_id}", status_code=status.HTTP_204_NO_CONTENT)
async def purge_booking(
    booking_id: str,
    use_cases=Depends(get_use_cases),
) -> Response:
    """Borrado duro; libera inventario si el booking aún lo retenía."""
    await use_cases["purge_booking"].execute(booking_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/payments", response_model=list[PaymentLedgerOut])
async def list_payments(use_cases=Depends(get_use_cases)) -> list[PaymentLedgerOut]:
    entries = await use_cases["list_payments"].execute()
    return [PaymentLedgerOut.from_entity(e) for e in entries]
