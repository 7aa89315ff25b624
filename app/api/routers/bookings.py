from fastapi import APIRouter, Depends, Header, HTTPException, status

from app.api.dependencies import get_use_cases
from app.api.schemas.bookings import (
    BookingOut,
    FlightBookingRequest,
    HotelBookingRequest,
    PaymentSessionOut,
    PaymentSessionRequest,
    ReserveBookingResponse,
)
from app.api.security import get_current_principal
from app.application.interfaces.principal import Principal

router = APIRouter()


def _require_idem_key(idem_key: str | None) -> str:
    if not idem_key:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Idempotency-Key header is required",
        )
    return idem_key


@router.post(
    "/bookings/flights",
    response_model=ReserveBookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def reserve_flight(
    payload: FlightBookingRequest,
    idem_key: str = Header(default=None, convert_underscores=False, alias="Idempotency-Key"),
    principal: Principal = Depends(get_current_principal),
    use_cases=Depends(get_use_cases),
) -> ReserveBookingResponse:
    return await use_cases["reserve_booking"].execute(
        request=payload, principal=principal, idem_key=_require_idem_key(idem_key)
    )


@router.post(
    "/bookings/hotels",
    response_model=ReserveBookingResponse,
    status_code=status.HTTP_201_CREATED,
)
async def reserve_hotel(
    payload: HotelBookingRequest,
    idem_key: str = Header(default=None, convert_underscores=False, alias="Idempotency-Key"),
    principal: Principal = Depends(get_current_principal),
    use_cases=Depends(get_use_cases),
) -> ReserveBookingResponse:
    return await use_cases["reserve_booking"].execute(
        request=payload, principal=principal, idem_key=_require_idem_key(idem_key)
    )


@router.post(
    "/bookings/{booking_id}/payment-session",
    response_model=ReserveBookingResponse,
    status_code=status.HTTP_200_OK,
)
async def start_payment_session(
    booking_id: str,
    payload: PaymentSessionRequest | None = None,
    principal: Principal = Depends(get_current_principal),
    use_cases=Depends(get_use_cases),
) -> ReserveBookingResponse:
    booking, session = await use_cases["start_payment_session"].execute(
        booking_id, principal, payer_email=payload.payer_email if payload else None
    )
    return ReserveBookingResponse(
        booking=BookingOut.from_entity(booking),
        payment=PaymentSessionOut.from_session(session),
    )


@router.get("/bookings/mine", response_model=list[BookingOut])
async def list_my_bookings(
    principal: Principal = Depends(get_current_principal),
    use_cases=Depends(get_use_cases),
) -> list[BookingOut]:
    bookings = await use_cases["list_bookings"].for_user(principal)
    return [BookingOut.from_entity(b) for b in bookings]


@router.get("/bookings/{booking_id}", response_model=BookingOut)
async def get_booking(
    booking_id: str,
    principal: Principal = Depends(get_current_principal),
    use_cases=Depends(get_use_cases),
) -> BookingOut:
    booking = await use_cases["get_booking"].execute(booking_id, principal)
    return BookingOut.from_entity(booking)


@router.post("/bookings/{booking_id}/cancel", response_model=BookingOut)
async def cancel_booking(
    booking_id: str,
    principal: Principal = Depends(get_current_principal),
    use_cases=Depends(get_use_cases),
) -> BookingOut:
    booking = await use_cases["cancel_booking"].execute(booking_id, principal)
    return BookingOut.from_entity(booking)
