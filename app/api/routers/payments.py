from fastapi import APIRouter, Depends, Request, status

from app.api.dependencies import get_use_cases
from app.api.schemas.bookings import BookingOut
from app.api.schemas.payments import VerifyPaymentRequest, WebhookAck
from app.api.security import get_current_principal
from app.application.interfaces.principal import Principal
from app.infrastructure.gateways.paystack_gateway import SIGNATURE_HEADER

router = APIRouter()


@router.post("/payments/verify", response_model=BookingOut, status_code=status.HTTP_200_OK)
async def verify_payment(
    payload: VerifyPaymentRequest,
    principal: Principal = Depends(get_current_principal),
    use_cases=Depends(get_use_cases),
) -> BookingOut:
    booking = await use_cases["verify_payment"].execute(request=payload, principal=principal)
    return BookingOut.from_entity(booking)


@router.post("/payments/webhook", response_model=WebhookAck, status_code=status.HTTP_200_OK)
async def payment_webhook(
    request: Request,
    use_cases=Depends(get_use_cases),
) -> WebhookAck:
    raw_body = await request.body()
    signature = request.headers.get(SIGNATURE_HEADER)
    result = await use_cases["handle_webhook"].execute(raw_body=raw_body, signature=signature)
    return WebhookAck(status=result)
