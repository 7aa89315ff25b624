"""Traducción de errores de dominio a respuestas HTTP."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from app.domain.errors import (
    AmountMismatchError,
    DomainError,
    PaymentNotConfirmedError,
    ReferenceMismatchError,
)

logger = logging.getLogger(__name__)

SUPPORT_MESSAGE = "Payment could not be confirmed, please contact support"

STATUS_BY_CODE: dict[str, int] = {
    "VALIDATION_ERROR": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "INVALID_MONEY": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "INVALID_BOOKING_STATUS": status.HTTP_422_UNPROCESSABLE_ENTITY,
    "INVALID_ROUTE": status.HTTP_400_BAD_REQUEST,
    "INVALID_WEBHOOK_SIGNATURE": status.HTTP_400_BAD_REQUEST,
    "PAYMENT_FAILED": status.HTTP_400_BAD_REQUEST,
    PaymentNotConfirmedError.code: status.HTTP_400_BAD_REQUEST,
    ReferenceMismatchError.code: status.HTTP_400_BAD_REQUEST,
    AmountMismatchError.code: status.HTTP_400_BAD_REQUEST,
    "FORBIDDEN": status.HTTP_403_FORBIDDEN,
    "BOOKING_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INVENTORY_UNIT_NOT_FOUND": status.HTTP_404_NOT_FOUND,
    "INSUFFICIENT_INVENTORY": status.HTTP_409_CONFLICT,
    "ALREADY_CANCELLED": status.HTTP_409_CONFLICT,
    "IDEMPOTENCY_CONFLICT": status.HTTP_409_CONFLICT,
    "OPTIMISTIC_LOCK_ERROR": status.HTTP_409_CONFLICT,
    "REFERENCE_ALREADY_ASSIGNED": status.HTTP_409_CONFLICT,
    "UPSTREAM_UNAVAILABLE": status.HTTP_503_SERVICE_UNAVAILABLE,
}

# La causa precisa queda en logs y ledger; el cliente sólo ve el mensaje genérico.
INTEGRITY_CODES = {
    ReferenceMismatchError.code,
    AmountMismatchError.code,
    PaymentNotConfirmedError.code,
}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    status_code = STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
    detail = SUPPORT_MESSAGE if exc.code in INTEGRITY_CODES else exc.message

    log = logger.warning if status_code >= 500 or exc.code in INTEGRITY_CODES else logger.info
    log(
        "Domain error",
        extra={
            "code": exc.code,
            "error": exc.message,
            "path": request.url.path,
            "method": request.method,
        },
    )
    return JSONResponse(status_code=status_code, content={"detail": detail, "code": exc.code})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
