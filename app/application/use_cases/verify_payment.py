import logging

from app.api.schemas.payments import VerifyPaymentRequest
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.payment_gateway import PaymentGateway
from app.application.interfaces.principal import Principal
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.access import ensure_can_manage
from app.application.use_cases.settle_payment import SettlePaymentUseCase
from app.domain.entities.booking import Booking
from app.domain.errors import (
    AmountMismatchError,
    BookingNotFoundError,
    PaymentFailedError,
    PaymentNotConfirmedError,
    ReferenceMismatchError,
)
from app.domain.settlement import SettlementOutcome


class VerifyPaymentUseCase:
    """Disparador síncrono: el cliente pide verificar su pago."""

    def __init__(
        self,
        booking_repo: BookingRepo,
        payment_gateway: PaymentGateway,
        settle_payment: SettlePaymentUseCase,
        transaction_manager: TransactionManager,
    ) -> None:
        self._booking_repo = booking_repo
        self._payment_gateway = payment_gateway
        self._settle_payment = settle_payment
        self._transaction_manager = transaction_manager
        self._logger = logging.getLogger(__name__)

    async def execute(self, request: VerifyPaymentRequest, principal: Principal) -> Booking:
        async with self._transaction_manager.start():
            booking = await self._booking_repo.get(request.booking_id)
        if booking is None or booking.kind != request.booking_type:
            raise BookingNotFoundError(request.booking_id)
        ensure_can_manage(principal, booking)

        # UpstreamUnavailableError se propaga: el booking no se toca.
        result = await self._payment_gateway.verify(request.reference)

        if not result.succeeded:
            settlement = await self._settle_payment.execute(
                booking.kind,
                booking.id,
                request.reference,
                result.amount_minor_units,
                SettlementOutcome.FAILURE,
                result,
            )
            self._logger.info(
                "Gateway reported payment failure",
                extra={"booking_id": booking.id, "reference": request.reference},
            )
            if settlement is not None and settlement.decision.integrity_error == ReferenceMismatchError.code:
                raise ReferenceMismatchError(
                    booking.id, settlement.booking.gateway_reference, request.reference
                )
            raise PaymentFailedError(request.reference, result.gateway_response)

        settlement = await self._settle_payment.execute(
            booking.kind,
            booking.id,
            request.reference,
            result.amount_minor_units,
            SettlementOutcome.SUCCESS,
            result,
        )
        if settlement is None:
            raise PaymentNotConfirmedError(request.booking_id, reason="booking vanished during settlement")

        settled, decision = settlement.booking, settlement.decision
        if decision.integrity_error == ReferenceMismatchError.code:
            raise ReferenceMismatchError(settled.id, settled.gateway_reference, request.reference)
        if decision.confirmed:
            return settled
        if decision.integrity_error == AmountMismatchError.code:
            raise AmountMismatchError(
                settled.id, settled.expected_minor_units, result.amount_minor_units
            )
        # p. ej. pago exitoso sobre un booking ya cancelado: queda para reembolso.
        raise PaymentNotConfirmedError(
            settled.id,
            reason=f"booking is {settled.booking_status.value}/{settled.payment_status.value}",
        )
