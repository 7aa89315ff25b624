import logging

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.payment_gateway import PaymentGateway
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.settle_payment import SettlePaymentUseCase
from app.domain.settlement import SettlementOutcome

CHARGE_SUCCESS = "charge.success"
CHARGE_FAILED = "charge.failed"

_OUTCOMES = {
    CHARGE_SUCCESS: SettlementOutcome.SUCCESS,
    CHARGE_FAILED: SettlementOutcome.FAILURE,
}


class HandleGatewayWebhookUseCase:
    """
    Disparador asíncrono: notificación firmada del gateway.

    Cualquier evento autenticado se reconoce (200) aunque no se aplique, para
    que el gateway no lo reintente indefinidamente.
    """

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

    async def execute(self, raw_body: bytes, signature: str | None) -> str:
        event = self._payment_gateway.parse_webhook(raw_body, signature)

        outcome = _OUTCOMES.get(event.event_type)
        if outcome is None:
            self._logger.info(
                "Webhook event ignored",
                extra={"event_type": event.event_type, "reference": event.reference},
            )
            return "ignored"

        async with self._transaction_manager.start():
            booking = await self._booking_repo.find_by_reference(event.reference)
        if booking is None:
            self._logger.warning(
                "Webhook for unknown reference",
                extra={"event_type": event.event_type, "reference": event.reference},
            )
            return "unknown_reference"

        settled = await self._settle_payment.execute(
            booking.kind,
            booking.id,
            event.reference,
            event.amount_minor_units,
            outcome,
            event,
        )
        if settled is None:
            return "unknown_reference"
        return "processed"
