import logging

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.payment_gateway import PaymentGateway, PaymentSession
from app.application.interfaces.principal import Principal
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.access import ensure_can_manage
from app.domain.entities.booking import Booking
from app.domain.errors import (
    BookingNotFoundError,
    InvalidBookingStatusError,
    UpstreamUnavailableError,
    ValidationError,
)


class StartPaymentSessionUseCase:
    """
    Abre (o reconstruye) la sesión de pago de un booking.

    Si el booking ya tiene referencia la sesión se arma con ella sin llamar al
    gateway, así que reintentar es seguro.
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        payment_gateway: PaymentGateway,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._payment_gateway = payment_gateway
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        booking_id: str,
        principal: Principal,
        payer_email: str | None = None,
    ) -> tuple[Booking, PaymentSession]:
        email = payer_email or principal.email
        if not email:
            raise ValidationError("payer_email", "se requiere un email para el pago")

        async with self._transaction_manager.start():
            booking = await self._booking_repo.get(booking_id)
            if booking is None:
                raise BookingNotFoundError(booking_id)
            ensure_can_manage(principal, booking)
            if booking.is_cancelled:
                raise InvalidBookingStatusError(f"El booking {booking_id} está cancelado")

        if booking.gateway_reference:
            return booking, self._payment_gateway.session_for(
                booking.gateway_reference, booking.total, email
            )

        try:
            session = await self._payment_gateway.initiate(
                booking_id=booking.id,
                amount=booking.total,
                payer_email=email,
                reference_prefix=booking.reference_prefix,
                metadata={"booking_id": booking.id, "booking_type": booking.kind.value},
            )
        except UpstreamUnavailableError:
            self._logger.error(
                "Payment session could not be opened, booking left pending",
                extra={"booking_id": booking.id},
            )
            raise

        async def persist_reference() -> tuple[Booking, PaymentSession]:
            async with self._transaction_manager.start():
                locked = await self._booking_repo.get_for_update(booking_id)
                if locked is None:
                    raise BookingNotFoundError(booking_id)
                if locked.gateway_reference and locked.gateway_reference != session.reference:
                    # Otra petición concurrente ya fijó la referencia.
                    self._logger.warning(
                        "Discarding payment session, booking already has a reference",
                        extra={
                            "booking_id": booking_id,
                            "reference": locked.gateway_reference,
                            "discarded_reference": session.reference,
                        },
                    )
                    return locked, self._payment_gateway.session_for(
                        locked.gateway_reference, locked.total, email
                    )
                expected_version = locked.lock_version
                if locked.assign_reference(session.reference):
                    locked.updated_at = self._clock.now()
                    await self._booking_repo.save(locked, expected_lock_version=expected_version)
                return locked, session

        locked, final_session = await self._transaction_manager.run(persist_reference)
        self._logger.info(
            "Payment session opened",
            extra={"booking_id": booking_id, "reference": final_session.reference},
        )
        return locked, final_session
