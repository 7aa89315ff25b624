import logging
from dataclasses import dataclass
from datetime import datetime

from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.payment_gateway import GatewayOutcome, WebhookEvent
from app.application.interfaces.payment_ledger_repo import PaymentLedgerRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.entities.booking import Booking, BookingKind, PaymentStatus
from app.domain.entities.payment_ledger_entry import LedgerStatus, PaymentLedgerEntry
from app.domain.settlement import (
    SettlementAction,
    SettlementDecision,
    SettlementOutcome,
    SettlementState,
    reduce_settlement,
)
from app.domain.value_objects.money import Money

SettlementDetails = GatewayOutcome | WebhookEvent


@dataclass(frozen=True)
class SettlementResult:
    """Booking tras la conciliación y la decisión del reductor que lo dejó así."""

    booking: Booking
    decision: SettlementDecision


class SettlePaymentUseCase:
    """
    Aplica un resultado de pago a un booking exactamente una vez.

    Lo invocan la verificación del cliente y el webhook; la decisión viene del
    reductor puro `reduce_settlement`, y la fila del booking queda bloqueada
    durante toda la transacción.
    """

    def __init__(
        self,
        booking_repo: BookingRepo,
        payment_ledger_repo: PaymentLedgerRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
    ) -> None:
        self._booking_repo = booking_repo
        self._payment_ledger_repo = payment_ledger_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        kind: BookingKind | None,
        booking_id: str,
        reference: str,
        amount_minor_units: int,
        outcome: SettlementOutcome,
        details: SettlementDetails | None = None,
    ) -> SettlementResult | None:
        async def settle() -> SettlementResult | None:
            async with self._transaction_manager.start():
                return await self._settle(
                    kind, booking_id, reference, amount_minor_units, outcome, details
                )

        return await self._transaction_manager.run(settle)

    async def _settle(
        self,
        kind: BookingKind | None,
        booking_id: str,
        reference: str,
        amount_minor_units: int,
        outcome: SettlementOutcome,
        details: SettlementDetails | None,
    ) -> SettlementResult | None:
        booking = await self._booking_repo.get_for_update(booking_id)
        if booking is None or (kind is not None and booking.kind != kind):
            self._logger.warning(
                "Settlement for unknown booking ignored",
                extra={"booking_id": booking_id, "reference": reference},
            )
            return None

        expected_minor = booking.expected_minor_units
        decision = reduce_settlement(
            SettlementState(booking.booking_status, booking.payment_status),
            outcome,
            reference_matches=booking.gateway_reference == reference,
            amount_matches=amount_minor_units == expected_minor,
        )

        if decision.action == SettlementAction.REJECTED:
            self._logger.warning(
                "Reference mismatch, settlement rejected",
                extra={
                    "booking_id": booking_id,
                    "reference": reference,
                    "stored_reference": booking.gateway_reference,
                },
            )
            return SettlementResult(booking, decision)

        if decision.integrity_error:
            self._logger.warning(
                "Amount mismatch, settlement treated as failure",
                extra={
                    "booking_id": booking_id,
                    "reference": reference,
                    "expected_minor_units": expected_minor,
                    "received_minor_units": amount_minor_units,
                },
            )

        if decision.mutates:
            expected_version = booking.lock_version
            booking.transition_to(decision.booking_status, decision.payment_status)
            booking.updated_at = self._clock.now()
            await self._booking_repo.save(booking, expected_lock_version=expected_version)

        if decision.mutates or (
            decision.integrity_error and booking.payment_status == PaymentStatus.FAILED
        ):
            await self._record_ledger(booking, decision, reference, amount_minor_units, details)

        if decision.refund_required:
            self._logger.warning(
                "Payment after cancellation, refund required",
                extra={"booking_id": booking_id, "reference": reference},
            )

        self._logger.info(
            "Settlement applied",
            extra={
                "booking_id": booking_id,
                "reference": reference,
                "outcome": outcome.value,
                "action": decision.action.value,
                "booking_status": booking.booking_status.value,
                "payment_status": booking.payment_status.value,
            },
        )
        return SettlementResult(booking, decision)

    async def _record_ledger(
        self,
        booking: Booking,
        decision: SettlementDecision,
        reference: str,
        amount_minor_units: int,
        details: SettlementDetails | None,
    ) -> None:
        if decision.action == SettlementAction.APPLY_SUCCESS:
            status = LedgerStatus.SUCCEEDED
            failure_reason = None
            amount = booking.total.amount
            paid_at: datetime | None = (details.paid_at if details else None) or self._clock.now()
        else:
            status = LedgerStatus.FAILED
            amount = Money.from_minor_units(amount_minor_units, booking.currency_code).amount
            paid_at = None
            if decision.integrity_error:
                failure_reason = (
                    f"{decision.integrity_error}: expected {booking.expected_minor_units}, "
                    f"received {amount_minor_units}"
                )
            else:
                failure_reason = getattr(details, "gateway_response", None) or "gateway reported failure"

        existing = await self._payment_ledger_repo.get_by_reference(reference)
        now = self._clock.now()
        await self._payment_ledger_repo.upsert(
            PaymentLedgerEntry(
                reference=reference,
                booking_id=booking.id,
                booking_kind=booking.kind.value,
                user_id=booking.user_id,
                amount=amount,
                currency_code=booking.currency_code,
                status=status,
                channel=details.channel if details else None,
                paid_at=paid_at,
                failure_reason=failure_reason,
                created_at=existing.created_at if existing else now,
                updated_at=now,
            )
        )
