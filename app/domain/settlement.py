"""
Reductor de conciliación de pagos.

Función pura `(estado actual, resultado) -> decisión`. La invocan los dos
disparadores (verificación del cliente y webhook del gateway); como el éxito
es pegajoso y la comparación de monto siempre se resuelve hacia la falla, el
estado final no depende del orden de llegada.
"""

from dataclasses import dataclass
from enum import Enum

from app.domain.entities.booking import BookingStatus, PaymentStatus
from app.domain.errors import AmountMismatchError, ReferenceMismatchError


class SettlementOutcome(str, Enum):
    """Resultado reportado por el gateway."""

    SUCCESS = "success"
    FAILURE = "failure"


class SettlementAction(str, Enum):
    """Qué debe hacer el caso de uso con el booking."""

    APPLY_SUCCESS = "apply_success"
    APPLY_FAILURE = "apply_failure"
    NOOP = "noop"
    REJECTED = "rejected"


@dataclass(frozen=True)
class SettlementState:
    booking_status: BookingStatus
    payment_status: PaymentStatus


@dataclass(frozen=True)
class SettlementDecision:
    """
    Decisión del reductor.

    Attributes:
        action: Acción a aplicar.
        booking_status: Estado de booking resultante.
        payment_status: Estado de pago resultante.
        effective_outcome: Resultado tras la verificación de integridad.
        integrity_error: Código del error de integridad detectado, si hubo.
        refund_required: Pago exitoso recibido para un booking ya cancelado.
    """

    action: SettlementAction
    booking_status: BookingStatus
    payment_status: PaymentStatus
    effective_outcome: SettlementOutcome | None = None
    integrity_error: str | None = None
    refund_required: bool = False

    @property
    def mutates(self) -> bool:
        return self.action in (SettlementAction.APPLY_SUCCESS, SettlementAction.APPLY_FAILURE)

    @property
    def confirmed(self) -> bool:
        return (
            self.booking_status == BookingStatus.CONFIRMED
            and self.payment_status == PaymentStatus.COMPLETED
        )


_SETTLED_PAYMENTS = (PaymentStatus.COMPLETED, PaymentStatus.REFUNDED)


def reduce_settlement(
    state: SettlementState,
    outcome: SettlementOutcome,
    *,
    reference_matches: bool,
    amount_matches: bool,
) -> SettlementDecision:
    """
    Calcula la transición de un booking ante un resultado de pago.

    Reglas:
    - Referencia distinta: se rechaza sin mutar.
    - Monto distinto: se trata como falla, sin importar el resultado pedido.
    - Éxito sobre un pago ya completado (o reembolsado): no-op.
    - Falla sobre un pago ya completado (o reembolsado): no-op, nunca degrada.
    - Un éxito tardío sobre un booking cancelado completa el pago pero no
      reconfirma el booking; queda marcado para reembolso.
    """
    unchanged = (state.booking_status, state.payment_status)

    if not reference_matches:
        return SettlementDecision(
            SettlementAction.REJECTED, *unchanged, integrity_error=ReferenceMismatchError.code
        )

    integrity_error = None if amount_matches else AmountMismatchError.code
    effective = outcome if amount_matches else SettlementOutcome.FAILURE

    if state.payment_status in _SETTLED_PAYMENTS:
        return SettlementDecision(
            SettlementAction.NOOP,
            *unchanged,
            effective_outcome=effective,
            integrity_error=integrity_error,
        )

    cancelled = state.booking_status == BookingStatus.CANCELLED

    if effective == SettlementOutcome.SUCCESS:
        return SettlementDecision(
            SettlementAction.APPLY_SUCCESS,
            BookingStatus.CANCELLED if cancelled else BookingStatus.CONFIRMED,
            PaymentStatus.COMPLETED,
            effective_outcome=effective,
            refund_required=cancelled,
        )

    target_booking = BookingStatus.CANCELLED if cancelled else BookingStatus.PENDING
    if (target_booking, PaymentStatus.FAILED) == unchanged:
        return SettlementDecision(
            SettlementAction.NOOP,
            *unchanged,
            effective_outcome=effective,
            integrity_error=integrity_error,
        )

    return SettlementDecision(
        SettlementAction.APPLY_FAILURE,
        target_booking,
        PaymentStatus.FAILED,
        effective_outcome=effective,
        integrity_error=integrity_error,
    )
