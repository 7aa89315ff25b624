import itertools
from datetime import datetime, timezone

from app.application.interfaces.payment_gateway import (
    GatewayOutcome,
    PaymentSession,
    WebhookEvent,
)
from app.domain.errors import UpstreamUnavailableError
from app.domain.value_objects.money import Money
from app.infrastructure.gateways.paystack_gateway import parse_event, sign_payload, verify_signature


class StubPaymentGateway:
    """
    Gateway en memoria para desarrollo y tests.

    Referencias deterministas, resultados de verificación programables y la
    misma verificación HMAC de webhooks que el adaptador real.
    """

    def __init__(self, webhook_secret: str = "stub-webhook-secret") -> None:
        self.webhook_secret = webhook_secret
        self.sessions: dict[str, PaymentSession] = {}
        self.outcomes: dict[str, GatewayOutcome] = {}
        self.unavailable = False
        self.initiate_calls = 0
        self.verify_calls = 0
        self._sequence = itertools.count(1)

    async def initiate(
        self,
        *,
        booking_id: str,
        amount: Money,
        payer_email: str,
        reference_prefix: str,
        metadata: dict | None = None,
    ) -> PaymentSession:
        self.initiate_calls += 1
        if self.unavailable:
            raise UpstreamUnavailableError("initiate", "stub gateway offline")

        reference = f"{reference_prefix}-{next(self._sequence):08d}-stub"
        session = PaymentSession(
            reference=reference,
            amount=amount,
            amount_minor_units=amount.to_minor_units(),
            payer_email=payer_email,
            authorization_url=f"https://checkout.stub.local/{reference}",
            access_code=f"ac_{reference.lower()}",
        )
        self.sessions[reference] = session
        return session

    async def verify(self, reference: str) -> GatewayOutcome:
        self.verify_calls += 1
        if self.unavailable:
            raise UpstreamUnavailableError("verify", "stub gateway offline")

        if reference in self.outcomes:
            return self.outcomes[reference]
        session = self.sessions.get(reference)
        if session is None:
            return GatewayOutcome(
                status="failure",
                reference=reference,
                amount_minor_units=0,
                currency="",
                gateway_response="Transaction reference not found",
            )
        return GatewayOutcome(
            status="success",
            reference=reference,
            amount_minor_units=session.amount_minor_units,
            currency=session.currency,
            paid_at=datetime.now(timezone.utc),
            channel="card",
            gateway_response="Approved",
        )

    def script_outcome(
        self,
        reference: str,
        status: str = "success",
        amount_minor_units: int | None = None,
        currency: str = "NGN",
        gateway_response: str | None = None,
    ) -> None:
        """Fija lo que devolverá verify() para una referencia."""
        session = self.sessions.get(reference)
        if amount_minor_units is None:
            amount_minor_units = session.amount_minor_units if session else 0
        self.outcomes[reference] = GatewayOutcome(
            status=status,
            reference=reference,
            amount_minor_units=amount_minor_units,
            currency=currency,
            paid_at=datetime.now(timezone.utc) if status == "success" else None,
            channel="card",
            gateway_response=gateway_response or ("Approved" if status == "success" else "Declined"),
        )

    def session_for(self, reference: str, amount: Money, payer_email: str) -> PaymentSession:
        return PaymentSession(
            reference=reference,
            amount=amount,
            amount_minor_units=amount.to_minor_units(),
            payer_email=payer_email,
        )

    def sign(self, raw_body: bytes) -> str:
        return sign_payload(self.webhook_secret, raw_body)

    def parse_webhook(self, raw_body: bytes, signature: str | None) -> WebhookEvent:
        verify_signature(self.webhook_secret, raw_body, signature)
        return parse_event(raw_body)
