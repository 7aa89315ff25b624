from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Protocol

from app.domain.value_objects.money import Money


@dataclass(frozen=True)
class PaymentSession:
    """Datos que el cliente necesita para completar el pago con el SDK del gateway."""

    reference: str
    amount: Money
    amount_minor_units: int
    payer_email: str
    authorization_url: str | None = None
    access_code: str | None = None

    @property
    def currency(self) -> str:
        return self.amount.currency_code


@dataclass(frozen=True)
class GatewayOutcome:
    """Resultado de verificar una referencia contra el gateway."""

    status: str  # "success" | "failure"
    reference: str
    amount_minor_units: int
    currency: str
    paid_at: datetime | None = None
    channel: str | None = None
    gateway_response: str | None = None

    @property
    def succeeded(self) -> bool:
        return self.status == "success"


@dataclass(frozen=True)
class WebhookEvent:
    """Notificación del gateway ya autenticada."""

    event_type: str
    reference: str
    amount_minor_units: int
    currency: str
    paid_at: datetime | None = None
    channel: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


class PaymentGateway(Protocol):
    async def initiate(
        self,
        *,
        booking_id: str,
        amount: Money,
        payer_email: str,
        reference_prefix: str,
        metadata: dict[str, Any] | None = None,
    ) -> PaymentSession:
        """
        Abre una sesión de pago.

        Raises:
            UpstreamUnavailableError: Red, auth o circuito abierto.
        """
        ...

    async def verify(self, reference: str) -> GatewayOutcome:
        """
        Consulta el resultado de una referencia.

        Raises:
            UpstreamUnavailableError: Si el gateway no responde; nunca se
                traduce en una falla de pago.
        """
        ...

    def session_for(self, reference: str, amount: Money, payer_email: str) -> PaymentSession:
        """Reconstruye la sesión de una referencia ya emitida sin llamar al gateway."""
        ...

    def parse_webhook(self, raw_body: bytes, signature: str | None) -> WebhookEvent:
        """
        Valida la firma HMAC-SHA512 y decodifica el evento.

        Raises:
            InvalidWebhookSignatureError: Firma ausente o inválida.
        """
        ...
