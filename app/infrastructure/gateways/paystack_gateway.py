import hashlib
import hmac
import json
import logging
from datetime import datetime
from typing import Any
from urllib.parse import quote

import httpx
from pybreaker import CircuitBreaker

from app.application.interfaces.payment_gateway import (
    GatewayOutcome,
    PaymentSession,
    WebhookEvent,
)
from app.domain.errors import InvalidWebhookSignatureError, UpstreamUnavailableError
from app.domain.value_objects.gateway_reference import GatewayReference
from app.domain.value_objects.money import Money
from app.infrastructure.circuit_breaker import CircuitBreakerError, build_payment_breaker
from app.infrastructure.gateways.token_cache import AccessTokenCache

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "x-paystack-signature"


class _GatewayServerError(Exception):
    def __init__(self, status_code: int):
        super().__init__(f"gateway returned {status_code}")
        self.status_code = status_code


def sign_payload(secret: str, raw_body: bytes) -> str:
    """HMAC-SHA512 en hex del cuerpo crudo, como lo firma el gateway."""
    return hmac.new(secret.encode(), raw_body, hashlib.sha512).hexdigest()


def verify_signature(secret: str | None, raw_body: bytes, signature: str | None) -> None:
    if not secret:
        raise InvalidWebhookSignatureError("Webhook secret is not configured")
    if not signature:
        raise InvalidWebhookSignatureError("Missing webhook signature")
    expected = sign_payload(secret, raw_body)
    if not hmac.compare_digest(expected, signature.strip().lower()):
        raise InvalidWebhookSignatureError()


def parse_event(raw_body: bytes) -> WebhookEvent:
    try:
        payload = json.loads(raw_body.decode() or "{}")
    except (UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise InvalidWebhookSignatureError("Invalid webhook payload") from exc

    data = payload.get("data") or {}
    if not payload.get("event") or not data.get("reference"):
        raise InvalidWebhookSignatureError("Invalid webhook payload")
    return WebhookEvent(
        event_type=payload["event"],
        reference=str(data["reference"]),
        amount_minor_units=int(data.get("amount") or 0),
        currency=data.get("currency") or "",
        paid_at=_parse_datetime(data.get("paid_at") or data.get("paidAt")),
        channel=data.get("channel"),
        metadata=data.get("metadata") or {},
    )


def _parse_datetime(value: Any) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(str(value).replace("Z", "+00:00"))
    except ValueError:
        logger.warning("Unparseable gateway timestamp", extra={"value": value})
        return None


class PaystackGateway:
    """
    Adaptador HTTP del gateway de pagos, protegido por Circuit Breaker.

    Red caída, timeouts, 5xx, credenciales rechazadas tras un refresh y
    circuito abierto se reportan como UpstreamUnavailableError; nunca como un
    pago fallido.
    """

    def __init__(
        self,
        base_url: str,
        token_cache: AccessTokenCache,
        webhook_secret: str | None,
        callback_url: str | None = None,
        timeout_seconds: float = 10.0,
        breaker: CircuitBreaker | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token_cache = token_cache
        self._webhook_secret = webhook_secret
        self._callback_url = callback_url
        self._timeout = timeout_seconds
        self._breaker = breaker or build_payment_breaker()
        self._transport = transport

    @property
    def circuit_state(self) -> str:
        return self._breaker.current_state

    async def initiate(
        self,
        *,
        booking_id: str,
        amount: Money,
        payer_email: str,
        reference_prefix: str,
        metadata: dict[str, Any] | None = None,
    ) -> PaymentSession:
        reference = GatewayReference.generate(reference_prefix).value
        amount_minor = amount.to_minor_units()
        payload: dict[str, Any] = {
            "email": payer_email,
            "amount": amount_minor,
            "currency": amount.currency_code,
            "reference": reference,
            "metadata": {"booking_id": booking_id, **(metadata or {})},
        }
        if self._callback_url:
            payload["callback_url"] = self._callback_url

        response = await self._request("POST", "/transaction/initialize", "initiate", payload)
        body = self._json(response, "initiate")
        if response.status_code >= 400 or not body.get("status"):
            raise UpstreamUnavailableError("initiate", body.get("message") or f"HTTP {response.status_code}")

        data = body.get("data") or {}
        return PaymentSession(
            reference=data.get("reference") or reference,
            amount=amount,
            amount_minor_units=amount_minor,
            payer_email=payer_email,
            authorization_url=data.get("authorization_url"),
            access_code=data.get("access_code"),
        )

    async def verify(self, reference: str) -> GatewayOutcome:
        response = await self._request(
            "GET", f"/transaction/verify/{quote(reference, safe='')}", "verify"
        )
        body = self._json(response, "verify")
        data = body.get("data") or {}
        succeeded = bool(body.get("status")) and data.get("status") == "success"
        return GatewayOutcome(
            status="success" if succeeded else "failure",
            reference=str(data.get("reference") or reference),
            amount_minor_units=int(data.get("amount") or 0),
            currency=data.get("currency") or "",
            paid_at=_parse_datetime(data.get("paid_at") or data.get("paidAt")),
            channel=data.get("channel"),
            gateway_response=data.get("gateway_response") or body.get("message"),
        )

    def session_for(self, reference: str, amount: Money, payer_email: str) -> PaymentSession:
        return PaymentSession(
            reference=reference,
            amount=amount,
            amount_minor_units=amount.to_minor_units(),
            payer_email=payer_email,
        )

    def parse_webhook(self, raw_body: bytes, signature: str | None) -> WebhookEvent:
        verify_signature(self._webhook_secret, raw_body, signature)
        return parse_event(raw_body)

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        payload: dict[str, Any] | None = None,
    ) -> httpx.Response:
        for attempt in (1, 2):
            try:
                token = await self._token_cache.get()
            except ValueError as exc:
                raise UpstreamUnavailableError(operation, str(exc)) from exc

            response = await self._send(method, path, operation, token, payload)
            if response.status_code not in (401, 403):
                return response

            self._token_cache.invalidate()
            if attempt == 1:
                logger.warning(
                    "Payment gateway rejected credentials, refreshing token",
                    extra={"operation": operation, "http_status": response.status_code},
                )

        logger.error(
            "Payment gateway rejected credentials after refresh",
            extra={"operation": operation, "http_status": response.status_code},
        )
        raise UpstreamUnavailableError(operation, f"credentials rejected (HTTP {response.status_code})")

    async def _send(
        self,
        method: str,
        path: str,
        operation: str,
        token: str,
        payload: dict[str, Any] | None,
    ) -> httpx.Response:
        headers = {"Authorization": f"Bearer {token}", "Content-Type": "application/json"}
        try:
            with self._breaker.calling():
                async with httpx.AsyncClient(
                    base_url=self._base_url, timeout=self._timeout, transport=self._transport
                ) as client:
                    response = await client.request(method, path, json=payload, headers=headers)
                if response.status_code >= 500:
                    raise _GatewayServerError(response.status_code)
                return response
        except CircuitBreakerError as exc:
            logger.error(
                "Payment gateway circuit breaker is open - service unavailable",
                extra={"operation": operation, "circuit_state": str(exc)},
            )
            raise UpstreamUnavailableError(operation, "circuit breaker open") from exc
        except httpx.TimeoutException as exc:
            logger.error(
                "Payment gateway request timeout",
                extra={"operation": operation, "timeout": self._timeout},
            )
            raise UpstreamUnavailableError(operation, "timeout") from exc
        except httpx.HTTPError as exc:
            logger.error(
                "Payment gateway request failed",
                extra={"operation": operation, "error": str(exc)},
            )
            raise UpstreamUnavailableError(operation, str(exc)) from exc
        except _GatewayServerError as exc:
            logger.error(
                "Payment gateway server error",
                extra={"operation": operation, "http_status": exc.status_code},
            )
            raise UpstreamUnavailableError(operation, str(exc)) from exc

    @staticmethod
    def _json(response: httpx.Response, operation: str) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamUnavailableError(operation, "invalid JSON from gateway") from exc
        if not isinstance(body, dict):
            raise UpstreamUnavailableError(operation, "unexpected gateway payload")
        return body
