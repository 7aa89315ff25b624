"""Verificación de pagos y webhook del gateway vía HTTP."""

import json

import pytest

from app.api.errors import SUPPORT_MESSAGE


@pytest.fixture
def reservation(client, bundle, flight_factory, auth_headers):
    bundle["store"].inventory["f-1"] = flight_factory("f-1", capacity=2, price="100.00")
    response = client.post(
        "/api/v1/bookings/flights",
        json={
            "outbound_flight_id": "f-1",
            "passengers": [
                {
                    "first_name": "Ada",
                    "last_name": "Obi",
                    "gender": "female",
                    "date_of_birth": "1990-01-01",
                    "nationality": "NG",
                }
            ],
        },
        headers={**auth_headers(), "Idempotency-Key": "pay-1"},
    )
    assert response.status_code == 201
    return response.json()


def _verify(client, reservation, headers, reference=None):
    return client.post(
        "/api/v1/payments/verify",
        json={
            "reference": reference or reservation["payment"]["reference"],
            "booking_id": reservation["booking"]["id"],
            "booking_type": "flight",
        },
        headers=headers,
    )


def _webhook(client, bundle, event: str, reference: str, amount: int, signature=None):
    body = json.dumps(
        {"event": event, "data": {"reference": reference, "amount": amount, "currency": "NGN"}}
    ).encode()
    return client.post(
        "/api/v1/payments/webhook",
        content=body,
        headers={
            "Content-Type": "application/json",
            "x-paystack-signature": signature or bundle["payment_gateway"].sign(body),
        },
    )


class TestVerifyEndpoint:
    def test_verify_confirms_booking(self, client, bundle, reservation, auth_headers):
        response = _verify(client, reservation, auth_headers())

        assert response.status_code == 200
        assert response.json()["booking_status"] == "confirmed"
        assert response.json()["payment_status"] == "completed"

    def test_amount_mismatch_returns_generic_message(
        self, client, bundle, reservation, auth_headers
    ):
        bundle["payment_gateway"].script_outcome(
            reservation["payment"]["reference"], status="success", amount_minor_units=100
        )

        response = _verify(client, reservation, auth_headers())

        assert response.status_code == 400
        assert response.json()["detail"] == SUPPORT_MESSAGE
        assert response.json()["code"] == "AMOUNT_MISMATCH"
        booking = bundle["store"].bookings[reservation["booking"]["id"]]
        assert booking.booking_status.value == "pending"

    def test_declined_payment(self, client, bundle, reservation, auth_headers):
        bundle["payment_gateway"].script_outcome(
            reservation["payment"]["reference"], status="failed", gateway_response="Insufficient funds"
        )

        response = _verify(client, reservation, auth_headers())

        assert response.status_code == 400
        assert response.json()["code"] == "PAYMENT_FAILED"

    def test_gateway_outage(self, client, bundle, reservation, auth_headers):
        bundle["payment_gateway"].unavailable = True

        response = _verify(client, reservation, auth_headers())

        assert response.status_code == 503

    def test_other_customer_is_forbidden(self, client, reservation, auth_headers):
        response = _verify(client, reservation, auth_headers(user_id="user-2"))
        assert response.status_code == 403

    def test_requires_authentication(self, client, reservation):
        response = _verify(client, reservation, {})
        assert response.status_code == 401


class TestWebhookEndpoint:
    def test_signed_success_confirms(self, client, bundle, reservation):
        response = _webhook(
            client, bundle, "charge.success", reservation["payment"]["reference"], 10000
        )

        assert response.status_code == 200
        assert response.json() == {"received": True, "status": "processed"}
        booking = bundle["store"].bookings[reservation["booking"]["id"]]
        assert booking.booking_status.value == "confirmed"

    def test_bad_signature_is_rejected(self, client, bundle, reservation):
        response = _webhook(
            client,
            bundle,
            "charge.success",
            reservation["payment"]["reference"],
            10000,
            signature="deadbeef",
        )

        assert response.status_code == 400
        booking = bundle["store"].bookings[reservation["booking"]["id"]]
        assert booking.payment_status.value == "pending"

    def test_unknown_reference_is_acknowledged(self, client, bundle):
        response = _webhook(client, bundle, "charge.success", "FLT-unknown", 10000)

        assert response.status_code == 200
        assert response.json()["status"] == "unknown_reference"

    def test_webhook_then_verify_is_idempotent(self, client, bundle, reservation, auth_headers):
        _webhook(client, bundle, "charge.success", reservation["payment"]["reference"], 10000)

        response = _verify(client, reservation, auth_headers())

        assert response.status_code == 200
        assert response.json()["booking_status"] == "confirmed"
        assert len(bundle["store"].ledger) == 1
