"""Endpoints de reserva, sesión de pago, consulta y cancelación."""

from datetime import datetime, timedelta, timezone

import pytest

FLIGHT_PAYLOAD = {
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
}


@pytest.fixture
def seeded(bundle, flight_factory, hotel_factory):
    bundle["store"].inventory["f-1"] = flight_factory("f-1", capacity=2, price="100.00")
    bundle["store"].inventory["h-1"] = hotel_factory("h-1", capacity=3, price="50.00")
    return bundle


def _reserve(client, headers, key="key-1", payload=None):
    return client.post(
        "/api/v1/bookings/flights",
        json=payload or FLIGHT_PAYLOAD,
        headers={**headers, "Idempotency-Key": key},
    )


class TestReserveEndpoint:
    def test_requires_authentication(self, client, seeded):
        response = client.post(
            "/api/v1/bookings/flights", json=FLIGHT_PAYLOAD, headers={"Idempotency-Key": "k"}
        )
        assert response.status_code == 401

    def test_rejects_invalid_token(self, client, seeded):
        response = _reserve(client, {"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    def test_requires_idempotency_key(self, client, seeded, auth_headers):
        response = client.post("/api/v1/bookings/flights", json=FLIGHT_PAYLOAD, headers=auth_headers())

        assert response.status_code == 400
        assert response.json()["detail"] == "Idempotency-Key header is required"
        assert seeded["store"].inventory["f-1"].available == 2

    def test_reserve_flight(self, client, seeded, auth_headers):
        response = _reserve(client, auth_headers())

        assert response.status_code == 201
        data = response.json()
        assert data["booking"]["booking_status"] == "pending"
        assert data["booking"]["payment_status"] == "pending"
        assert data["booking"]["user_id"] == "user-1"
        assert data["payment"]["amount_minor_units"] == 10000
        assert data["payment"]["reference"].startswith("FLT-")
        assert data["payment"]["authorization_url"]
        assert seeded["store"].inventory["f-1"].available == 1

    def test_replay_returns_same_booking(self, client, seeded, auth_headers):
        first = _reserve(client, auth_headers())
        replay = _reserve(client, auth_headers())

        assert replay.status_code == 201
        assert replay.json() == first.json()
        assert seeded["store"].inventory["f-1"].available == 1
        assert seeded["payment_gateway"].initiate_calls == 1

    def test_same_key_with_other_payload_conflicts(self, client, seeded, auth_headers):
        _reserve(client, auth_headers())
        payload = {**FLIGHT_PAYLOAD, "passengers": FLIGHT_PAYLOAD["passengers"] * 2}

        response = _reserve(client, auth_headers(), payload=payload)

        assert response.status_code == 409
        assert response.json()["code"] == "IDEMPOTENCY_CONFLICT"

    def test_sold_out_flight(self, client, seeded, auth_headers):
        payload = {**FLIGHT_PAYLOAD, "passengers": FLIGHT_PAYLOAD["passengers"] * 3}

        response = _reserve(client, auth_headers(), payload=payload)

        assert response.status_code == 409
        assert response.json()["code"] == "INSUFFICIENT_INVENTORY"
        assert seeded["store"].inventory["f-1"].available == 2

    def test_unknown_flight(self, client, seeded, auth_headers):
        response = _reserve(client, auth_headers(), payload={**FLIGHT_PAYLOAD, "outbound_flight_id": "nope"})
        assert response.status_code == 404

    def test_unexpected_fields_are_rejected(self, client, seeded, auth_headers):
        response = _reserve(client, auth_headers(), payload={**FLIGHT_PAYLOAD, "total_price": "1.00"})
        assert response.status_code == 422

    def test_gateway_outage_keeps_reservation(self, client, seeded, auth_headers):
        seeded["payment_gateway"].unavailable = True

        response = _reserve(client, auth_headers())

        assert response.status_code == 503
        assert response.json()["code"] == "UPSTREAM_UNAVAILABLE"
        (booking,) = seeded["store"].bookings.values()
        assert booking.gateway_reference is None

        seeded["payment_gateway"].unavailable = False
        session = client.post(f"/api/v1/bookings/{booking.id}/payment-session", headers=auth_headers())

        assert session.status_code == 200
        assert session.json()["booking"]["gateway_reference"] == session.json()["payment"]["reference"]
        assert seeded["store"].inventory["f-1"].available == 1

    def test_reserve_hotel(self, client, seeded, auth_headers):
        check_in = datetime.now(timezone.utc) + timedelta(days=14)
        response = client.post(
            "/api/v1/bookings/hotels",
            json={
                "hotel_id": "h-1",
                "rooms": 2,
                "check_in": check_in.isoformat(),
                "check_out": (check_in + timedelta(days=2)).isoformat(),
            },
            headers={**auth_headers(), "Idempotency-Key": "hotel-1"},
        )

        assert response.status_code == 201
        data = response.json()
        assert data["booking"]["itinerary"]["nights"] == 2
        assert data["payment"]["amount_minor_units"] == 20000
        assert data["payment"]["reference"].startswith("HTL-")


class TestReadAndCancelEndpoints:
    def test_owner_can_read_and_list(self, client, seeded, auth_headers):
        booking_id = _reserve(client, auth_headers()).json()["booking"]["id"]

        detail = client.get(f"/api/v1/bookings/{booking_id}", headers=auth_headers())
        mine = client.get("/api/v1/bookings/mine", headers=auth_headers())
        others = client.get("/api/v1/bookings/mine", headers=auth_headers(user_id="user-2"))

        assert detail.status_code == 200
        assert [b["id"] for b in mine.json()] == [booking_id]
        assert others.json() == []

    def test_other_user_cannot_read(self, client, seeded, auth_headers):
        booking_id = _reserve(client, auth_headers()).json()["booking"]["id"]

        response = client.get(f"/api/v1/bookings/{booking_id}", headers=auth_headers(user_id="user-2"))

        assert response.status_code == 403

    def test_cancel_twice(self, client, seeded, auth_headers):
        booking_id = _reserve(client, auth_headers()).json()["booking"]["id"]

        first = client.post(f"/api/v1/bookings/{booking_id}/cancel", headers=auth_headers())
        second = client.post(f"/api/v1/bookings/{booking_id}/cancel", headers=auth_headers())

        assert first.status_code == 200
        assert first.json()["booking_status"] == "cancelled"
        assert second.status_code == 409
        assert second.json()["code"] == "ALREADY_CANCELLED"
        assert seeded["store"].inventory["f-1"].available == 2

    def test_airline_staff_can_cancel_flight(self, client, seeded, auth_headers):
        booking_id = _reserve(client, auth_headers()).json()["booking"]["id"]

        response = client.post(
            f"/api/v1/bookings/{booking_id}/cancel",
            headers=auth_headers(user_id="staff-1", roles=["airline_staff"]),
        )

        assert response.status_code == 200

    def test_inventory_lookup(self, client, seeded, auth_headers):
        response = client.get("/api/v1/inventory/f-1", headers=auth_headers())

        assert response.status_code == 200
        assert response.json()["available"] == 2
        assert client.get("/api/v1/inventory/missing", headers=auth_headers()).status_code == 404
