"""Endpoints administrativos."""

from datetime import datetime, timedelta, timezone

import pytest


@pytest.fixture
def admin_headers(auth_headers):
    return auth_headers(user_id="admin-1", email="ops@example.com", roles=["admin"])


@pytest.fixture
def booking_id(client, bundle, flight_factory, auth_headers):
    bundle["store"].inventory["f-1"] = flight_factory("f-1", capacity=2)
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
        headers={**auth_headers(), "Idempotency-Key": "admin-flow"},
    )
    return response.json()["booking"]["id"]


class TestAdminAccess:
    def test_customer_is_forbidden(self, client, auth_headers):
        assert client.get("/api/v1/admin/bookings", headers=auth_headers()).status_code == 403

    def test_anonymous_is_unauthorized(self, client):
        assert client.get("/api/v1/admin/payments").status_code == 401


class TestAdminInventory:
    def test_create_and_delete_flight(self, client, admin_headers):
        departure = datetime.now(timezone.utc) + timedelta(days=20)
        response = client.post(
            "/api/v1/admin/inventory",
            json={
                "kind": "flight",
                "code": "NG-204",
                "capacity": 150,
                "unit_price": "85.50",
                "departure_airport": "los",
                "arrival_airport": "abv",
                "departure_time": departure.isoformat(),
                "arrival_time": (departure + timedelta(hours=1)).isoformat(),
            },
            headers=admin_headers,
        )

        assert response.status_code == 201
        unit = response.json()
        assert unit["kind"] == "flight"
        assert unit["available"] == 150
        assert unit["departure_airport"] == "LOS"

        deleted = client.delete(f"/api/v1/admin/inventory/{unit['id']}", headers=admin_headers)
        missing = client.delete(f"/api/v1/admin/inventory/{unit['id']}", headers=admin_headers)

        assert deleted.status_code == 204
        assert missing.status_code == 404

    def test_flight_without_schedule_is_rejected(self, client, admin_headers):
        response = client.post(
            "/api/v1/admin/inventory",
            json={"kind": "flight", "code": "NG-1", "capacity": 10, "unit_price": "10.00"},
            headers=admin_headers,
        )
        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert "departure_airport" in response.json()["detail"]

    def test_available_above_capacity_is_rejected(self, client, admin_headers):
        response = client.post(
            "/api/v1/admin/inventory",
            json={"kind": "hotel", "code": "EKO", "capacity": 2, "available": 3, "unit_price": "10.00"},
            headers=admin_headers,
        )
        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"
        assert "available" in response.json()["detail"]


class TestAdminBookings:
    def test_list_bookings_and_payments(self, client, bundle, booking_id, admin_headers, auth_headers):
        reference = bundle["store"].bookings[booking_id].gateway_reference
        client.post(
            "/api/v1/payments/verify",
            json={"reference": reference, "booking_id": booking_id, "booking_type": "flight"},
            headers=auth_headers(),
        )

        bookings = client.get("/api/v1/admin/bookings", headers=admin_headers)
        payments = client.get("/api/v1/admin/payments", headers=admin_headers)

        assert [b["id"] for b in bookings.json()] == [booking_id]
        assert payments.status_code == 200
        assert payments.json()[0]["reference"] == reference
        assert payments.json()[0]["status"] == "succeeded"

    def test_status_update_cancels_and_releases(self, client, bundle, booking_id, admin_headers):
        response = client.put(
            f"/api/v1/admin/bookings/{booking_id}/status",
            json={"booking_status": "cancelled"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert response.json()["booking_status"] == "cancelled"
        assert bundle["store"].inventory["f-1"].available == 2

    def test_confirm_without_payment_is_rejected(self, client, booking_id, admin_headers):
        response = client.put(
            f"/api/v1/admin/bookings/{booking_id}/status",
            json={"booking_status": "confirmed"},
            headers=admin_headers,
        )
        assert response.status_code == 422
        assert response.json()["code"] == "INVALID_BOOKING_STATUS"

    def test_purge(self, client, bundle, booking_id, admin_headers):
        response = client.delete(f"/api/v1/admin/bookings/{booking_id}", headers=admin_headers)

        assert response.status_code == 204
        assert bundle["store"].bookings == {}
        assert bundle["store"].inventory["f-1"].available == 2
        assert client.delete(f"/api/v1/admin/bookings/{booking_id}", headers=admin_headers).status_code == 404
