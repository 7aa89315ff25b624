"""
Flujo de reserva sobre componentes in-memory.

Verifica que el inventario nunca se sobrevende, que una reserva inválida no
toca el inventario y que la sesión de pago queda persistida antes de
responder.
"""

import asyncio
from datetime import timedelta
from decimal import Decimal

import pytest

from app.api.schemas.bookings import FlightBookingRequest, HotelBookingRequest
from app.api.schemas.bookings import Passenger as PassengerIn
from app.api.schemas.bookings import TripType
from app.api.schemas.payments import VerifyPaymentRequest
from app.domain.entities.booking import BookingKind, BookingStatus, PaymentStatus
from app.domain.entities.payment_ledger_entry import LedgerStatus
from app.domain.errors import (
    IdempotencyConflictError,
    InsufficientInventoryError,
    InvalidRouteError,
    InventoryUnitNotFoundError,
    UpstreamUnavailableError,
    ValidationError,
)


def _passengers(count: int) -> list[PassengerIn]:
    return [
        PassengerIn(
            first_name=f"Pax{i}",
            last_name="Okafor",
            gender="female",
            date_of_birth="1990-05-17",
            nationality="NG",
        )
        for i in range(count)
    ]


def _one_way(unit_id: str, passengers: int = 1) -> FlightBookingRequest:
    return FlightBookingRequest(
        trip_type=TripType.ONE_WAY,
        outbound_flight_id=unit_id,
        passengers=_passengers(passengers),
    )


def _round_trip(outbound: str, inbound: str, passengers: int = 1) -> FlightBookingRequest:
    return FlightBookingRequest(
        trip_type=TripType.ROUND_TRIP,
        outbound_flight_id=outbound,
        return_flight_id=inbound,
        passengers=_passengers(passengers),
    )


@pytest.fixture
def seed(store):
    def add(*units):
        for unit in units:
            store.inventory[unit.id] = unit

    return add


class TestReserveFlight:
    @pytest.mark.asyncio
    async def test_end_to_end_reserve_verify_and_sell_out(
        self, use_cases, store, gateway, seed, flight_factory, customer
    ):
        seed(flight_factory("f-1", capacity=2, price="100.00"))

        response = await use_cases["reserve_booking"].execute(
            request=_one_way("f-1", passengers=2), principal=customer
        )

        assert store.inventory["f-1"].available == 0
        assert response.booking.booking_status == "pending"
        assert response.booking.payment_status == "pending"
        assert response.booking.total_price == Decimal("200.00")
        assert response.payment.amount_minor_units == 20000
        assert response.payment.payer_email == "ada@example.com"
        # La referencia queda guardada antes de responder.
        stored = store.bookings[response.booking.id]
        assert stored.gateway_reference == response.payment.reference

        booking = await use_cases["verify_payment"].execute(
            VerifyPaymentRequest(
                reference=response.payment.reference,
                booking_id=response.booking.id,
                booking_type=BookingKind.FLIGHT,
            ),
            customer,
        )
        assert booking.booking_status == BookingStatus.CONFIRMED
        assert booking.payment_status == PaymentStatus.COMPLETED
        entry = store.ledger[response.payment.reference]
        assert entry.status == LedgerStatus.SUCCEEDED
        assert entry.amount == Decimal("200.00")

        with pytest.raises(InsufficientInventoryError):
            await use_cases["reserve_booking"].execute(
                request=_one_way("f-1", passengers=1), principal=customer
            )
        assert store.inventory["f-1"].available == 0

    @pytest.mark.asyncio
    async def test_concurrent_reservations_never_oversell(
        self, use_cases, store, seed, flight_factory, customer
    ):
        seed(flight_factory("f-1", capacity=3))

        results = await asyncio.gather(
            *(
                use_cases["reserve_booking"].execute(request=_one_way("f-1"), principal=customer)
                for _ in range(6)
            ),
            return_exceptions=True,
        )

        succeeded = [r for r in results if not isinstance(r, Exception)]
        rejected = [r for r in results if isinstance(r, InsufficientInventoryError)]
        assert len(succeeded) == 3
        assert len(rejected) == 3
        assert store.inventory["f-1"].available == 0
        assert len(store.bookings) == 3

    @pytest.mark.asyncio
    async def test_round_trip_reserves_both_legs(
        self, use_cases, store, seed, flight_factory, customer
    ):
        outbound = flight_factory("f-1", capacity=4, price="100.00")
        inbound = flight_factory(
            "f-2",
            capacity=4,
            price="120.00",
            departure_airport="ABV",
            arrival_airport="LOS",
            departure_time=outbound.arrival_time + timedelta(days=3),
        )
        seed(outbound, inbound)

        response = await use_cases["reserve_booking"].execute(
            request=_round_trip("f-1", "f-2", passengers=2), principal=customer
        )

        assert store.inventory["f-1"].available == 2
        assert store.inventory["f-2"].available == 2
        assert response.booking.total_price == Decimal("440.00")
        assert response.booking.itinerary["type"] == "round-trip"

    @pytest.mark.asyncio
    async def test_invalid_route_leaves_inventory_untouched(
        self, use_cases, store, seed, flight_factory, customer
    ):
        outbound = flight_factory("f-1", capacity=4)
        # Sale antes de que llegue el vuelo de ida.
        inbound = flight_factory(
            "f-2",
            capacity=4,
            departure_airport="ABV",
            arrival_airport="LOS",
            departure_time=outbound.departure_time,
        )
        seed(outbound, inbound)

        with pytest.raises(InvalidRouteError):
            await use_cases["reserve_booking"].execute(
                request=_round_trip("f-1", "f-2"), principal=customer
            )

        assert store.inventory["f-1"].available == 4
        assert store.inventory["f-2"].available == 4
        assert store.bookings == {}

    @pytest.mark.asyncio
    async def test_return_from_other_airport_is_invalid_route(
        self, use_cases, store, seed, flight_factory, customer
    ):
        outbound = flight_factory("f-1", capacity=4)
        inbound = flight_factory(
            "f-2",
            capacity=4,
            departure_airport="PHC",
            arrival_airport="LOS",
            departure_time=outbound.arrival_time + timedelta(days=2),
        )
        seed(outbound, inbound)

        with pytest.raises(InvalidRouteError):
            await use_cases["reserve_booking"].execute(
                request=_round_trip("f-1", "f-2"), principal=customer
            )

        assert store.inventory["f-1"].available == 4
        assert store.inventory["f-2"].available == 4

    @pytest.mark.asyncio
    async def test_full_return_leg_rolls_back_outbound(
        self, use_cases, store, seed, flight_factory, customer
    ):
        outbound = flight_factory("f-1", capacity=4)
        inbound = flight_factory(
            "f-2",
            capacity=4,
            available=0,
            departure_airport="ABV",
            arrival_airport="LOS",
            departure_time=outbound.arrival_time + timedelta(days=1),
        )
        seed(outbound, inbound)

        with pytest.raises(InsufficientInventoryError):
            await use_cases["reserve_booking"].execute(
                request=_round_trip("f-1", "f-2"), principal=customer
            )

        assert store.inventory["f-1"].available == 4
        assert store.bookings == {}

    @pytest.mark.asyncio
    async def test_unknown_flight(self, use_cases, customer):
        with pytest.raises(InventoryUnitNotFoundError):
            await use_cases["reserve_booking"].execute(
                request=_one_way("missing"), principal=customer
            )

    @pytest.mark.asyncio
    async def test_flight_requires_passengers(
        self, use_cases, store, seed, flight_factory, customer
    ):
        seed(flight_factory("f-1"))

        with pytest.raises(ValidationError):
            await use_cases["reserve_booking"].execute(
                request=_one_way("f-1", passengers=0), principal=customer
            )
        assert store.inventory["f-1"].available == 2

    @pytest.mark.asyncio
    async def test_hotel_unit_cannot_be_booked_as_flight(
        self, use_cases, seed, hotel_factory, customer
    ):
        seed(hotel_factory("h-1"))

        with pytest.raises(ValidationError):
            await use_cases["reserve_booking"].execute(
                request=_one_way("h-1"), principal=customer
            )


class TestReserveHotel:
    @pytest.mark.asyncio
    async def test_price_is_rooms_times_nights(
        self, use_cases, store, clock, seed, hotel_factory, customer
    ):
        seed(hotel_factory("h-1", capacity=5, price="50.00"))
        check_in = clock.now() + timedelta(days=10)

        response = await use_cases["reserve_booking"].execute(
            request=HotelBookingRequest(
                hotel_id="h-1",
                rooms=2,
                check_in=check_in,
                check_out=check_in + timedelta(days=3),
            ),
            principal=customer,
        )

        assert response.booking.total_price == Decimal("300.00")
        assert response.booking.quantity == 2
        assert response.booking.itinerary["nights"] == 3
        assert response.payment.reference.startswith("HTL-")
        assert store.inventory["h-1"].available == 3

    @pytest.mark.asyncio
    async def test_check_in_in_the_past_is_rejected(
        self, use_cases, store, clock, seed, hotel_factory, customer
    ):
        seed(hotel_factory("h-1"))
        check_in = clock.now() - timedelta(days=1)

        with pytest.raises(ValidationError):
            await use_cases["reserve_booking"].execute(
                request=HotelBookingRequest(
                    hotel_id="h-1",
                    check_in=check_in,
                    check_out=check_in + timedelta(days=2),
                ),
                principal=customer,
            )
        assert store.inventory["h-1"].available == 5

    @pytest.mark.asyncio
    async def test_check_out_before_check_in_is_rejected(
        self, use_cases, clock, seed, hotel_factory, customer
    ):
        seed(hotel_factory("h-1"))
        check_in = clock.now() + timedelta(days=5)

        with pytest.raises(ValidationError):
            await use_cases["reserve_booking"].execute(
                request=HotelBookingRequest(
                    hotel_id="h-1",
                    check_in=check_in,
                    check_out=check_in,
                ),
                principal=customer,
            )


class TestIdempotentReserve:
    @pytest.mark.asyncio
    async def test_same_key_replays_response(
        self, use_cases, store, gateway, seed, flight_factory, customer
    ):
        seed(flight_factory("f-1", capacity=5))
        request = _one_way("f-1")

        first = await use_cases["reserve_booking"].execute(request, customer, idem_key="k-1")
        replay = await use_cases["reserve_booking"].execute(request, customer, idem_key="k-1")

        assert replay.model_dump() == first.model_dump()
        assert store.inventory["f-1"].available == 4
        assert gateway.initiate_calls == 1

    @pytest.mark.asyncio
    async def test_same_key_different_payload_conflicts(
        self, use_cases, seed, flight_factory, customer
    ):
        seed(flight_factory("f-1", capacity=5))
        await use_cases["reserve_booking"].execute(_one_way("f-1"), customer, idem_key="k-1")

        with pytest.raises(IdempotencyConflictError):
            await use_cases["reserve_booking"].execute(
                _one_way("f-1", passengers=2), customer, idem_key="k-1"
            )


class TestGatewayOutageOnReserve:
    @pytest.mark.asyncio
    async def test_booking_stays_pending_and_session_can_be_retried(
        self, use_cases, store, gateway, seed, flight_factory, customer
    ):
        seed(flight_factory("f-1", capacity=2))
        gateway.unavailable = True

        with pytest.raises(UpstreamUnavailableError):
            await use_cases["reserve_booking"].execute(_one_way("f-1"), customer, idem_key="k-1")

        (booking,) = store.bookings.values()
        assert booking.gateway_reference is None
        assert booking.booking_status == BookingStatus.PENDING
        assert store.inventory["f-1"].available == 1

        gateway.unavailable = False
        retried = await use_cases["reserve_booking"].execute(
            _one_way("f-1"), customer, idem_key="k-1"
        )

        assert retried.booking.id == booking.id
        assert store.bookings[booking.id].gateway_reference == retried.payment.reference
        # El reintento retoma la sesión; no reserva de nuevo.
        assert store.inventory["f-1"].available == 1

    @pytest.mark.asyncio
    async def test_existing_reference_is_reused_without_gateway_call(
        self, use_cases, gateway, seed, flight_factory, customer
    ):
        seed(flight_factory("f-1", capacity=2))
        response = await use_cases["reserve_booking"].execute(_one_way("f-1"), customer)
        gateway.unavailable = True

        booking, session = await use_cases["start_payment_session"].execute(
            response.booking.id, customer
        )

        assert session.reference == response.payment.reference
        assert session.amount_minor_units == response.payment.amount_minor_units
        assert gateway.initiate_calls == 1
