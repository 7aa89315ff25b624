import hashlib
import json
import logging
import uuid
from typing import Any

from fastapi import status

from app.api.schemas.bookings import (
    BookingOut,
    FlightBookingRequest,
    HotelBookingRequest,
    PaymentSessionOut,
    ReserveBookingResponse,
    TripType,
)
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock
from app.application.interfaces.idempotency_repo import IdempotencyRecord, IdempotencyRepo
from app.application.interfaces.inventory_repo import InventoryRepo
from app.application.interfaces.principal import Principal
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.start_payment_session import StartPaymentSessionUseCase
from app.domain.entities.booking import Booking, BookingKind, Passenger
from app.domain.entities.inventory_unit import InventoryKind, InventoryUnit
from app.domain.errors import (
    IdempotencyConflictError,
    InsufficientInventoryError,
    InvalidRouteError,
    InventoryUnitNotFoundError,
    ValidationError,
)
from app.domain.value_objects.itinerary import HotelStay, Itinerary, OneWay, RoundTrip
from app.domain.value_objects.money import Money
from app.domain.value_objects.stay_range import StayRange

SCOPE = "BOOKING_RESERVE"

ReserveRequest = FlightBookingRequest | HotelBookingRequest


def _hash_request(payload: dict[str, Any]) -> str:
    normalized = json.dumps(payload, sort_keys=True, default=str, separators=(",", ":"))
    return hashlib.sha256(normalized.encode()).hexdigest()


class ReserveBookingUseCase:
    """
    Reserva inventario y crea el booking pending/pending en una sola transacción.

    Tras el commit abre la sesión de pago y persiste la referencia antes de
    responder, para que un webhook temprano pueda conciliarse.
    """

    def __init__(
        self,
        inventory_repo: InventoryRepo,
        booking_repo: BookingRepo,
        idempotency_repo: IdempotencyRepo,
        transaction_manager: TransactionManager,
        start_payment_session: StartPaymentSessionUseCase,
        clock: Clock,
    ) -> None:
        self._inventory_repo = inventory_repo
        self._booking_repo = booking_repo
        self._idempotency_repo = idempotency_repo
        self._transaction_manager = transaction_manager
        self._start_payment_session = start_payment_session
        self._clock = clock
        self._logger = logging.getLogger(__name__)

    async def execute(
        self,
        request: ReserveRequest,
        principal: Principal,
        idem_key: str | None = None,
    ) -> ReserveBookingResponse:
        request_hash = _hash_request(
            {"user_id": principal.user_id, "kind": type(request).__name__, **request.model_dump()}
        )

        async def reserve() -> tuple[str, ReserveBookingResponse | None]:
            async with self._transaction_manager.start():
                if idem_key:
                    existing = await self._idempotency_repo.get(scope=SCOPE, idem_key=idem_key)
                    if existing:
                        if existing.request_hash != request_hash:
                            raise IdempotencyConflictError(idem_key, SCOPE)
                        if existing.http_status == status.HTTP_201_CREATED:
                            return existing.booking_id, ReserveBookingResponse.model_validate(
                                existing.response_json
                            )
                        # Reservado pero sin sesión de pago: se retoma.
                        return existing.booking_id, None

                booking = await self._reserve(request, principal)
                if idem_key:
                    await self._idempotency_repo.save(
                        IdempotencyRecord(
                            scope=SCOPE,
                            idem_key=idem_key,
                            request_hash=request_hash,
                            response_json={"booking_id": booking.id},
                            http_status=status.HTTP_202_ACCEPTED,
                            booking_id=booking.id,
                        )
                    )
                return booking.id, None

        booking_id, replay = await self._transaction_manager.run(reserve)
        if replay is not None:
            return replay

        booking, session = await self._start_payment_session.execute(
            booking_id, principal, payer_email=request.payer_email
        )
        response = ReserveBookingResponse(
            booking=BookingOut.from_entity(booking),
            payment=PaymentSessionOut.from_session(session),
        )

        if idem_key:
            async with self._transaction_manager.start():
                await self._idempotency_repo.save(
                    IdempotencyRecord(
                        scope=SCOPE,
                        idem_key=idem_key,
                        request_hash=request_hash,
                        response_json=json.loads(response.model_dump_json()),
                        http_status=status.HTTP_201_CREATED,
                        booking_id=booking.id,
                    )
                )
        return response

    async def _reserve(self, request: ReserveRequest, principal: Principal) -> Booking:
        if isinstance(request, FlightBookingRequest):
            kind = BookingKind.FLIGHT
            itinerary, quantity, passengers = self._flight_terms(request)
            expected_kind = InventoryKind.FLIGHT
        else:
            kind = BookingKind.HOTEL
            itinerary, quantity = self._hotel_terms(request)
            passengers = []
            expected_kind = InventoryKind.HOTEL

        units = await self._inventory_repo.get_many(itinerary.unit_ids)
        for unit_id in itinerary.unit_ids:
            unit = units.get(unit_id)
            if unit is None:
                raise InventoryUnitNotFoundError(unit_id)
            if unit.kind != expected_kind:
                raise ValidationError("unit_id", f"{unit_id} no es de tipo {expected_kind.value}")

        if isinstance(itinerary, RoundTrip):
            outbound = units[itinerary.outbound_unit_id]
            inbound = units[itinerary.return_unit_id]
            if not outbound.continues_into(inbound):
                raise InvalidRouteError(
                    f"El vuelo {inbound.code} no es regreso válido de {outbound.code}"
                )

        total = self._price(itinerary, units, quantity)

        for unit_id in itinerary.unit_ids:
            reserved = await self._inventory_repo.try_reserve(unit_id, quantity)
            if not reserved:
                current = await self._inventory_repo.get(unit_id)
                raise InsufficientInventoryError(
                    unit_id, quantity, current.available if current else 0
                )

        now = self._clock.now()
        booking = Booking(
            id=str(uuid.uuid4()),
            user_id=principal.user_id,
            kind=kind,
            itinerary=itinerary,
            quantity=quantity,
            total_price=total.amount,
            currency_code=total.currency_code,
            passengers=passengers,
            created_at=now,
            updated_at=now,
        )
        await self._booking_repo.add(booking)

        self._logger.info(
            "Inventory reserved",
            extra={
                "booking_id": booking.id,
                "unit_ids": list(itinerary.unit_ids),
                "quantity": quantity,
                "total_price": str(booking.total_price),
            },
        )
        return booking

    def _flight_terms(
        self, request: FlightBookingRequest
    ) -> tuple[Itinerary, int, list[Passenger]]:
        if not request.passengers:
            raise ValidationError("passengers", "se requiere al menos un pasajero")

        if request.trip_type == TripType.ROUND_TRIP:
            if not request.return_flight_id:
                raise ValidationError("return_flight_id", "requerido para viaje redondo")
            if request.return_flight_id == request.outbound_flight_id:
                raise ValidationError("return_flight_id", "debe ser distinto del vuelo de ida")
            itinerary: Itinerary = RoundTrip(request.outbound_flight_id, request.return_flight_id)
        else:
            if request.return_flight_id:
                raise ValidationError("return_flight_id", "no aplica a un viaje sencillo")
            itinerary = OneWay(request.outbound_flight_id)

        passengers = [
            Passenger(
                first_name=p.first_name,
                last_name=p.last_name,
                gender=p.gender,
                date_of_birth=p.date_of_birth.isoformat(),
                nationality=p.nationality,
                passport_number=p.passport_number,
            )
            for p in request.passengers
        ]
        return itinerary, len(passengers), passengers

    def _hotel_terms(self, request: HotelBookingRequest) -> tuple[Itinerary, int]:
        if request.rooms < 1:
            raise ValidationError("rooms", "debe ser >= 1")
        try:
            stay = StayRange(check_in=request.check_in, check_out=request.check_out)
        except ValueError as exc:
            raise ValidationError("check_out", "debe ser posterior a check_in") from exc

        if stay.check_in.date() < self._clock.now().date():
            raise ValidationError("check_in", "no puede estar en el pasado")
        return HotelStay(hotel_unit_id=request.hotel_id, stay=stay), request.rooms

    @staticmethod
    def _price(itinerary: Itinerary, units: dict[str, InventoryUnit], quantity: int) -> Money:
        if isinstance(itinerary, HotelStay):
            hotel = units[itinerary.hotel_unit_id]
            return hotel.price * (quantity * itinerary.stay.nights)

        first, *rest = itinerary.unit_ids
        total = units[first].price * quantity
        for unit_id in rest:
            total = total + units[unit_id].price * quantity
        return total
