import logging
import uuid

from app.api.schemas.inventory import CreateInventoryUnitRequest
from app.application.interfaces.clock import Clock
from app.application.interfaces.inventory_repo import InventoryRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.domain.entities.inventory_unit import InventoryKind, InventoryUnit
from app.domain.errors import InventoryUnitNotFoundError, ValidationError

logger = logging.getLogger(__name__)


class CreateInventoryUnitUseCase:
    """
    Alta administrativa.

    `available` arranca en la capacidad y la moneda en `default_currency`
    si la request no las indica.
    """

    def __init__(
        self,
        inventory_repo: InventoryRepo,
        transaction_manager: TransactionManager,
        clock: Clock,
        default_currency: str = "NGN",
    ) -> None:
        self._inventory_repo = inventory_repo
        self._transaction_manager = transaction_manager
        self._clock = clock
        self._default_currency = default_currency

    async def execute(self, request: CreateInventoryUnitRequest) -> InventoryUnit:
        if request.kind == InventoryKind.FLIGHT:
            missing = [
                name
                for name in ("departure_airport", "arrival_airport", "departure_time", "arrival_time")
                if getattr(request, name) is None
            ]
            if missing:
                raise ValidationError(missing[0], "requerido para un vuelo")

        now = self._clock.now()
        unit = InventoryUnit(
            id=str(uuid.uuid4()),
            kind=request.kind,
            code=request.code,
            capacity=request.capacity,
            available=request.capacity if request.available is None else request.available,
            unit_price=request.unit_price,
            currency_code=(request.currency_code or self._default_currency).upper(),
            departure_airport=request.departure_airport.upper() if request.departure_airport else None,
            arrival_airport=request.arrival_airport.upper() if request.arrival_airport else None,
            departure_time=request.departure_time,
            arrival_time=request.arrival_time,
            location=request.location,
            created_at=now,
            updated_at=now,
        )
        async with self._transaction_manager.start():
            await self._inventory_repo.add(unit)
        logger.info(
            "Inventory unit created",
            extra={"unit_id": unit.id, "kind": unit.kind.value, "capacity": unit.capacity},
        )
        return unit


class GetInventoryUnitUseCase:
    def __init__(self, inventory_repo: InventoryRepo) -> None:
        self._inventory_repo = inventory_repo

    async def execute(self, unit_id: str) -> InventoryUnit:
        unit = await self._inventory_repo.get(unit_id)
        if unit is None:
            raise InventoryUnitNotFoundError(unit_id)
        return unit


class DeleteInventoryUnitUseCase:
    def __init__(self, inventory_repo: InventoryRepo, transaction_manager: TransactionManager) -> None:
        self._inventory_repo = inventory_repo
        self._transaction_manager = transaction_manager

    async def execute(self, unit_id: str) -> None:
        async with self._transaction_manager.start():
            deleted = await self._inventory_repo.delete(unit_id)
        if not deleted:
            raise InventoryUnitNotFoundError(unit_id)
        logger.info("Inventory unit deleted", extra={"unit_id": unit_id})
