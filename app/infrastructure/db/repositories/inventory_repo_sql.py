from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Sequence

from sqlalchemy import delete, insert, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.inventory_repo import InventoryRepo
from app.domain.entities.inventory_unit import InventoryKind, InventoryUnit
from app.infrastructure.db.tables import inventory_units


def _to_entity(row: Any) -> InventoryUnit:
    return InventoryUnit(
        id=row["id"],
        kind=InventoryKind(row["kind"]),
        code=row["code"],
        capacity=row["capacity"],
        available=row["available"],
        unit_price=Decimal(str(row["unit_price"])),
        currency_code=row["currency_code"],
        departure_airport=row["departure_airport"],
        arrival_airport=row["arrival_airport"],
        departure_time=row["departure_time"],
        arrival_time=row["arrival_time"],
        location=row["location"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
    )


class InventoryRepoSQL(InventoryRepo):
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, unit_id: str) -> InventoryUnit | None:
        stmt = select(inventory_units).where(inventory_units.c.id == unit_id).limit(1)
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        return _to_entity(row) if row else None

    async def get_many(self, unit_ids: Sequence[str]) -> dict[str, InventoryUnit]:
        if not unit_ids:
            return {}
        stmt = select(inventory_units).where(inventory_units.c.id.in_(list(unit_ids)))
        result = await self._session.execute(stmt)
        return {row["id"]: _to_entity(row) for row in result.mappings().all()}

    async def try_reserve(self, unit_id: str, quantity: int) -> bool:
        # Compare-and-swap: la guarda va en el WHERE, no en una lectura previa.
        stmt = (
            update(inventory_units)
            .where(
                inventory_units.c.id == unit_id,
                inventory_units.c.available >= quantity,
            )
            .values(
                available=inventory_units.c.available - quantity,
                updated_at=datetime.now(timezone.utc),
            )
        )
        result = await self._session.execute(stmt)
        return result.rowcount == 1

    async def release(self, unit_id: str, quantity: int) -> int | None:
        stmt = (
            select(inventory_units.c.available, inventory_units.c.capacity)
            .where(inventory_units.c.id == unit_id)
            .with_for_update()
        )
        result = await self._session.execute(stmt)
        row = result.mappings().first()
        if not row:
            return None

        restored = max(0, min(quantity, row["capacity"] - row["available"]))
        if restored:
            await self._session.execute(
                update(inventory_units)
                .where(inventory_units.c.id == unit_id)
                .values(
                    available=inventory_units.c.available + restored,
                    updated_at=datetime.now(timezone.utc),
                )
            )
        return restored

    async def add(self, unit: InventoryUnit) -> None:
        stmt = insert(inventory_units).values(
            id=unit.id,
            kind=unit.kind.value,
            code=unit.code,
            capacity=unit.capacity,
            available=unit.available,
            unit_price=unit.unit_price,
            currency_code=unit.currency_code,
            departure_airport=unit.departure_airport,
            arrival_airport=unit.arrival_airport,
            departure_time=unit.departure_time,
            arrival_time=unit.arrival_time,
            location=unit.location,
            created_at=unit.created_at,
            updated_at=unit.updated_at,
        )
        await self._session.execute(stmt)

    async def delete(self, unit_id: str) -> bool:
        result = await self._session.execute(
            delete(inventory_units).where(inventory_units.c.id == unit_id)
        )
        return result.rowcount > 0
