import copy
from typing import Sequence

from app.application.interfaces.inventory_repo import InventoryRepo
from app.domain.entities.inventory_unit import InventoryUnit
from app.infrastructure.in_memory.store import InMemoryStore


class InMemoryInventoryRepo(InventoryRepo):
    def __init__(self, store: InMemoryStore) -> None:
        self._store = store

    async def get(self, unit_id: str) -> InventoryUnit | None:
        unit = self._store.inventory.get(unit_id)
        return copy.deepcopy(unit) if unit else None

    async def get_many(self, unit_ids: Sequence[str]) -> dict[str, InventoryUnit]:
        return {
            unit_id: copy.deepcopy(self._store.inventory[unit_id])
            for unit_id in unit_ids
            if unit_id in self._store.inventory
        }

    async def try_reserve(self, unit_id: str, quantity: int) -> bool:
        # Sin await entre la verificación y el decremento.
        unit = self._store.inventory.get(unit_id)
        if unit is None or not unit.can_reserve(quantity):
            return False
        unit.reserve(quantity)
        return True

    async def release(self, unit_id: str, quantity: int) -> int | None:
        unit = self._store.inventory.get(unit_id)
        if unit is None:
            return None
        return unit.release(quantity)

    async def add(self, unit: InventoryUnit) -> None:
        if unit.id in self._store.inventory:
            raise ValueError(f"Inventory unit already exists: {unit.id}")
        self._store.inventory[unit.id] = copy.deepcopy(unit)

    async def delete(self, unit_id: str) -> bool:
        return self._store.inventory.pop(unit_id, None) is not None
