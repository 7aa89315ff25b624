from typing import Sequence

from app.domain.entities.inventory_unit import InventoryUnit


class InventoryRepo:
    """
    Ledger de inventario.

    Las mutaciones de conteo son siempre con guarda: `try_reserve` sólo
    decrementa si alcanza y `release` nunca supera la capacidad.
    """

    async def get(self, unit_id: str) -> InventoryUnit | None:
        raise NotImplementedError

    async def get_many(self, unit_ids: Sequence[str]) -> dict[str, InventoryUnit]:
        raise NotImplementedError

    async def try_reserve(self, unit_id: str, quantity: int) -> bool:
        """Decremento compare-and-swap. False si no hay disponible suficiente."""
        raise NotImplementedError

    async def release(self, unit_id: str, quantity: int) -> int | None:
        """Incremento acotado a capacity. None si la unidad no existe."""
        raise NotImplementedError

    async def add(self, unit: InventoryUnit) -> None:
        raise NotImplementedError

    async def delete(self, unit_id: str) -> bool:
        raise NotImplementedError
