from fastapi import APIRouter, Depends

from app.api.dependencies import get_use_cases
from app.api.schemas.inventory import InventoryUnitOut

router = APIRouter()


@router.get("/inventory/{unit_id}", response_model=InventoryUnitOut)
async def get_inventory_unit(
    unit_id: str,
    use_cases=Depends(get_use_cases),
) -> InventoryUnitOut:
    unit = await use_cases["get_inventory_unit"].execute(unit_id)
    return InventoryUnitOut.from_entity(unit)
