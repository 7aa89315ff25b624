from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, condecimal, constr, field_validator

from app.domain.entities.inventory_unit import InventoryKind, InventoryUnit

Money = condecimal(max_digits=12, decimal_places=2, ge=0)


class CreateInventoryUnitRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    kind: InventoryKind
    code: constr(strip_whitespace=True, min_length=1, max_length=64)
    capacity: int
    available: int | None = None
    unit_price: Money
    currency_code: constr(strip_whitespace=True, min_length=3, max_length=3) | None = None
    departure_airport: constr(strip_whitespace=True, min_length=3, max_length=3) | None = None
    arrival_airport: constr(strip_whitespace=True, min_length=3, max_length=3) | None = None
    departure_time: datetime | None = None
    arrival_time: datetime | None = None
    location: str | None = None

    @field_validator("capacity")
    @classmethod
    def validate_capacity(cls, value: int) -> int:
        if value < 0:
            raise ValueError("capacity must be >= 0")
        return value

    @field_validator("arrival_time")
    @classmethod
    def validate_times(cls, value: datetime | None, info: Any) -> datetime | None:
        departure = info.data.get("departure_time")
        if value and departure and value <= departure:
            raise ValueError("arrival_time must be after departure_time")
        return value


class InventoryUnitOut(BaseModel):
    model_config = ConfigDict(json_encoders={Decimal: lambda v: format(v, ".2f")})

    id: str
    kind: str
    code: str
    capacity: int
    available: int
    unit_price: Money
    currency_code: str
    departure_airport: str | None = None
    arrival_airport: str | None = None
    departure_time: datetime | None = None
    arrival_time: datetime | None = None
    location: str | None = None

    @classmethod
    def from_entity(cls, unit: InventoryUnit) -> "InventoryUnitOut":
        return cls(
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
        )
