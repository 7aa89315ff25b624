"""Entidad InventoryUnit - pool finito de asientos de un vuelo o habitaciones de un hotel."""

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal
from enum import Enum

from app.domain.errors import InsufficientInventoryError, ValidationError
from app.domain.value_objects.money import Money


class InventoryKind(str, Enum):
    """Tipos de unidad vendible."""

    FLIGHT = "flight"
    HOTEL = "hotel"


@dataclass
class InventoryUnit:
    """
    Unidad de inventario con conteo disponible mutable.

    Invariante: 0 <= available <= capacity. Toda mutación es un decremento o
    incremento con guarda, nunca una asignación incondicional.
    """

    id: str
    kind: InventoryKind
    code: str
    capacity: int
    available: int
    unit_price: Decimal
    currency_code: str = "NGN"

    # Vuelos
    departure_airport: str | None = None
    arrival_airport: str | None = None
    departure_time: datetime | None = None
    arrival_time: datetime | None = None

    # Hoteles
    location: str | None = None

    created_at: datetime | None = None
    updated_at: datetime | None = None

    def __post_init__(self) -> None:
        if self.capacity < 0:
            raise ValidationError("capacity", "no puede ser negativa")
        if not 0 <= self.available <= self.capacity:
            raise ValidationError(
                "available", f"debe estar entre 0 y capacity ({self.capacity})"
            )

    @property
    def price(self) -> Money:
        return Money(amount=self.unit_price, currency_code=self.currency_code)

    @property
    def is_flight(self) -> bool:
        return self.kind == InventoryKind.FLIGHT

    def can_reserve(self, quantity: int) -> bool:
        return quantity >= 1 and self.available >= quantity

    def reserve(self, quantity: int) -> None:
        """Decrementa el disponible; falla si no alcanza."""
        if quantity < 1:
            raise ValidationError("quantity", "debe ser >= 1")
        if self.available < quantity:
            raise InsufficientInventoryError(self.id, quantity, self.available)
        self.available -= quantity

    def release(self, quantity: int) -> int:
        """
        Restaura unidades sin exceder la capacidad.

        Returns:
            Número de unidades efectivamente restauradas.
        """
        restored = max(0, min(quantity, self.capacity - self.available))
        self.available += restored
        return restored

    def continues_into(self, other: "InventoryUnit") -> bool:
        """
        Verifica que `other` sea el regreso lógico de este vuelo.

        El regreso sale del aeropuerto de llegada, llega al de salida y parte
        estrictamente después de la llegada de este tramo.
        """
        if not (self.is_flight and other.is_flight):
            return False
        if self.arrival_time is None or other.departure_time is None:
            return False
        return (
            other.departure_airport == self.arrival_airport
            and other.arrival_airport == self.departure_airport
            and other.departure_time > self.arrival_time
        )
