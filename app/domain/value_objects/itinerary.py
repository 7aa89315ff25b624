"""
Value Objects de itinerario.

Un booking referencia una o dos unidades de inventario. En lugar de un segundo
campo nullable se modela como variante etiquetada, de modo que "ambos o
ninguno" queda garantizado por la estructura.
"""

from dataclasses import dataclass
from datetime import datetime

from app.domain.value_objects.stay_range import StayRange


@dataclass(frozen=True)
class OneWay:
    """Vuelo sólo de ida."""

    outbound_unit_id: str

    @property
    def unit_ids(self) -> tuple[str, ...]:
        return (self.outbound_unit_id,)


@dataclass(frozen=True)
class RoundTrip:
    """Vuelo de ida y regreso; ambos tramos son obligatorios."""

    outbound_unit_id: str
    return_unit_id: str

    def __post_init__(self) -> None:
        if self.outbound_unit_id == self.return_unit_id:
            raise ValueError("outbound y return no pueden ser la misma unidad")

    @property
    def unit_ids(self) -> tuple[str, ...]:
        return (self.outbound_unit_id, self.return_unit_id)


@dataclass(frozen=True)
class HotelStay:
    """Habitaciones de un hotel para un rango de fechas."""

    hotel_unit_id: str
    stay: StayRange

    @property
    def unit_ids(self) -> tuple[str, ...]:
        return (self.hotel_unit_id,)

    @property
    def check_in(self) -> datetime:
        return self.stay.check_in

    @property
    def check_out(self) -> datetime:
        return self.stay.check_out


Itinerary = OneWay | RoundTrip | HotelStay
