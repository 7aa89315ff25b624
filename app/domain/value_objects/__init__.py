"""Value Objects del dominio de reservas."""

from app.domain.value_objects.gateway_reference import GatewayReference
from app.domain.value_objects.itinerary import HotelStay, Itinerary, OneWay, RoundTrip
from app.domain.value_objects.money import Money
from app.domain.value_objects.stay_range import StayRange

__all__ = [
    "GatewayReference",
    "HotelStay",
    "Itinerary",
    "Money",
    "OneWay",
    "RoundTrip",
    "StayRange",
]
