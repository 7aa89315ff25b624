"""Value Object Money - representa un valor monetario con su moneda."""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from app.domain.errors import InvalidMoneyError


@dataclass(frozen=True)
class Money:
    """
    Value Object inmutable que representa un monto monetario.

    Attributes:
        amount: Monto decimal (hasta 2 decimales).
        currency_code: Código ISO 4217 de la moneda (ej: NGN, USD, EUR).
    """

    amount: Decimal
    currency_code: str

    def __post_init__(self) -> None:
        if not isinstance(self.amount, Decimal):
            object.__setattr__(self, "amount", Decimal(str(self.amount)))

        if len(self.currency_code) != 3:
            raise InvalidMoneyError(f"currency_code debe ser de 3 caracteres: {self.currency_code}")

        if self.amount < 0:
            raise InvalidMoneyError(f"amount no puede ser negativo: {self.amount}")

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            raise TypeError(f"No se puede sumar Money con {type(other)}")
        if self.currency_code != other.currency_code:
            raise InvalidMoneyError(
                f"No se pueden sumar montos de diferentes monedas: "
                f"{self.currency_code} vs {other.currency_code}"
            )
        return Money(amount=self.amount + other.amount, currency_code=self.currency_code)

    def __mul__(self, factor: int) -> "Money":
        if not isinstance(factor, int) or isinstance(factor, bool):
            raise TypeError(f"Money solo se multiplica por enteros, no {type(factor)}")
        return Money(amount=self.amount * factor, currency_code=self.currency_code)

    def __str__(self) -> str:
        return f"{self.amount:.2f} {self.currency_code}"

    @classmethod
    def from_minor_units(cls, minor: int, currency_code: str) -> "Money":
        """Crea un Money desde unidades menores (kobo, centavos)."""
        return cls(amount=Decimal(minor) / 100, currency_code=currency_code)

    def to_minor_units(self) -> int:
        """
        Convierte a unidades menores redondeando al entero más cercano.

        Es el valor contra el que se compara el monto reportado por el gateway.
        """
        return int((self.amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
