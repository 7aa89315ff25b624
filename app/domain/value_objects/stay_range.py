"""Value Object StayRange - rango check-in/check-out de una estadía de hotel."""

import math
from dataclasses import dataclass
from datetime import datetime, timedelta


@dataclass(frozen=True)
class StayRange:
    """
    Value Object inmutable que representa una estadía.

    Attributes:
        check_in: Fecha/hora de entrada.
        check_out: Fecha/hora de salida.
    """

    check_in: datetime
    check_out: datetime

    def __post_init__(self) -> None:
        if self.check_in >= self.check_out:
            raise ValueError(
                f"check_in debe ser anterior a check_out: {self.check_in} >= {self.check_out}"
            )

    @property
    def duration(self) -> timedelta:
        return self.check_out - self.check_in

    @property
    def nights(self) -> int:
        """
        Calcula las noches de la estadía.

        Regla de negocio: cualquier fracción de día cuenta como noche completa.
        """
        return math.ceil(self.duration.total_seconds() / 86400)

    def starts_before(self, moment: datetime) -> bool:
        return self.check_in < moment

    def __str__(self) -> str:
        return f"{self.check_in.isoformat()} -> {self.check_out.isoformat()}"
