"""Value Object GatewayReference - referencia única de una sesión de pago."""

import time
import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class GatewayReference:
    """
    Value Object inmutable con la referencia que el gateway usa para el pago.

    Formato: PREFIJO-8 hex-epoch en ms (ej: FLT-1a2b3c4d-1718000000000).
    Una vez asignada a un booking es la única llave válida para conciliar
    notificaciones entrantes.
    """

    value: str

    MAX_LENGTH = 100

    def __post_init__(self) -> None:
        if not self.value or not self.value.strip():
            raise ValueError("gateway reference no puede estar vacía")

        if len(self.value) > self.MAX_LENGTH:
            raise ValueError(f"gateway reference excede {self.MAX_LENGTH} caracteres")

    def __str__(self) -> str:
        return self.value

    @classmethod
    def generate(cls, prefix: str) -> "GatewayReference":
        """Genera una referencia nueva con el prefijo del tipo de booking."""
        return cls(value=f"{prefix}-{uuid.uuid4().hex[:8]}-{int(time.time() * 1000)}")
