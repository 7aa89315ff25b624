from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import Protocol, TypeVar

T = TypeVar("T")


class TransactionManager(Protocol):
    """
    Unidad atómica sobre ledger de inventario, bookings y ledger de pagos.

    Todo lo ejecutado dentro de `start()` se confirma junto o se revierte
    junto. Llamadas anidadas se unen a la transacción exterior.
    """

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        yield

    async def run(self, work: Callable[[], Awaitable[T]]) -> T:
        """
        Ejecuta `work` dentro de una transacción completa.

        Las implementaciones pueden reintentar la unidad entera ante fallas
        transitorias (deadlocks); `work` debe ser re-ejecutable.
        """
        ...
