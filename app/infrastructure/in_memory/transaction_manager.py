import asyncio
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from contextvars import ContextVar
from typing import TypeVar

from app.application.interfaces.transaction_manager import TransactionManager
from app.infrastructure.in_memory.store import InMemoryStore

T = TypeVar("T")


class InMemoryTransactionManager(TransactionManager):
    """
    Serializa las transacciones sobre el store con un asyncio.Lock.

    Al entrar se toma un snapshot y ante cualquier excepción se restaura, así
    que cada bloque es todo-o-nada. Es re-entrante dentro de la misma tarea.
    """

    def __init__(self, store: InMemoryStore) -> None:
        self._store = store
        self._lock = asyncio.Lock()
        self._active: ContextVar[bool] = ContextVar(f"in_memory_tx_{id(self)}", default=False)

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        if self._active.get():
            yield
            return

        async with self._lock:
            snapshot = self._store.snapshot()
            token = self._active.set(True)
            try:
                yield
            except BaseException:
                self._store.restore(snapshot)
                raise
            finally:
                self._active.reset(token)

    async def run(self, work: Callable[[], Awaitable[T]]) -> T:
        async with self.start():
            return await work()
