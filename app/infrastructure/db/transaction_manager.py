from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from typing import TypeVar

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.transaction_manager import TransactionManager
from app.infrastructure.db.retry import retry_on_deadlock

T = TypeVar("T")


class SQLAlchemyTransactionManager(TransactionManager):
    def __init__(
        self,
        session: AsyncSession,
        retry_attempts: int = 3,
        retry_base_delay: float = 0.1,
    ) -> None:
        self._session = session
        self._retry_attempts = retry_attempts
        self._retry_base_delay = retry_base_delay

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        if self._session.in_transaction():
            yield
        else:
            async with self._session.begin():
                yield

    async def run(self, work: Callable[[], Awaitable[T]]) -> T:
        if self._session.in_transaction():
            # Anidada: un reintento aquí repetiría sólo parte de la unidad.
            return await work()

        async def attempt() -> T:
            async with self.start():
                return await work()

        return await retry_on_deadlock(
            attempt,
            max_attempts=self._retry_attempts,
            base_delay=self._retry_base_delay,
        )
