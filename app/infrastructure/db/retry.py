"""
Reintento de unidades transaccionales ante deadlocks y bloqueos transitorios.

SQLAlchemyTransactionManager.run envuelve cada unidad completa con
`retry_on_deadlock`; la unidad se re-ejecuta desde el principio, así que
no debe tener efectos fuera de la base de datos.
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.exc import DBAPIError

logger = logging.getLogger(__name__)

T = TypeVar('T')

# MySQL: deadlock found, lock wait timeout
MYSQL_DEADLOCK_ERROR = "1213"
MYSQL_LOCK_WAIT_TIMEOUT = "1205"

# PostgreSQL SQLSTATEs: deadlock_detected, serialization_failure
PG_DEADLOCK_DETECTED = "40P01"
PG_SERIALIZATION_FAILURE = "40001"

SQLITE_BUSY_MESSAGE = "database is locked"

RETRYABLE_MARKERS = (
    MYSQL_DEADLOCK_ERROR,
    MYSQL_LOCK_WAIT_TIMEOUT,
    PG_DEADLOCK_DETECTED,
    PG_SERIALIZATION_FAILURE,
    SQLITE_BUSY_MESSAGE,
)


def is_deadlock_error(error: BaseException) -> bool:
    """True si el error es un conflicto de bloqueo que vale la pena reintentar."""
    if not isinstance(error, DBAPIError):
        return False
    message = str(error)
    return any(marker in message for marker in RETRYABLE_MARKERS)


async def retry_on_deadlock(
    func: Callable[[], Awaitable[T]],
    max_attempts: int = 3,
    base_delay: float = 0.1,
) -> T:
    """
    Ejecuta `func` y la repite ante deadlock con backoff exponencial.

    Espera base_delay * 2**intento entre intentos. Cualquier otro error, o
    el deadlock del último intento, se propaga sin cambios.
    """
    attempt = 0
    while True:
        attempt += 1
        try:
            return await func()
        except DBAPIError as exc:
            if not is_deadlock_error(exc):
                raise
            if attempt >= max_attempts:
                logger.error(
                    "Database deadlock persists after max retries",
                    extra={"attempts": attempt, "error": str(exc)},
                )
                raise

            delay = base_delay * (2 ** (attempt - 1))
            logger.warning(
                "Database deadlock detected, retrying",
                extra={
                    "attempt": attempt,
                    "max_attempts": max_attempts,
                    "retry_delay": delay,
                    "error": str(exc),
                },
            )
            await asyncio.sleep(delay)
