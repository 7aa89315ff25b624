"""
Reintento ante deadlock.

Verifica que:
- Se detectan los códigos MySQL 1213/1205, los SQLSTATE de PostgreSQL y el
  bloqueo de SQLite
- Se reintenta con backoff exponencial y se rinde tras max_attempts
- El transaction manager SQL reintenta la unidad completa, nunca una anidada
"""

import time
from unittest.mock import patch

import pytest
from sqlalchemy.exc import OperationalError

from app.infrastructure.db.retry import is_deadlock_error, retry_on_deadlock
from app.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager


def _deadlock(code: str = "1213", message: str = "Deadlock found") -> OperationalError:
    return OperationalError(
        "statement",
        "params",
        f"(asyncmy.errors.OperationalError) ({code}, '{message}')",
        connection_invalidated=False,
    )


class TestDeadlockDetection:
    @pytest.mark.parametrize(
        "error",
        [
            _deadlock("1213", "Deadlock found when trying to get lock"),
            _deadlock("1205", "Lock wait timeout exceeded"),
            _deadlock("40P01", "deadlock detected"),
            _deadlock("40001", "could not serialize access"),
            OperationalError("statement", "params", "database is locked"),
        ],
    )
    def test_retryable_errors(self, error):
        assert is_deadlock_error(error)

    def test_ignore_non_deadlock_errors(self):
        assert not is_deadlock_error(Exception("Deadlock found 1213"))
        assert not is_deadlock_error(_deadlock("2013", "Lost connection to MySQL server"))


class TestRetryLogic:
    @pytest.mark.asyncio
    async def test_success_on_first_attempt(self):
        call_count = 0

        async def successful_func():
            nonlocal call_count
            call_count += 1
            return "success"

        assert await retry_on_deadlock(successful_func, max_attempts=3) == "success"
        assert call_count == 1

    @pytest.mark.asyncio
    async def test_retry_until_success(self):
        call_count = 0

        async def fails_twice_then_succeeds():
            nonlocal call_count
            call_count += 1
            if call_count <= 2:
                raise _deadlock()
            return "success_after_retries"

        result = await retry_on_deadlock(fails_twice_then_succeeds, max_attempts=3, base_delay=0.01)

        assert result == "success_after_retries"
        assert call_count == 3

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        call_count = 0

        async def always_fails():
            nonlocal call_count
            call_count += 1
            raise _deadlock()

        with pytest.raises(OperationalError):
            await retry_on_deadlock(always_fails, max_attempts=3, base_delay=0.01)

        assert call_count == 3

    @pytest.mark.asyncio
    async def test_non_deadlock_error_not_retried(self):
        call_count = 0

        async def raises_other_db_error():
            nonlocal call_count
            call_count += 1
            raise _deadlock("2013", "Lost connection")

        with pytest.raises(OperationalError):
            await retry_on_deadlock(raises_other_db_error, max_attempts=3, base_delay=0.01)

        assert call_count == 1

    @pytest.mark.asyncio
    @pytest.mark.slow
    async def test_exponential_backoff(self):
        call_times = []

        async def always_fails():
            call_times.append(time.monotonic())
            raise _deadlock()

        with pytest.raises(OperationalError):
            await retry_on_deadlock(always_fails, max_attempts=3, base_delay=0.1)

        assert len(call_times) == 3
        assert 0.08 < call_times[1] - call_times[0] < 0.3
        assert 0.18 < call_times[2] - call_times[1] < 0.5

    @pytest.mark.asyncio
    async def test_logs_each_retry(self):
        with patch("app.infrastructure.db.retry.logger") as mock_logger:
            call_count = 0

            async def fails_once():
                nonlocal call_count
                call_count += 1
                if call_count == 1:
                    raise _deadlock()
                return "success"

            await retry_on_deadlock(fails_once, max_attempts=3, base_delay=0.01)

        assert mock_logger.warning.call_count == 1
        assert "deadlock" in mock_logger.warning.call_args[0][0].lower()
        assert mock_logger.warning.call_args.kwargs["extra"]["attempt"] == 1


@pytest.mark.integration
class TestTransactionManagerRetry:
    @pytest.mark.asyncio
    async def test_run_retries_whole_unit(self, sql_sessionmaker):
        attempts = 0

        async with sql_sessionmaker() as session:
            tx = SQLAlchemyTransactionManager(session, retry_attempts=3, retry_base_delay=0.01)

            async def work():
                nonlocal attempts
                attempts += 1
                assert session.in_transaction()
                if attempts == 1:
                    raise _deadlock()
                return "done"

            assert await tx.run(work) == "done"
            assert not session.in_transaction()

        assert attempts == 2

    @pytest.mark.asyncio
    async def test_nested_run_is_not_retried(self, sql_sessionmaker):
        attempts = 0

        async with sql_sessionmaker() as session:
            tx = SQLAlchemyTransactionManager(session, retry_attempts=3, retry_base_delay=0.01)

            async def inner():
                nonlocal attempts
                attempts += 1
                raise _deadlock()

            async def outer():
                return await tx.run(inner)

            with pytest.raises(OperationalError):
                await tx.run(outer)

        # El reintento ocurre en la unidad externa: 3 intentos, uno por cada run externo.
        assert attempts == 3
