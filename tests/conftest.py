"""
Pytest configuration and shared fixtures.

Este módulo provee fixtures reutilizables para:
- Componentes in-memory (store, repositorios, gateway stub, reloj fijo)
- Casos de uso cableados igual que en la API
- Base de datos SQLite (aiosqlite) para los repositorios SQL
- Cliente HTTP de prueba (FastAPI TestClient) y tokens JWT
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import AsyncGenerator, Generator

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.api.dependencies import _in_memory_bundle, build_use_cases
from app.api.security import create_access_token
from app.application.interfaces.clock import FakeClock
from app.application.interfaces.principal import ADMIN, Principal
from app.config import get_settings
from app.domain.entities.inventory_unit import InventoryKind, InventoryUnit
from app.infrastructure.db.engine import use_immediate_transactions
from app.infrastructure.db.tables import metadata
from app.infrastructure.in_memory import (
    InMemoryBookingRepo,
    InMemoryIdempotencyRepo,
    InMemoryInventoryRepo,
    InMemoryPaymentLedgerRepo,
    InMemoryStore,
    InMemoryTransactionManager,
    StubPaymentGateway,
)

NOW = datetime(2030, 1, 1, tzinfo=timezone.utc)


# ============================================================================
# FACTORIES DE INVENTARIO
# ============================================================================

def make_flight(
    unit_id: str,
    *,
    capacity: int = 2,
    available: int | None = None,
    price: str = "100.00",
    departure_airport: str = "LOS",
    arrival_airport: str = "ABV",
    departure_time: datetime | None = None,
    arrival_time: datetime | None = None,
) -> InventoryUnit:
    departure_time = departure_time or NOW + timedelta(days=30)
    return InventoryUnit(
        id=unit_id,
        kind=InventoryKind.FLIGHT,
        code=f"NG-{unit_id}",
        capacity=capacity,
        available=capacity if available is None else available,
        unit_price=Decimal(price),
        currency_code="NGN",
        departure_airport=departure_airport,
        arrival_airport=arrival_airport,
        departure_time=departure_time,
        arrival_time=arrival_time or departure_time + timedelta(hours=1),
        created_at=NOW,
        updated_at=NOW,
    )


def make_hotel(
    unit_id: str,
    *,
    capacity: int = 5,
    available: int | None = None,
    price: str = "50.00",
) -> InventoryUnit:
    return InventoryUnit(
        id=unit_id,
        kind=InventoryKind.HOTEL,
        code=f"HTL-{unit_id}",
        capacity=capacity,
        available=capacity if available is None else available,
        unit_price=Decimal(price),
        currency_code="NGN",
        location="Lagos",
        created_at=NOW,
        updated_at=NOW,
    )


# ============================================================================
# FIXTURES IN-MEMORY
# ============================================================================

@pytest.fixture
def store() -> InMemoryStore:
    """Store vacío por test."""
    return InMemoryStore()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(NOW)


@pytest.fixture
def flight_factory():
    return make_flight


@pytest.fixture
def hotel_factory():
    return make_hotel


@pytest.fixture
def gateway() -> StubPaymentGateway:
    return StubPaymentGateway()


@pytest.fixture
def use_cases(store: InMemoryStore, gateway: StubPaymentGateway, clock: FakeClock) -> dict:
    """
    Casos de uso cableados sobre el store in-memory.

    Mismo cableado que `get_use_cases`, con reloj fijo y gateway stub
    accesibles desde el test.
    """
    return build_use_cases(
        inventory_repo=InMemoryInventoryRepo(store),
        booking_repo=InMemoryBookingRepo(store),
        payment_ledger_repo=InMemoryPaymentLedgerRepo(store),
        idempotency_repo=InMemoryIdempotencyRepo(store),
        tx_manager=InMemoryTransactionManager(store),
        payment_gateway=gateway,
        clock=clock,
    )


@pytest.fixture
def customer() -> Principal:
    return Principal(user_id="user-1", email="ada@example.com", roles=frozenset())


@pytest.fixture
def other_customer() -> Principal:
    return Principal(user_id="user-2", email="bob@example.com", roles=frozenset())


@pytest.fixture
def admin() -> Principal:
    return Principal(user_id="admin-1", email="ops@example.com", roles=frozenset({ADMIN}))


# ============================================================================
# FIXTURES DE BASE DE DATOS
# ============================================================================

@pytest_asyncio.fixture
async def sql_engine(tmp_path) -> AsyncGenerator[AsyncEngine, None]:
    """
    Engine SQLite en archivo temporal con todas las tablas creadas.

    Se usa archivo (no :memory:) para que varias sesiones vean los mismos
    datos, como en los tests de concurrencia.
    """
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'bookings.db'}")
    use_immediate_transactions(engine)
    async with engine.begin() as conn:
        await conn.run_sync(metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def sql_sessionmaker(sql_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(sql_engine, class_=AsyncSession, expire_on_commit=False)


# ============================================================================
# FIXTURES DE API
# ============================================================================

@pytest.fixture
def client() -> Generator[TestClient, None, None]:
    """
    TestClient sobre la app en modo in-memory.

    El bundle in-memory se reconstruye por test para aislar datos.
    """
    from app.main import app

    _in_memory_bundle.cache_clear()
    with TestClient(app) as test_client:
        yield test_client
    _in_memory_bundle.cache_clear()


@pytest.fixture
def bundle(client: TestClient) -> dict:
    """Store y gateway stub que usa la app durante el test."""
    return _in_memory_bundle()


@pytest.fixture
def auth_headers():
    """Factory de headers Authorization con un JWT firmado."""

    def build(user_id: str = "user-1", email: str | None = "ada@example.com", roles=()) -> dict:
        token = create_access_token(get_settings(), user_id=user_id, email=email, roles=roles)
        return {"Authorization": f"Bearer {token}"}

    return build


# ============================================================================
# MARKERS DE PYTEST
# ============================================================================

def pytest_configure(config):
    """
    Configurar markers personalizados de pytest.
    """
    config.addinivalue_line(
        "markers",
        "integration: Tests de integración contra el backend SQL (SQLite)"
    )
    config.addinivalue_line(
        "markers",
        "slow: Tests lentos que pueden tomar varios segundos"
    )
