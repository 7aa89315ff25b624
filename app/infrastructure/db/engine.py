from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from app.config import Settings


def build_engine(settings: Settings) -> AsyncEngine:
    url = settings.database_url or "sqlite+aiosqlite:///:memory:"
    options: dict = {"echo": settings.sql_echo, "pool_pre_ping": True}
    if not url.startswith("sqlite"):
        options["pool_recycle"] = 3600
    engine = create_async_engine(url, **options)
    if url.startswith("sqlite"):
        use_immediate_transactions(engine)
    return engine


def use_immediate_transactions(engine: AsyncEngine) -> None:
    """
    SQLite: cada transacción abre con BEGIN IMMEDIATE.

    El driver difiere el BEGIN hasta la primera escritura y SQLite ignora
    FOR UPDATE; sin esto dos conciliaciones pueden leer el mismo
    lock_version antes de que una escriba.
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _disable_driver_begin(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine.sync_engine, "begin")
    def _begin_immediate(conn):
        conn.exec_driver_sql("BEGIN IMMEDIATE")


def build_sessionmaker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
