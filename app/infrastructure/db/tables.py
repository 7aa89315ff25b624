from sqlalchemy import (
    JSON,
    CheckConstraint,
    Column,
    DateTime,
    Integer,
    MetaData,
    Numeric,
    String,
    Table,
    UniqueConstraint,
)

metadata = MetaData()

inventory_units = Table(
    "inventory_units",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("kind", String(16), nullable=False),
    Column("code", String(64), nullable=False),
    Column("capacity", Integer, nullable=False),
    Column("available", Integer, nullable=False),
    Column("unit_price", Numeric(12, 2), nullable=False),
    Column("currency_code", String(3), nullable=False),
    Column("departure_airport", String(3)),
    Column("arrival_airport", String(3)),
    Column("departure_time", DateTime(timezone=True)),
    Column("arrival_time", DateTime(timezone=True)),
    Column("location", String(255)),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
    CheckConstraint("available >= 0 AND available <= capacity", name="ck_inventory_available"),
)

bookings = Table(
    "bookings",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("user_id", String(64), nullable=False, index=True),
    Column("kind", String(16), nullable=False),
    Column("itinerary", JSON, nullable=False),
    Column("quantity", Integer, nullable=False),
    Column("total_price", Numeric(12, 2), nullable=False),
    Column("currency_code", String(3), nullable=False),
    Column("booking_status", String(16), nullable=False),
    Column("payment_status", String(16), nullable=False),
    Column("gateway_reference", String(100), unique=True),
    Column("passengers", JSON),
    Column("lock_version", Integer, nullable=False, default=0),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

payment_ledger = Table(
    "payment_ledger",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("reference", String(100), nullable=False, unique=True),
    Column("booking_id", String(36), nullable=False, index=True),
    Column("booking_kind", String(16), nullable=False),
    Column("user_id", String(64), nullable=False),
    Column("amount", Numeric(12, 2), nullable=False),
    Column("currency_code", String(3), nullable=False),
    Column("status", String(16), nullable=False),
    Column("channel", String(32)),
    Column("paid_at", DateTime(timezone=True)),
    Column("failure_reason", String(500)),
    Column("created_at", DateTime(timezone=True)),
    Column("updated_at", DateTime(timezone=True)),
)

idempotency_keys = Table(
    "idempotency_keys",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("scope", String(32), nullable=False),
    Column("idem_key", String(128), nullable=False),
    Column("request_hash", String(64), nullable=False),
    Column("response_json", JSON),
    Column("http_status", Integer),
    Column("booking_id", String(36)),
    UniqueConstraint("scope", "idem_key", name="uq_idempotency_scope_key"),
)
