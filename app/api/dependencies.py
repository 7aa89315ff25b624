from functools import lru_cache

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.api.deps import AsyncSessionLocal
from app.application.interfaces.booking_repo import BookingRepo
from app.application.interfaces.clock import Clock, SystemClock
from app.application.interfaces.idempotency_repo import IdempotencyRepo
from app.application.interfaces.inventory_repo import InventoryRepo
from app.application.interfaces.payment_gateway import PaymentGateway
from app.application.interfaces.payment_ledger_repo import PaymentLedgerRepo
from app.application.interfaces.transaction_manager import TransactionManager
from app.application.use_cases.booking_queries import (
    GetBookingUseCase,
    ListBookingsUseCase,
    ListPaymentsUseCase,
)
from app.application.use_cases.cancel_booking import CancelBookingUseCase
from app.application.use_cases.handle_gateway_webhook import HandleGatewayWebhookUseCase
from app.application.use_cases.manage_inventory import (
    CreateInventoryUnitUseCase,
    DeleteInventoryUnitUseCase,
    GetInventoryUnitUseCase,
)
from app.application.use_cases.purge_booking import PurgeBookingUseCase
from app.application.use_cases.reserve_booking import ReserveBookingUseCase
from app.application.use_cases.settle_payment import SettlePaymentUseCase
from app.application.use_cases.start_payment_session import StartPaymentSessionUseCase
from app.application.use_cases.update_booking_status import UpdateBookingStatusUseCase
from app.application.use_cases.verify_payment import VerifyPaymentUseCase
from app.config import Settings, get_settings
from app.infrastructure.db.repositories.booking_repo_sql import BookingRepoSQL
from app.infrastructure.db.repositories.idempotency_repo_sql import IdempotencyRepoSQL
from app.infrastructure.db.repositories.inventory_repo_sql import InventoryRepoSQL
from app.infrastructure.db.repositories.payment_ledger_repo_sql import PaymentLedgerRepoSQL
from app.infrastructure.db.transaction_manager import SQLAlchemyTransactionManager
from app.infrastructure.gateways.paystack_gateway import PaystackGateway
from app.infrastructure.gateways.token_cache import AccessTokenCache, static_token_fetcher
from app.infrastructure.in_memory.booking_repo import InMemoryBookingRepo
from app.infrastructure.in_memory.idempotency_repo import InMemoryIdempotencyRepo
from app.infrastructure.in_memory.inventory_repo import InMemoryInventoryRepo
from app.infrastructure.in_memory.payment_gateway import StubPaymentGateway
from app.infrastructure.in_memory.payment_ledger_repo import InMemoryPaymentLedgerRepo
from app.infrastructure.in_memory.store import InMemoryStore
from app.infrastructure.in_memory.transaction_manager import InMemoryTransactionManager


async def get_session(settings: Settings = Depends(get_settings)) -> AsyncSession | None:
    if settings.use_in_memory:
        yield None
        return
    async with AsyncSessionLocal() as session:
        yield session


@lru_cache(maxsize=1)
def _in_memory_bundle():
    settings = get_settings()
    store = InMemoryStore()
    return {
        "store": store,
        "inventory_repo": InMemoryInventoryRepo(store),
        "booking_repo": InMemoryBookingRepo(store),
        "payment_ledger_repo": InMemoryPaymentLedgerRepo(store),
        "idempotency_repo": InMemoryIdempotencyRepo(store),
        "tx_manager": InMemoryTransactionManager(store),
        "payment_gateway": StubPaymentGateway(
            webhook_secret=settings.webhook_secret or "stub-webhook-secret"
        ),
        "clock": SystemClock(),
    }


@lru_cache(maxsize=1)
def get_paystack_gateway() -> PaystackGateway:
    # Una instancia por proceso: el breaker y el cache de token se comparten.
    settings = get_settings()
    return PaystackGateway(
        base_url=settings.paystack_base_url,
        token_cache=AccessTokenCache(
            fetcher=static_token_fetcher(settings.paystack_secret_key),
            clock=SystemClock(),
        ),
        webhook_secret=settings.webhook_secret,
        callback_url=settings.paystack_callback_url,
        timeout_seconds=settings.paystack_timeout_seconds,
    )


def build_use_cases(
    *,
    inventory_repo: InventoryRepo,
    booking_repo: BookingRepo,
    payment_ledger_repo: PaymentLedgerRepo,
    idempotency_repo: IdempotencyRepo,
    tx_manager: TransactionManager,
    payment_gateway: PaymentGateway,
    clock: Clock,
    default_currency: str = "NGN",
) -> dict:
    start_payment_session = StartPaymentSessionUseCase(
        booking_repo=booking_repo,
        payment_gateway=payment_gateway,
        transaction_manager=tx_manager,
        clock=clock,
    )
    settle_payment = SettlePaymentUseCase(
        booking_repo=booking_repo,
        payment_ledger_repo=payment_ledger_repo,
        transaction_manager=tx_manager,
        clock=clock,
    )
    return {
        "reserve_booking": ReserveBookingUseCase(
            inventory_repo=inventory_repo,
            booking_repo=booking_repo,
            idempotency_repo=idempotency_repo,
            transaction_manager=tx_manager,
            start_payment_session=start_payment_session,
            clock=clock,
        ),
        "start_payment_session": start_payment_session,
        "settle_payment": settle_payment,
        "verify_payment": VerifyPaymentUseCase(
            booking_repo=booking_repo,
            payment_gateway=payment_gateway,
            settle_payment=settle_payment,
            transaction_manager=tx_manager,
        ),
        "handle_webhook": HandleGatewayWebhookUseCase(
            booking_repo=booking_repo,
            payment_gateway=payment_gateway,
            settle_payment=settle_payment,
            transaction_manager=tx_manager,
        ),
        "cancel_booking": CancelBookingUseCase(
            inventory_repo=inventory_repo,
            booking_repo=booking_repo,
            payment_ledger_repo=payment_ledger_repo,
            transaction_manager=tx_manager,
            clock=clock,
        ),
        "purge_booking": PurgeBookingUseCase(
            inventory_repo=inventory_repo,
            booking_repo=booking_repo,
            payment_ledger_repo=payment_ledger_repo,
            transaction_manager=tx_manager,
        ),
        "update_booking_status": UpdateBookingStatusUseCase(
            inventory_repo=inventory_repo,
            booking_repo=booking_repo,
            payment_ledger_repo=payment_ledger_repo,
            transaction_manager=tx_manager,
            clock=clock,
        ),
        "get_booking": GetBookingUseCase(booking_repo=booking_repo),
        "list_bookings": ListBookingsUseCase(booking_repo=booking_repo),
        "list_payments": ListPaymentsUseCase(payment_ledger_repo=payment_ledger_repo),
        "create_inventory_unit": CreateInventoryUnitUseCase(
            inventory_repo=inventory_repo,
            transaction_manager=tx_manager,
            clock=clock,
            default_currency=default_currency,
        ),
        "get_inventory_unit": GetInventoryUnitUseCase(inventory_repo=inventory_repo),
        "delete_inventory_unit": DeleteInventoryUnitUseCase(
            inventory_repo=inventory_repo,
            transaction_manager=tx_manager,
        ),
    }


def get_use_cases(
    settings: Settings = Depends(get_settings),
    session: AsyncSession | None = Depends(get_session),
):
    if settings.use_in_memory:
        bundle = _in_memory_bundle()
        return build_use_cases(
            inventory_repo=bundle["inventory_repo"],
            booking_repo=bundle["booking_repo"],
            payment_ledger_repo=bundle["payment_ledger_repo"],
            idempotency_repo=bundle["idempotency_repo"],
            tx_manager=bundle["tx_manager"],
            payment_gateway=bundle["payment_gateway"],
            clock=bundle["clock"],
            default_currency=settings.default_currency,
        )

    if not session:
        raise RuntimeError("DB session not available")

    return build_use_cases(
        inventory_repo=InventoryRepoSQL(session),
        booking_repo=BookingRepoSQL(session),
        payment_ledger_repo=PaymentLedgerRepoSQL(session),
        idempotency_repo=IdempotencyRepoSQL(session),
        tx_manager=SQLAlchemyTransactionManager(
            session,
            retry_attempts=settings.deadlock_retry_attempts,
            retry_base_delay=settings.deadlock_retry_base_delay,
        ),
        payment_gateway=get_paystack_gateway(),
        clock=SystemClock(),
        default_currency=settings.default_currency,
    )
