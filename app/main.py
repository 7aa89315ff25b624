import logging
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from app.api.deps import engine
from app.api.errors import register_error_handlers
from app.api.routers.admin import router as admin_router
from app.api.routers.bookings import router as bookings_router
from app.api.routers.health import router as health_router
from app.api.routers.inventory import router as inventory_router
from app.api.routers.payments import router as payments_router
from app.config import get_settings
from app.infrastructure.db.tables import metadata

settings = get_settings()

# Configure structured logging
logging.basicConfig(
    level=settings.log_level.upper(),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Initialize DB tables (for dev/demo purposes)
    if not settings.use_in_memory:
        async with engine.begin() as conn:
            await conn.run_sync(metadata.create_all)
    logger.info(
        "Travel booking API started",
        extra={"in_memory": settings.use_in_memory},
    )
    yield
    # Cleanup
    await engine.dispose()

app = FastAPI(
    title="Travel Booking API",
    version="0.1.0",
    lifespan=lifespan
)

register_error_handlers(app)


# Global Exception Handler
@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """
    Global exception handler to prevent stack trace exposure to clients.
    All unhandled exceptions are logged internally and return a generic error message.
    """
    error_id = str(uuid.uuid4())

    logger.error(
        "Unhandled exception occurred",
        exc_info=exc,
        extra={
            "error_id": error_id,
            "path": request.url.path,
            "method": request.method,
            "client_host": request.client.host if request.client else None,
        }
    )

    return JSONResponse(
        status_code=500,
        content={
            "detail": "Internal server error",
            "error_id": error_id,
            "message": "An unexpected error occurred. Please contact support with the error_id if the issue persists."
        }
    )


app.include_router(health_router, tags=["Health"])
app.include_router(bookings_router, prefix="/api/v1", tags=["Bookings"])
app.include_router(payments_router, prefix="/api/v1", tags=["Payments"])
app.include_router(inventory_router, prefix="/api/v1", tags=["Inventory"])
app.include_router(admin_router, prefix="/api/v1", tags=["Admin"])
