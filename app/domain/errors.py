"""Excepciones de dominio para el motor de reservas de viajes."""


class DomainError(Exception):
    """Clase base para todos los errores de dominio."""

    def __init__(self, message: str, code: str | None = None):
        self.message = message
        self.code = code or self.__class__.__name__
        super().__init__(self.message)


# === Errores de Validación ===


class ValidationError(DomainError):
    """Error de validación de datos de entrada."""

    def __init__(self, field: str, message: str):
        super().__init__(
            message=f"Validación fallida en '{field}': {message}",
            code="VALIDATION_ERROR",
        )
        self.field = field


class InvalidRouteError(DomainError):
    """El vuelo de regreso no es continuación lógica del vuelo de ida."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_ROUTE")


class InvalidMoneyError(DomainError):
    """Monto monetario inválido."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_MONEY")


# === Errores de Inventario ===


class InventoryUnitNotFoundError(DomainError):
    """La unidad de inventario (vuelo u hotel) no existe."""

    def __init__(self, unit_id: str):
        super().__init__(
            message=f"Unidad de inventario no encontrada: {unit_id}",
            code="INVENTORY_UNIT_NOT_FOUND",
        )
        self.unit_id = unit_id


class InsufficientInventoryError(DomainError):
    """No hay suficientes asientos o habitaciones disponibles."""

    def __init__(self, unit_id: str, requested: int, available: int):
        super().__init__(
            message=(
                f"Inventario insuficiente en {unit_id}: "
                f"solicitado {requested}, disponible {available}"
            ),
            code="INSUFFICIENT_INVENTORY",
        )
        self.unit_id = unit_id
        self.requested = requested
        self.available = available

    @property
    def shortfall(self) -> int:
        return max(0, self.requested - self.available)


# === Errores de Booking ===


class BookingNotFoundError(DomainError):
    """El booking no existe."""

    def __init__(self, booking_id: str):
        super().__init__(
            message=f"Booking no encontrado: {booking_id}",
            code="BOOKING_NOT_FOUND",
        )
        self.booking_id = booking_id


class AlreadyCancelledError(DomainError):
    """El booking ya fue cancelado."""

    def __init__(self, booking_id: str):
        super().__init__(
            message=f"El booking {booking_id} ya está cancelado",
            code="ALREADY_CANCELLED",
        )
        self.booking_id = booking_id


class ForbiddenError(DomainError):
    """El principal no tiene permiso para operar sobre el recurso."""

    def __init__(self, message: str = "No autorizado para operar sobre este recurso"):
        super().__init__(message=message, code="FORBIDDEN")


class OptimisticLockError(DomainError):
    """Conflicto de concurrencia al actualizar el booking."""

    def __init__(self, booking_id: str, expected_version: int, actual_version: int | None):
        super().__init__(
            message=f"Conflicto de concurrencia en booking {booking_id}: "
            f"versión esperada {expected_version}, versión actual {actual_version}",
            code="OPTIMISTIC_LOCK_ERROR",
        )
        self.booking_id = booking_id
        self.expected_version = expected_version
        self.actual_version = actual_version


class InvalidBookingStatusError(DomainError):
    """La combinación de estados solicitada no es válida."""

    def __init__(self, message: str):
        super().__init__(message=message, code="INVALID_BOOKING_STATUS")


# === Errores de Pago ===


class ReferenceAlreadyAssignedError(DomainError):
    """El booking ya tiene una referencia de gateway distinta (inmutable)."""

    def __init__(self, booking_id: str, current_reference: str):
        super().__init__(
            message=f"El booking {booking_id} ya tiene referencia {current_reference}",
            code="REFERENCE_ALREADY_ASSIGNED",
        )
        self.booking_id = booking_id
        self.current_reference = current_reference


class ReferenceMismatchError(DomainError):
    """La referencia recibida no coincide con la almacenada en el booking."""

    code = "REFERENCE_MISMATCH"

    def __init__(self, booking_id: str, expected: str | None, received: str):
        super().__init__(
            message=(
                f"Referencia no coincide para booking {booking_id}: "
                f"almacenada {expected}, recibida {received}"
            ),
            code=self.code,
        )
        self.booking_id = booking_id
        self.expected = expected
        self.received = received


class AmountMismatchError(DomainError):
    """El monto pagado no coincide con el total del booking."""

    code = "AMOUNT_MISMATCH"

    def __init__(self, booking_id: str, expected_minor: int, received_minor: int):
        super().__init__(
            message=(
                f"Monto no coincide para booking {booking_id}: "
                f"esperado {expected_minor}, recibido {received_minor}"
            ),
            code=self.code,
        )
        self.booking_id = booking_id
        self.expected_minor = expected_minor
        self.received_minor = received_minor


class PaymentNotConfirmedError(DomainError):
    """El pago no pudo confirmarse; el detalle queda en el ledger de auditoría."""

    code = "PAYMENT_NOT_CONFIRMED"

    def __init__(self, booking_id: str, reason: str | None = None):
        super().__init__(
            message="Payment could not be confirmed, please contact support",
            code=self.code,
        )
        self.booking_id = booking_id
        self.reason = reason


class PaymentFailedError(DomainError):
    """El gateway reportó afirmativamente que el pago falló."""

    def __init__(self, reference: str, gateway_message: str | None = None):
        super().__init__(
            message=gateway_message or "Payment verification failed",
            code="PAYMENT_FAILED",
        )
        self.reference = reference


class UpstreamUnavailableError(DomainError):
    """El gateway de pagos no está disponible (red, auth o circuito abierto)."""

    def __init__(self, operation: str, detail: str | None = None):
        super().__init__(
            message=f"Gateway de pagos no disponible durante '{operation}': {detail or 'sin detalle'}",
            code="UPSTREAM_UNAVAILABLE",
        )
        self.operation = operation
        self.detail = detail


class InvalidWebhookSignatureError(DomainError):
    """La firma HMAC del webhook no es válida o falta."""

    def __init__(self, message: str = "Invalid webhook signature"):
        super().__init__(message=message, code="INVALID_WEBHOOK_SIGNATURE")


# === Errores de Idempotencia ===


class IdempotencyConflictError(DomainError):
    """Conflicto de idempotencia: mismo key pero diferente request."""

    def __init__(self, idem_key: str, scope: str):
        super().__init__(
            message=f"Idempotency conflict: key '{idem_key}' in scope '{scope}' "
            f"already used with a different payload",
            code="IDEMPOTENCY_CONFLICT",
        )
        self.idem_key = idem_key
        self.scope = scope
