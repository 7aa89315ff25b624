"""
Circuit Breaker configuration for the payment gateway.

Opens after consecutive transport failures so that reservation and
verification requests fail fast with UpstreamUnavailable instead of piling
up behind a gateway that is down.

Circuit Breaker Pattern:
- CLOSED: Normal operation, requests pass through
- OPEN: Too many failures, requests fail immediately
- HALF_OPEN: Testing if service recovered, limited requests allowed
"""

import logging

from pybreaker import CircuitBreaker, CircuitBreakerError, CircuitBreakerListener

logger = logging.getLogger(__name__)


def log_circuit_state_change(breaker_name: str, old_state: str, new_state: str) -> None:
    logger.warning(
        "Circuit breaker state changed",
        extra={
            "breaker_name": breaker_name,
            "old_state": old_state,
            "new_state": new_state,
        },
    )


class StateChangeLogger(CircuitBreakerListener):
    """Listener that logs circuit breaker state changes."""

    def __init__(self, name: str):
        self.name = name

    def state_change(self, cb, old_state, new_state):
        log_circuit_state_change(
            self.name,
            old_state.name if old_state else "none",
            new_state.name,
        )


def build_payment_breaker(fail_max: int = 5, reset_timeout: int = 60) -> CircuitBreaker:
    """Un breaker por instancia de adaptador."""
    return CircuitBreaker(
        fail_max=fail_max,
        reset_timeout=reset_timeout,
        name="payment_gateway_circuit_breaker",
        listeners=[StateChangeLogger("payment_gateway")],
    )


__all__ = [
    "build_payment_breaker",
    "CircuitBreakerError",
]
