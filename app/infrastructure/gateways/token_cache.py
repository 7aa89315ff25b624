import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from datetime import datetime, timedelta

from app.application.interfaces.clock import Clock

logger = logging.getLogger(__name__)

# Devuelve (token, segundos de vida); None = no expira.
TokenFetcher = Callable[[], Awaitable[tuple[str, float | None]]]


@dataclass(frozen=True)
class AccessToken:
    value: str
    expires_at: datetime | None = None


class AccessTokenCache:
    """
    Cache de credenciales Bearer propiedad de una instancia de adaptador.

    El token se considera vencido `skew_seconds` antes de su expiración real
    para no enviarlo en el límite. Peticiones concurrentes comparten un solo
    refresh.
    """

    def __init__(self, fetcher: TokenFetcher, clock: Clock, skew_seconds: float = 5.0) -> None:
        self._fetcher = fetcher
        self._clock = clock
        self._skew = timedelta(seconds=skew_seconds)
        self._token: AccessToken | None = None
        self._lock = asyncio.Lock()

    @property
    def current(self) -> AccessToken | None:
        return self._token

    def _is_fresh(self, token: AccessToken | None) -> bool:
        if token is None:
            return False
        if token.expires_at is None:
            return True
        return self._clock.now() < token.expires_at - self._skew

    async def get(self) -> str:
        token = self._token
        if self._is_fresh(token):
            return token.value

        async with self._lock:
            if self._is_fresh(self._token):
                return self._token.value
            value, expires_in = await self._fetcher()
            expires_at = (
                None if expires_in is None else self._clock.now() + timedelta(seconds=expires_in)
            )
            self._token = AccessToken(value=value, expires_at=expires_at)
            logger.info("Gateway access token refreshed", extra={"expires_at": str(expires_at)})
            return value

    def invalidate(self) -> None:
        self._token = None


def static_token_fetcher(secret: str | None) -> TokenFetcher:
    """Fetcher para gateways autenticados con una llave secreta fija."""

    async def fetch() -> tuple[str, float | None]:
        if not secret:
            raise ValueError("Payment gateway secret key is not configured")
        return secret, None

    return fetch
