"""Autenticación bearer con refresh-and-retry (flujo `httpx.Auth`).

Flujo por request:
1. Pide un token al token-provider y lo adjunta como `Authorization: Bearer`.
2. Si la respuesta es 401, pide un token nuevo y reenvía la misma request
   una sola vez.
3. El resultado del reintento (éxito o fallo) es el resultado final.

El número de intento vive en el generador de cada request; dos requests
concurrentes nunca comparten presupuesto de reintento.
"""

from __future__ import annotations

import logging
import typing

import httpx

from core.errors import AuthRefreshError
from core.interfaces.auth import TokenProvider

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "Authorization"
RETRY_BUDGET = 1


def bearer_value(token: str) -> str:
    return f"Bearer {token}"


def static_token_provider(token: str) -> TokenProvider:
    """Token-provider para un token fijo (p.ej. API key de larga duración)."""

    async def provide() -> str:
        return token

    return provide


class RefreshingBearerAuth(httpx.Auth):
    """Adjunta el bearer y reintenta una vez ante un 401."""

    def __init__(self, token_provider: TokenProvider, *, key: str | None = None) -> None:
        self._token_provider = token_provider
        self._key = key

    async def async_auth_flow(
        self, request: httpx.Request
    ) -> typing.AsyncGenerator[httpx.Request, httpx.Response]:
        for attempt in range(RETRY_BUDGET + 1):
            token = await self._fetch_token(attempt)
            request.headers[AUTHORIZATION_HEADER] = bearer_value(token)

            response = yield request

            if response.status_code != 401:
                return
            if attempt < RETRY_BUDGET:
                logger.info(
                    "401 on %s %s, refreshing token and retrying once",
                    request.method,
                    request.url,
                )

    def sync_auth_flow(self, request: httpx.Request) -> typing.Generator[httpx.Request, httpx.Response, None]:
        raise RuntimeError("RefreshingBearerAuth requires an httpx.AsyncClient")
        yield request  # pragma: no cover

    async def _fetch_token(self, attempt: int) -> str:
        if attempt == 0:
            # Fallo inicial: se propaga tal cual y no se envía nada.
            return await self._token_provider()

        try:
            return await self._token_provider()
        except Exception as exc:
            logger.warning("Token refresh failed for client %r: %s", self._key, exc)
            raise AuthRefreshError(
                f"Token provider failed while handling 401 for client {self._key!r}",
                key=self._key,
            ) from exc
