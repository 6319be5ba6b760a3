"""Taxonomía de errores del cliente.

Por qué un módulo propio:
- Los adaptadores (httpx) traducen sus fallos a estas clases; quien usa el
  cliente nunca necesita importar excepciones de httpx.
- Separa errores de programación (`ConfigurationError`) de errores de red
  o de datos (`TransportError` y derivados).
"""

from __future__ import annotations

from typing import Any

from core.domain.models import ResponseEnvelope


class ApiKitError(Exception):
    """Base de todos los errores del paquete."""


class ConfigurationError(ApiKitError):
    """Error de configuración/uso: fatal, nunca se reintenta."""

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class AuthRefreshError(ApiKitError):
    """El token-provider falló mientras se gestionaba un 401.

    La excepción original del provider queda en `__cause__`.
    """

    def __init__(self, message: str, *, key: str | None = None) -> None:
        super().__init__(message)
        self.key = key


class TransportError(ApiKitError):
    """Respuesta no-2xx o fallo de red/timeout."""

    def __init__(
        self,
        status: int,
        errors: list[str] | None = None,
        *,
        method: str | None = None,
        url: str | None = None,
        body: Any = None,
    ) -> None:
        self.status = status
        self.errors = errors
        self.method = method
        self.url = url
        self.body = body
        super().__init__(self._describe())

    def _describe(self) -> str:
        target = f"{self.method} {self.url}" if self.method and self.url else "request"
        text = f"{target} failed with HTTP {self.status}"
        if self.errors:
            text += ": " + "; ".join(self.errors)
        return text

    def to_envelope(self) -> ResponseEnvelope[Any]:
        """Forma "valor" del error (status + errors), sin payload."""

        return ResponseEnvelope(status=self.status, errors=self.errors)


class UnauthorizedError(TransportError):
    """401 terminal: no se pudo (o no se debía) reintentar."""

    def __init__(self, errors: list[str] | None = None, **kwargs: Any) -> None:
        super().__init__(401, errors, **kwargs)


class ResponseDecodeError(TransportError):
    """El cuerpo no valida contra el modelo pedido por el llamador."""
