"""Contratos de autenticación.

Por qué Protocol:
- Define un contrato estructural (duck typing) sin herencia rígida.
- Cualquier `async def` sin argumentos sirve como token-provider, y cualquier
  callable sin argumentos como callback de no-autorizado.
"""

from __future__ import annotations

from typing import Awaitable, Protocol, runtime_checkable


@runtime_checkable
class TokenProvider(Protocol):
    """Produce un bearer token fresco.

    Reglas de diseño:
    - Es asíncrono porque típicamente hará I/O (refresh contra un IdP).
    - Puede fallar; el cliente propaga el fallo al llamador.
    """

    def __call__(self) -> Awaitable[str]:
        ...


@runtime_checkable
class UnauthorizedCallback(Protocol):
    """Hook de notificación (p.ej. forzar logout) cuando no hay autorización posible.

    Puede ser síncrono o devolver un awaitable.
    """

    def __call__(self) -> Awaitable[None] | None:
        ...
