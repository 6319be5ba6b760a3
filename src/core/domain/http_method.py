"""Verbos HTTP soportados por el cliente.

Por qué vive en el dominio:
- La CLI y los adapters comparten una única lista de métodos aceptados.
"""

from __future__ import annotations

from enum import Enum


class HttpMethod(str, Enum):
    """Verbos expuestos por los atajos CRUD."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"

    @classmethod
    def parse(cls, value: str) -> "HttpMethod":
        """Busca el verbo sin distinguir mayúsculas; `ValueError` si no existe."""

        try:
            return cls(value.strip().upper())
        except ValueError:
            allowed = ", ".join(m.value for m in cls)
            raise ValueError(f"Unsupported HTTP method {value!r} (expected one of: {allowed})") from None

    @property
    def has_body(self) -> bool:
        """Indica si el atajo de este verbo envía cuerpo."""

        return self in (HttpMethod.POST, HttpMethod.PUT, HttpMethod.PATCH)
