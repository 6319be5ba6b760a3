"""Modelos del dominio (Pydantic v2).

Por qué Pydantic en el dominio:
- Nos da validación estricta y documentación autocontenida (Field) sin acoplar
  el Core a librerías de I/O.
- Los modelos genéricos (`ResponseEnvelope[T]`) permiten validar el payload
  contra el tipo que pide el llamador.

Nota:
- Estos modelos describen *qué* devuelve una API, no *cómo* se obtiene.
"""

from __future__ import annotations

from typing import Generic, TypeVar

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel
from pydantic.config import ConfigDict

T = TypeVar("T")


class ResponseEnvelope(BaseModel, Generic[T]):
    """Resultado normalizado de una request.

    Por qué existe:
    - Unifica status + payload + errores en una sola estructura, sea cual sea
      el endpoint o el método HTTP.
    """

    status: int = Field(
        ...,
        ge=0,
        le=599,
        description="Código HTTP de la respuesta.",
    )
    data: T | None = Field(
        default=None,
        description="Payload decodificado (JSON, texto o bytes según la request).",
    )
    errors: list[str] | None = Field(
        default=None,
        description="Mensajes de error extraídos del cuerpo, si los hay.",
    )

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300


class PaginationLink(BaseModel):
    model_config = ConfigDict(extra="ignore")

    url: str | None = None
    label: str = ""
    active: bool = False


class PaginatedEnvelope(BaseModel, Generic[T]):
    """Página de resultados (forma Laravel: `current_page`, `data`, `links`...).

    Acepta claves snake_case (formato en el cable) y camelCase.
    """

    model_config = ConfigDict(
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    current_page: int = Field(..., ge=0)
    per_page: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
    last_page: int = Field(..., ge=0)
    data: list[T] = Field(default_factory=list)

    next_page_url: str | None = None
    prev_page_url: str | None = None
    first_page_url: str | None = None
    last_page_url: str | None = None
    links: list[PaginationLink] = Field(default_factory=list)

    @property
    def has_next(self) -> bool:
        return self.next_page_url is not None or self.current_page < self.last_page

