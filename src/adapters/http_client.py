"""Wrapper de httpx.

Por qué un wrapper:
- Estandariza timeouts, headers y User-Agent para todos los clientes registrados.
- Facilita testeo: se puede inyectar un `transport` (MockTransport/respx).
"""

from __future__ import annotations

from typing import Any

import httpx

from core.config import AppSettings


def build_async_client(
    settings: AppSettings | None = None,
    *,
    base_url: str = "",
    extra_headers: dict[str, str] | None = None,
    auth: httpx.Auth | None = None,
    timeout: float | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
    event_hooks: dict[str, list[Any]] | None = None,
) -> httpx.AsyncClient:
    """Crea un `httpx.AsyncClient` con defaults seguros.

    Por qué un builder:
    - Centraliza timeouts/headers para que todos los clientes se comporten igual.
    - Facilita testeo y futuras políticas (proxies, límites de conexiones).
    """

    settings = settings or AppSettings()
    headers: dict[str, str] = {
        "User-Agent": settings.user_agent,
        "Accept": "application/json",
    }
    if extra_headers:
        headers.update(extra_headers)

    kwargs: dict[str, Any] = {}
    if transport is not None:
        kwargs["transport"] = transport
    if event_hooks:
        kwargs["event_hooks"] = event_hooks

    return httpx.AsyncClient(
        base_url=base_url,
        timeout=httpx.Timeout(timeout if timeout is not None else settings.http_timeout_seconds),
        follow_redirects=True,
        headers=headers,
        auth=auth,
        **kwargs,
    )


def extract_error_messages(response: httpx.Response) -> list[str] | None:
    """Extrae mensajes de error de un cuerpo JSON.

    Formatos soportados:
    - {"errors": ["msg", ...]}
    - {"errors": {"field": ["msg", ...]}} (validación estilo Laravel)
    - {"message": "msg"} / {"error": "msg"}
    """

    try:
        payload = response.json()
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None

    raw = payload.get("errors")
    out: list[str] = []
    if isinstance(raw, list):
        out = [str(e) for e in raw if e is not None]
    elif isinstance(raw, dict):
        for field, messages in raw.items():
            if isinstance(messages, list):
                out.extend(f"{field}: {m}" for m in messages)
            elif messages is not None:
                out.append(f"{field}: {messages}")
    elif isinstance(raw, str):
        out = [raw]

    if not out:
        for key in ("message", "error"):
            value = payload.get(key)
            if isinstance(value, str) and value.strip():
                out = [value.strip()]
                break

    return out or None
