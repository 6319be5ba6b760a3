"""Registro de clientes HTTP y atajos CRUD.

Responsabilidad:
- Guardar, por clave, la configuración de cada API (base URL, auth, callbacks)
  junto con su `httpx.AsyncClient`.
- Exponer `get/get_one/get_paginated/post/put/patch/delete` devolviendo
  `ResponseEnvelope` o levantando errores de `core.errors`.

El registro es un objeto explícito del llamador: no hay estado global, así
cada test (o cada app) construye el suyo.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator, Mapping

import httpx
from pydantic import BaseModel, TypeAdapter, ValidationError

from adapters.bearer_auth import RefreshingBearerAuth
from adapters.http_client import build_async_client, extract_error_messages
from core.config import AppSettings
from core.domain.http_method import HttpMethod
from core.domain.models import PaginatedEnvelope, ResponseEnvelope
from core.errors import (
    AuthRefreshError,
    ConfigurationError,
    ResponseDecodeError,
    TransportError,
    UnauthorizedError,
)
from core.interfaces.auth import TokenProvider, UnauthorizedCallback

logger = logging.getLogger(__name__)

DEFAULT_CLIENT_KEY = "default"
NETWORK_FAILURE_STATUS = 500
# Marca que httpx deja en cada request que sale por el transporte de una registración.
SENT_EXTENSION = "apikit.sent"


class ResponseType(str, Enum):
    JSON = "json"
    TEXT = "text"
    BYTES = "bytes"


@dataclass(frozen=True)
class RequestOptions:
    """Opciones por llamada (query, headers, tipo de respuesta, timeout)."""

    params: Any = None
    headers: Mapping[str, str] | None = None
    response_type: ResponseType = ResponseType.JSON
    timeout: float | None = None


@dataclass(frozen=True)
class ClientRegistration:
    """Configuración registrada bajo una clave. No se muta tras crearse."""

    key: str
    base_url: str
    http: httpx.AsyncClient = field(repr=False)
    token_provider: TokenProvider | None = None
    unauthorized_callback: UnauthorizedCallback | None = None
    use_auth: bool = False

    async def notify_unauthorized(self) -> None:
        """Invoca el callback; si falla, se registra y el error original sigue su curso."""

        if self.unauthorized_callback is None:
            return
        try:
            result = self.unauthorized_callback()
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception("Unauthorized callback for client %r raised", self.key)


class ClientRegistry:
    """Mapa clave -> `ClientRegistration`.

    Se puebla al arrancar (`initialize`) y luego solo se lee; dos `initialize`
    sobre la misma clave dejan la última registración.
    """

    def __init__(self, settings: AppSettings | None = None) -> None:
        self._settings = settings or AppSettings()
        self._registrations: dict[str, ClientRegistration] = {}
        self._retired: list[httpx.AsyncClient] = []

    @property
    def settings(self) -> AppSettings:
        return self._settings

    def initialize(
        self,
        key: str,
        base_url: str,
        token_provider: TokenProvider | None = None,
        unauthorized_callback: UnauthorizedCallback | None = None,
        use_auth: bool = False,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> ClientRegistration:
        if not base_url:
            raise ConfigurationError("base_url must be a non-empty string.", key=key)
        if use_auth and token_provider is None:
            raise ConfigurationError("token_provider must be provided if use_auth is true.", key=key)

        auth = RefreshingBearerAuth(token_provider, key=key) if use_auth and token_provider else None
        http = build_async_client(
            self._settings,
            base_url=base_url,
            extra_headers=headers,
            auth=auth,
            timeout=timeout,
            transport=transport,
            event_hooks={"request": [_mark_sent]},
        )
        registration = ClientRegistration(
            key=key,
            base_url=base_url,
            http=http,
            token_provider=token_provider,
            unauthorized_callback=unauthorized_callback,
            use_auth=use_auth,
        )
        previous = self._registrations.get(key)
        if previous is not None:
            logger.debug("Overwriting client registration %r", key)
            self._retired.append(previous.http)
        self._registrations[key] = registration
        return registration

    def get(self, key: str = DEFAULT_CLIENT_KEY) -> ClientRegistration:
        try:
            return self._registrations[key]
        except KeyError:
            raise ConfigurationError(
                f"Client {key!r} is not initialized. Call initialize() first.", key=key
            ) from None

    def client(self, key: str = DEFAULT_CLIENT_KEY) -> ApiClient:
        return ApiClient(self, key)

    def __contains__(self, key: object) -> bool:
        return key in self._registrations

    def __iter__(self) -> Iterator[str]:
        return iter(self._registrations)

    def __len__(self) -> int:
        return len(self._registrations)

    async def aclose(self) -> None:
        """Cierra los transportes vigentes y los reemplazados por un `initialize` posterior."""

        for http in [*self._retired, *(r.http for r in self._registrations.values())]:
            await http.aclose()
        self._retired.clear()

    async def __aenter__(self) -> ClientRegistry:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


class ApiClient:
    """Vista de un `ClientRegistry` ligada a una clave.

    La registración se resuelve en cada llamada, así que la vista puede
    crearse antes de `initialize`.
    """

    def __init__(self, registry: ClientRegistry, key: str = DEFAULT_CLIENT_KEY) -> None:
        self._registry = registry
        self.key = key

    def initialize(
        self,
        base_url: str,
        token_provider: TokenProvider | None = None,
        unauthorized_callback: UnauthorizedCallback | None = None,
        use_auth: bool = False,
        **kwargs: Any,
    ) -> ClientRegistration:
        return self._registry.initialize(
            self.key, base_url, token_provider, unauthorized_callback, use_auth, **kwargs
        )

    @property
    def registration(self) -> ClientRegistration:
        return self._registry.get(self.key)

    async def get(
        self,
        endpoint: str,
        params: Any = None,
        *,
        options: RequestOptions | None = None,
        response_model: Any = None,
    ) -> ResponseEnvelope[Any]:
        """Lectura de colección; con `response_model` valida `list[response_model]`."""

        model = list[response_model] if response_model is not None else None
        return await self._request(HttpMethod.GET, endpoint, params=params, options=options, model=model)

    async def get_one(
        self,
        endpoint: str,
        params: Any = None,
        *,
        options: RequestOptions | None = None,
        response_model: Any = None,
    ) -> ResponseEnvelope[Any]:
        return await self._request(
            HttpMethod.GET, endpoint, params=params, options=options, model=response_model
        )

    async def get_paginated(
        self,
        endpoint: str,
        params: Any = None,
        *,
        options: RequestOptions | None = None,
        response_model: Any = None,
    ) -> ResponseEnvelope[PaginatedEnvelope[Any]]:
        model = PaginatedEnvelope[response_model] if response_model is not None else PaginatedEnvelope[Any]
        return await self._request(HttpMethod.GET, endpoint, params=params, options=options, model=model)

    async def post(
        self,
        endpoint: str,
        body: Any = None,
        params: Any = None,
        *,
        options: RequestOptions | None = None,
        response_model: Any = None,
    ) -> ResponseEnvelope[Any]:
        return await self._request(
            HttpMethod.POST, endpoint, body=body, params=params, options=options, model=response_model
        )

    async def put(
        self,
        endpoint: str,
        body: Any = None,
        params: Any = None,
        *,
        options: RequestOptions | None = None,
        response_model: Any = None,
    ) -> ResponseEnvelope[Any]:
        return await self._request(
            HttpMethod.PUT, endpoint, body=body, params=params, options=options, model=response_model
        )

    async def patch(
        self,
        endpoint: str,
        body: Any = None,
        params: Any = None,
        *,
        options: RequestOptions | None = None,
        response_model: Any = None,
    ) -> ResponseEnvelope[Any]:
        return await self._request(
            HttpMethod.PATCH, endpoint, body=body, params=params, options=options, model=response_model
        )

    async def delete(
        self,
        endpoint: str,
        params: Any = None,
        *,
        options: RequestOptions | None = None,
        response_model: Any = None,
    ) -> ResponseEnvelope[Any]:
        return await self._request(
            HttpMethod.DELETE, endpoint, params=params, options=options, model=response_model
        )

    async def request(
        self,
        method: HttpMethod | str,
        endpoint: str,
        body: Any = None,
        params: Any = None,
        *,
        options: RequestOptions | None = None,
    ) -> ResponseEnvelope[Any]:
        """Despacho genérico por verbo (lo usa la CLI)."""

        if not isinstance(method, HttpMethod):
            method = HttpMethod.parse(method)
        return await self._request(method, endpoint, body=body, params=params, options=options)

    async def _request(
        self,
        method: HttpMethod,
        endpoint: str,
        *,
        body: Any = None,
        params: Any = None,
        options: RequestOptions | None = None,
        model: Any = None,
    ) -> ResponseEnvelope[Any]:
        registration = self._registry.get(self.key)
        options = options or RequestOptions()
        if params is None:
            params = options.params

        kwargs: dict[str, Any] = _body_kwargs(body)
        if params is not None:
            kwargs["params"] = params
        if options.headers:
            kwargs["headers"] = dict(options.headers)
        if options.timeout is not None:
            kwargs["timeout"] = options.timeout

        logger.debug("%s %s%s", method.value, registration.base_url, endpoint)
        try:
            response = await registration.http.request(method.value, endpoint, **kwargs)
        except AuthRefreshError:
            await registration.notify_unauthorized()
            raise
        except httpx.RequestError as exc:
            if not _sent_by_transport(exc):
                # Fallo del token-provider antes de enviar: se propaga tal cual.
                raise
            logger.warning("%s %s failed: %s", method.value, endpoint, exc)
            raise TransportError(
                NETWORK_FAILURE_STATUS,
                [str(exc) or exc.__class__.__name__],
                method=method.value,
                url=_request_url(exc, registration, endpoint),
            ) from exc

        logger.debug("Response: %s - %d bytes", response.status_code, len(response.content))

        if response.status_code == 401:
            logger.warning("Unauthorized: %s %s", method.value, response.request.url)
            await registration.notify_unauthorized()
            raise UnauthorizedError(
                extract_error_messages(response),
                method=method.value,
                url=str(response.request.url),
                body=_decode(response, options.response_type),
            )
        if not response.is_success:
            logger.warning("HTTP %s: %s %s", response.status_code, method.value, response.request.url)
            raise TransportError(
                response.status_code,
                extract_error_messages(response),
                method=method.value,
                url=str(response.request.url),
                body=_decode(response, options.response_type),
            )

        data = _decode(response, options.response_type)
        if model is not None and data is not None:
            try:
                data = TypeAdapter(model).validate_python(data)
            except ValidationError as exc:
                raise ResponseDecodeError(
                    response.status_code,
                    [f"{'.'.join(str(p) for p in e['loc']) or '<root>'}: {e['msg']}" for e in exc.errors()],
                    method=method.value,
                    url=str(response.request.url),
                    body=data,
                ) from exc

        return ResponseEnvelope(status=response.status_code, data=data)


async def _mark_sent(request: httpx.Request) -> None:
    request.extensions[SENT_EXTENSION] = True


def _sent_by_transport(exc: httpx.RequestError) -> bool:
    try:
        request = exc.request
    except RuntimeError:
        return True
    return bool(request.extensions.get(SENT_EXTENSION))


def _body_kwargs(body: Any) -> dict[str, Any]:
    if body is None:
        return {}
    if isinstance(body, BaseModel):
        return {"json": body.model_dump(mode="json")}
    if isinstance(body, (str, bytes)):
        return {"content": body}
    return {"json": body}


def _decode(response: httpx.Response, response_type: ResponseType) -> Any:
    if response_type == ResponseType.BYTES:
        return response.content
    if response_type == ResponseType.TEXT:
        return response.text
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _request_url(exc: httpx.RequestError, registration: ClientRegistration, endpoint: str) -> str:
    try:
        return str(exc.request.url)
    except RuntimeError:
        return f"{registration.base_url}{endpoint}"
