"""CLI principal (Typer).

Por qué una CLI:
- Permite probar una API (o la config del usuario) sin escribir código.
- Todo el I/O pasa por el mismo `ClientRegistry` que usaría una app.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console

from adapters.api_client import ClientRegistry, RequestOptions, ResponseType
from adapters.bearer_auth import static_token_provider
from adapters.json_exporter import export_envelope_json
from cli import doctor
from cli.ui_components import build_error_panel, build_page_table, build_response_panel, print_banner
from core.config import AppSettings
from core.domain.http_method import HttpMethod
from core.domain.models import PaginatedEnvelope, ResponseEnvelope
from core.errors import ApiKitError, TransportError
from core.logging_setup import configure_logging

app = typer.Typer(no_args_is_help=True, help="Keyed HTTP API client with bearer auth and refresh-on-401.")
app.add_typer(doctor.app, name="doctor")

_console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log requests at DEBUG level."),
) -> None:
    settings = AppSettings()
    configure_logging("DEBUG" if verbose else settings.log_level)


def _parse_params(values: list[str]) -> list[tuple[str, str]]:
    params: list[tuple[str, str]] = []
    for raw in values:
        if "=" not in raw:
            raise typer.BadParameter(f"expected key=value, got {raw!r}", param_hint="--param")
        key, value = raw.split("=", 1)
        params.append((key.strip(), value))
    return params


def _parse_body(raw: str | None) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise typer.BadParameter(f"invalid JSON: {exc}", param_hint="--body") from exc


async def _perform(
    *,
    settings: AppSettings,
    base_url: str,
    token: str | None,
    use_auth: bool,
    method: HttpMethod,
    endpoint: str,
    body: Any,
    params: list[tuple[str, str]],
    paginated: bool,
    response_type: ResponseType,
) -> ResponseEnvelope[Any]:
    async with ClientRegistry(settings) as registry:
        client = registry.client(settings.default_client_key)
        client.initialize(
            base_url,
            static_token_provider(token) if token else None,
            use_auth=use_auth,
        )
        options = RequestOptions(response_type=response_type)
        if paginated:
            return await client.get_paginated(endpoint, params or None, options=options)
        return await client.request(method, endpoint, body, params or None, options=options)


@app.command()
def request(
    method: str = typer.Argument(..., help="HTTP method (GET, POST, PUT, PATCH, DELETE)."),
    endpoint: str = typer.Argument(..., help="Path relative to the base URL, e.g. /users/1."),
    base_url: Optional[str] = typer.Option(None, "--base-url", "-u", help="Overrides APIKIT_BASE_URL."),
    param: list[str] = typer.Option([], "--param", "-p", help="Query parameter key=value (repeatable)."),
    body: Optional[str] = typer.Option(None, "--body", "-d", help="JSON request body."),
    token: Optional[str] = typer.Option(None, "--token", help="Bearer token (overrides APIKIT_API_TOKEN)."),
    paginated: bool = typer.Option(False, "--paginated", help="Decode the response as a page."),
    raw: bool = typer.Option(False, "--raw", help="Print the body as text instead of JSON."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Write the envelope as JSON."),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Do not print the banner."),
) -> None:
    """Send one request and print the result."""

    settings = AppSettings()
    resolved_base = base_url or settings.base_url
    if not resolved_base:
        raise typer.BadParameter("no base URL: pass --base-url or set APIKIT_BASE_URL", param_hint="--base-url")

    try:
        verb = HttpMethod.parse(method)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="METHOD") from exc
    if paginated and verb is not HttpMethod.GET:
        raise typer.BadParameter("--paginated only applies to GET", param_hint="--paginated")

    resolved_token = token or settings.api_token

    if not quiet:
        print_banner(_console)

    try:
        envelope = asyncio.run(
            _perform(
                settings=settings,
                base_url=resolved_base,
                token=resolved_token,
                use_auth=bool(resolved_token) or settings.use_auth,
                method=verb,
                endpoint=endpoint,
                body=_parse_body(body) if verb.has_body else None,
                params=_parse_params(param),
                paginated=paginated,
                response_type=ResponseType.TEXT if raw else ResponseType.JSON,
            )
        )
    except TransportError as exc:
        _console.print(build_error_panel(exc))
        if output:
            export_envelope_json(envelope=exc.to_envelope(), output_path=output)
        raise typer.Exit(code=1) from exc
    except ApiKitError as exc:
        _console.print(f"[red]Error:[/red] {exc}")
        raise typer.Exit(code=1) from exc

    if isinstance(envelope.data, PaginatedEnvelope):
        _console.print(build_page_table(envelope.data))
    else:
        _console.print(build_response_panel(envelope))

    if output:
        path = export_envelope_json(envelope=envelope, output_path=output)
        _console.print(f"[green]Saved response to:[/green] {path}")


def run() -> None:
    app()


if __name__ == "__main__":
    run()
