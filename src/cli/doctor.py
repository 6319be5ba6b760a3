"""Doctor command for environment diagnostics."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from adapters.api_client import ClientRegistry
from core.config import AppSettings, get_user_env_file, write_user_env_vars
from core.errors import ApiKitError, TransportError

app = typer.Typer(no_args_is_help=True, help="Environment diagnostics and configuration checks.")

_console = Console()


async def _check_http(settings: AppSettings, base_url: str) -> tuple[bool, str]:
    """Reach the base URL through a registered client; any HTTP answer counts as reachable."""

    async with ClientRegistry(settings) as registry:
        client = registry.client(settings.default_client_key)
        client.initialize(base_url)
        try:
            envelope = await client.get_one("/")
        except TransportError as exc:
            if exc.status == 500 and exc.__cause__ is not None:
                return False, str(exc.__cause__) or exc.__cause__.__class__.__name__
            return True, f"HTTP {exc.status}"
        except ApiKitError as exc:
            return False, str(exc)
    return True, f"HTTP {envelope.status}"


@app.command()
def run() -> None:
    """Run baseline diagnostics and show recommended fixes."""

    settings = AppSettings()

    table = Table(title="apikit Doctor")
    table.add_column("Check", style="bright_green", no_wrap=True)
    table.add_column("Status", style="white")
    table.add_column("Details", style="dim")

    # Config
    if settings.base_url:
        table.add_row("Base URL", "OK", settings.base_url)
    else:
        table.add_row("Base URL", "MISSING", "Set APIKIT_BASE_URL or run `apikit doctor configure`")

    if settings.api_token:
        table.add_row("API token", "OK", "Bearer auth enabled")
    elif settings.use_auth:
        table.add_row("API token", "FAIL", "APIKIT_USE_AUTH is set but no APIKIT_API_TOKEN")
    else:
        table.add_row("API token", "OPTIONAL", "No token set -> unauthenticated requests")
    table.add_row("Timeout", "OK", f"{settings.http_timeout_seconds:g}s")
    table.add_row("User config", "OK" if get_user_env_file().exists() else "NONE", str(get_user_env_file()))

    # Connectivity (best-effort)
    ok_http = True
    if settings.base_url:
        ok_http, detail_http = asyncio.run(_check_http(settings, settings.base_url))
        table.add_row("HTTP connectivity", "OK" if ok_http else "FAIL", detail_http)

    _console.print(table)

    if not ok_http:
        _console.print(
            "\n[yellow]Note:[/yellow] check the base URL, proxies and APIKIT_HTTP_TIMEOUT_SECONDS."
        )


@app.command()
def configure() -> None:
    """Interactive setup (stores config in the user config .env)."""

    settings = AppSettings()

    base_url = typer.prompt("API base URL", default=settings.base_url or "", show_default=True).strip()
    token = typer.prompt(
        "API token (leave empty for none)",
        default="",
        show_default=False,
        hide_input=True,
    ).strip()

    if not base_url:
        raise typer.BadParameter("base_url is required")

    values = {"APIKIT_BASE_URL": base_url}
    if token:
        values["APIKIT_API_TOKEN"] = token
        values["APIKIT_USE_AUTH"] = "true"

    env_path = write_user_env_vars(values)

    _console.print(f"[green]Saved config to:[/green] {env_path}")
