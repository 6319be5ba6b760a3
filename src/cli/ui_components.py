"""Componentes de UI para CLI (Rich).

Por qué separar componentes:
- Evita mezclar lógica de comandos con detalles visuales.
- Permite reutilizar tablas/paneles en múltiples comandos.
"""

from __future__ import annotations

import json
from typing import Any

from rich.align import Align
from rich.console import Console
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table
from rich.text import Text

from core.domain.models import PaginatedEnvelope, ResponseEnvelope
from core.errors import TransportError


def print_banner(console: Console) -> None:
    """Imprime el banner de bienvenida."""

    title = Text("apikit", style="bold cyan")
    subtitle = Text("HTTP API client • bearer auth • refresh & retry", style="dim")
    body = Align.center(Text.assemble(title, "\n", subtitle), vertical="middle")
    console.print(Panel(body, border_style="cyan", padding=(1, 4)))


def _status_style(status: int) -> str:
    if 200 <= status < 300:
        return "green"
    if status < 500:
        return "yellow"
    return "red"


def build_response_panel(envelope: ResponseEnvelope[Any]) -> Panel:
    """Panel con el payload de una respuesta exitosa."""

    data = envelope.data
    if isinstance(data, (dict, list)):
        body: Any = Syntax(json.dumps(data, ensure_ascii=False, indent=2), "json", word_wrap=True)
    elif isinstance(data, bytes):
        body = Text(f"<{len(data)} bytes>", style="dim")
    elif data is None:
        body = Text("<empty body>", style="dim")
    else:
        body = Text(str(data))

    style = _status_style(envelope.status)
    title = Text(f"HTTP {envelope.status}", style=f"bold {style}")
    return Panel(body, title=title, border_style=style)


def build_page_table(page: PaginatedEnvelope[Any]) -> Table:
    """Tabla de items de una página; columnas tomadas del primer item dict."""

    table = Table(
        title=f"Page {page.current_page}/{page.last_page}",
        caption=f"{len(page.data)} of {page.total} items, {page.per_page} per page",
    )
    first = page.data[0] if page.data else None
    if isinstance(first, dict):
        columns = list(first.keys())
        for name in columns:
            table.add_column(str(name), overflow="fold")
        for item in page.data:
            row = item if isinstance(item, dict) else {}
            table.add_row(*("" if row.get(c) is None else str(row.get(c)) for c in columns))
    else:
        table.add_column("Item", overflow="fold")
        for item in page.data:
            table.add_row(str(item))
    return table


def build_error_panel(error: TransportError) -> Panel:
    body = Text()
    if error.method and error.url:
        body.append(f"{error.method} {error.url}\n", style="dim")
    if error.errors:
        for message in error.errors:
            body.append(f"- {message}\n")
    else:
        body.append("No error details in response body.", style="dim")
    title = Text(f"HTTP {error.status}", style="bold red")
    return Panel(body, title=title, border_style="red")
