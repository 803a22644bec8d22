"""CLI for the Solana MCP server."""

import asyncio
import logging
from typing import NoReturn, Optional

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .actions import CORE_BUNDLE, compose_actions
from .config import Settings, TransportMode
from .core.exceptions import ConfigurationError, SolanaMcpError
from .observability import setup_logging, setup_telemetry, shutdown_telemetry
from .server import McpHttpServer
from .transport import run_stdio

app = typer.Typer(
    name="solana-mcp",
    help="Solana agent MCP server - stdio or multi-client SSE",
    add_completion=False,
)
# stdout belongs to the MCP protocol in stdio mode
console = Console(stderr=True)

logger = logging.getLogger(__name__)

BUNDLES = (CORE_BUNDLE,)


def _fail(message: str) -> NoReturn:
    console.print(
        f"[red]Failed to start MCP server:[/red] {escape(message)}", soft_wrap=True
    )
    raise typer.Exit(code=1)


# ============================================================================
# Serve Command
# ============================================================================


@app.command()
def serve(
    transport: Optional[TransportMode] = typer.Option(
        None, "--transport", "-t", help="Transport mode (default: sse if PORT is set)"
    ),
    port: Optional[int] = typer.Option(None, "--port", "-p", help="HTTP port for SSE mode"),
    host: Optional[str] = typer.Option(None, "--host", help="HTTP bind address"),
):
    """Start the MCP server."""
    try:
        settings = Settings()
    except PydanticValidationError as e:
        _fail(f"Invalid configuration: {e}")

    overrides = {
        key: value
        for key, value in {"transport": transport, "port": port, "host": host}.items()
        if value is not None
    }
    if overrides:
        settings = settings.model_copy(update=overrides)

    setup_logging(level=settings.log_level, json_format=settings.log_json)

    try:
        mode = settings.resolve_transport()
        settings.require(mode)

        setup_telemetry(
            service_name=settings.otel_service_name,
            endpoint=settings.otel_endpoint,
            enabled=settings.otel_enabled,
        )

        if mode is TransportMode.SSE:
            McpHttpServer(settings, bundles=BUNDLES).run()
        else:
            asyncio.run(run_stdio(settings, compose_actions(BUNDLES)))
    except ConfigurationError as e:
        _fail(e.message)
    except Exception as e:
        logger.exception("MCP server crashed")
        _fail(str(e))
    finally:
        shutdown_telemetry()


# ============================================================================
# Actions Command
# ============================================================================


@app.command()
def actions():
    """List the actions exposed as MCP tools."""
    try:
        catalog = compose_actions(BUNDLES)
    except SolanaMcpError as e:
        _fail(e.message)

    table = Table(title="Actions")
    table.add_column("Name", style="cyan")
    table.add_column("Arguments", style="yellow")
    table.add_column("Description", style="green")

    for item in catalog.values():
        args = ", ".join(
            f"{name}?" if name in item.optional else name for name in item.schema
        )
        table.add_row(item.name, args or "-", item.description)

    Console().print(table)


if __name__ == "__main__":
    app()
