"""Start command for the cmr-stac CLI."""

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from cmr_stac.core.config import config
from cmr_stac.core.logging import log_level


def start(
    host: str = typer.Option(None, "--host", help="Override host"),
    port: int = typer.Option(None, "--port", help="Override port"),
    reload: bool = typer.Option(False, "--reload", help="Enable auto-reload for development"),
) -> None:
    """Start the STAC server."""
    console = Console()

    server_host = host or config.host
    server_port = port or config.port

    table = Table(title="CMR-STAC Configuration")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Server URL", f"http://{server_host}:{server_port}")
    table.add_row("CMR URL", config.cmr_url)
    table.add_row("STAC Version", config.stac_version)
    table.add_row("Request Timeout", f"{config.request_timeout}s")
    table.add_row("Validate Responses", str(config.validate_responses))

    console.print(table)

    uvicorn.run(
        "cmr_stac.main:app",
        host=server_host,
        port=server_port,
        reload=reload,
        log_level=log_level.lower(),
    )
