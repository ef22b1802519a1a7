"""Main CLI entry point for cmr-stac."""

import logging

import typer
from rich.console import Console

from cmr_stac.cli.commands import config, start

app = typer.Typer(
    name="cmr-stac",
    help="CMR-STAC CLI - serve NASA CMR as a STAC API",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.command(name="start")(start.start)
app.add_typer(config.app, name="config", help="Configuration management")


@app.command()
def version() -> None:
    """Show version information."""
    from cmr_stac import __version__

    console = Console()
    console.print(f"[bold cyan]cmr-stac[/bold cyan] version [green]{__version__}[/green]")


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose output"),
) -> None:
    """CMR-STAC CLI."""
    if verbose:
        logging.getLogger("cmr_stac").setLevel(logging.DEBUG)


if __name__ == "__main__":
    app()
