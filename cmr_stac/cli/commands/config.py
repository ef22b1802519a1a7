"""Configuration commands for the cmr-stac CLI."""

import typer
from rich.console import Console
from rich.table import Table

from cmr_stac.core.config.schema import ConfigSchema
from cmr_stac.core.config.validation import ConfigError, load_all_specs, validate_all

app = typer.Typer(help="Configuration management")


@app.command()
def show() -> None:
    """Show the effective configuration."""
    console = Console()

    table = Table(title="CMR-STAC Configuration")
    table.add_column("Variable", style="cyan")
    table.add_column("Value", style="green")
    table.add_column("Description")

    specs = ConfigSchema.all_specs()
    for name, value in sorted(load_all_specs().items()):
        spec = specs[name]
        if isinstance(value, ConfigError):
            shown = f"[red]invalid: {value.message}[/red]"
        else:
            shown = str(value)
        table.add_row(spec.name, shown, spec.description)

    console.print(table)


@app.command()
def validate() -> None:
    """Validate all environment variables."""
    console = Console()
    errors = validate_all()
    if not errors:
        console.print("[bold green]Configuration is valid[/bold green]")
        return
    for error in errors:
        console.print(f"[red]{error}[/red]")
    raise typer.Exit(code=1)


@app.command()
def docs() -> None:
    """Print Markdown documentation for all environment variables."""
    typer.echo(ConfigSchema.generate_markdown_docs())
