"""
Command-line interface for Planning Center Listings.

Usage:
    python -m pco_listings render events           # Print the events fragment
    python -m pco_listings render groups -n 10     # Ten groups
    python -m pco_listings embed page.html         # Expand shortcodes in a file
    python -m pco_listings types                   # List supported types
    python -m pco_listings config                  # Show current configuration
    python -m pco_listings clear-cache             # Drop cached fragments
    python -m pco_listings serve                   # Start the HTTP server
"""

import asyncio

import click
from rich.console import Console
from rich.table import Table
from rich.panel import Panel

from .config import get_settings
from .endpoints import ENDPOINTS
from .logging_conf import setup_logging, get_logger
from .server import run_server
from .service import get_listing_service
from .shortcodes import expand_shortcodes

# Status output goes to stderr; stdout carries only rendered HTML
console = Console(stderr=True)
logger = get_logger(__name__)


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def cli(debug: bool):
    """Planning Center Listings CLI."""
    settings = get_settings()
    level = "DEBUG" if debug else settings.log_level
    setup_logging(level=level, json_output=settings.log_json)


@cli.command()
@click.argument("content_type")
@click.option("--limit", "-n", type=str, help="Number of items (defaults to DEFAULT_LIMIT)")
def render(content_type: str, limit: str):
    """
    Render a listing and print the HTML fragment.

    Examples:
      python -m pco_listings render events
      python -m pco_listings render sermons -n 3
    """
    if limit is None:
        limit = str(get_settings().default_limit)

    try:
        html = asyncio.run(get_listing_service().render_listing(content_type, limit))
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise click.Abort()

    click.echo(html)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def embed(path: str):
    """
    Expand Planning Center shortcodes in a file and print the result.

    Example:
      python -m pco_listings embed page.html > page.rendered.html
    """
    with open(path, encoding="utf-8") as f:
        content = f.read()

    try:
        html = asyncio.run(expand_shortcodes(
            content,
            get_listing_service(),
            default_limit=get_settings().default_limit,
        ))
    except Exception as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise click.Abort()

    click.echo(html, nl=False)


@cli.command()
def types():
    """List supported listing types."""
    table = Table(title="Listing Types")
    table.add_column("Type", style="cyan")
    table.add_column("Endpoint", style="green")

    for name, url in sorted(ENDPOINTS.items()):
        table.add_row(name, url)

    console.print(table)


@cli.command("clear-cache")
def clear_cache():
    """Drop every cached listing fragment."""
    removed = get_listing_service().store.clear()
    console.print(f"[green]Removed {removed} cached fragment(s)[/green]")


@cli.command()
@click.option("--host", default="0.0.0.0", help="Host to bind to")
@click.option("--port", "-p", type=int, help="Port to bind to")
def serve(host: str, port: int):
    """Start the HTTP server."""
    console.print(Panel("[bold blue]Starting Server[/bold blue]"))

    settings = get_settings()
    port = port or settings.port

    console.print(f"Host: {host}")
    console.print(f"Port: {port}")
    console.print()

    run_server(host=host, port=port)


@cli.command()
def config():
    """Show current configuration (secret masked)."""
    settings = get_settings()

    console.print(Panel("[bold blue]Current Configuration[/bold blue]"))

    console.print("\n[cyan]Planning Center:[/cyan]")
    console.print(f"  app_id:          {settings.pco_app_id or '[red](not set)[/red]'}")
    console.print(f"  app_secret:      {settings.masked_secret or '[red](not set)[/red]'}")
    console.print(f"  request_timeout: {settings.request_timeout}")

    console.print("\n[cyan]Listings:[/cyan]")
    console.print(f"  default_limit: {settings.default_limit}")
    console.print(f"  date_format:   {settings.date_format}")

    console.print("\n[cyan]Cache:[/cyan]")
    console.print(f"  cache_ttl_seconds: {settings.cache_ttl_seconds}")
    console.print(f"  backend:           {'sql' if settings.database_url else 'memory'}")

    console.print("\n[cyan]Logging:[/cyan]")
    console.print(f"  log_level: {settings.log_level}")
    console.print(f"  log_json:  {settings.log_json}")


def main():
    """Main entry point."""
    cli()


if __name__ == "__main__":
    main()
