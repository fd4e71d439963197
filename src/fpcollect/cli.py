"""CLI entry point using Typer."""

from uuid import UUID

import structlog
import typer
from rich.console import Console
from rich.table import Table

app = typer.Typer(
    name="fpcollect",
    help="Fingerprint collection - aggregate browser signals per address and store them.",
)
console = Console()
fingerprints_app = typer.Typer(help="Inspect stored fingerprints.")
app.add_typer(fingerprints_app, name="fingerprints")

# Configure structured logging
structlog.configure(
    processors=[
        structlog.stdlib.add_log_level,
        structlog.dev.ConsoleRenderer(),
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.PrintLoggerFactory(),
)


@app.command()
def serve(
    host: str | None = typer.Option(None, help="Bind address (defaults to settings)"),
    port: int | None = typer.Option(None, help="Bind port (defaults to settings)"),
) -> None:
    """Run the collection server."""
    import uvicorn

    from fpcollect.config import settings
    from fpcollect.web.app import create_app

    console.print(f"[bold blue]Collecting under {settings.path_prefix}[/bold blue]")
    uvicorn.run(create_app(), host=host or settings.host, port=port or settings.port)


@app.command()
def init_db() -> None:
    """Create the fingerprints table."""
    from fpcollect.db import init_db as create_tables

    try:
        create_tables()
    except Exception as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)
    console.print("[bold green]Done![/bold green]")


@fingerprints_app.command("list")
def list_fingerprints(limit: int = typer.Option(20, help="Rows to show")) -> None:
    """Show the most recently stored fingerprints."""
    from fpcollect.db import get_db
    from fpcollect.models import Fingerprint

    with get_db() as session:
        rows = session.query(Fingerprint).order_by(Fingerprint.created_at.desc()).limit(limit).all()

        table = Table(title="Recent Fingerprints")
        table.add_column("ID", style="cyan")
        table.add_column("IP", style="white")
        table.add_column("Created", style="green")
        table.add_column("Properties", style="magenta")
        table.add_column("Fonts", style="magenta")
        for row in rows:
            data = row.fingerprint or {}
            table.add_row(
                str(row.id),
                row.ip,
                row.created_at.isoformat(timespec="seconds") if row.created_at else "",
                str(len(data.get("properties", []))),
                str(len(data.get("fonts", []))),
            )

    console.print(table)


@fingerprints_app.command("show")
def show_fingerprint(
    fingerprint_id: str = typer.Argument(..., help="Fingerprint row id"),
    fonts_catalog: str | None = typer.Option(
        None, help="YAML font catalog such as the bundled fonts.yaml; shows installed fonts instead"
    ),
) -> None:
    """Show one stored fingerprint."""
    from fpcollect.config import settings
    from fpcollect.db import get_db
    from fpcollect.fonts import installed_fonts, load_font_catalog
    from fpcollect.models import Fingerprint

    try:
        row_id = UUID(fingerprint_id)
    except ValueError:
        console.print(f"[bold red]Error:[/bold red] not a valid id: {fingerprint_id}")
        raise typer.Exit(1)

    with get_db() as session:
        row = session.query(Fingerprint).filter_by(id=row_id).first()
        if not row:
            console.print(f"[yellow]No fingerprint {fingerprint_id}[/yellow]")
            raise typer.Exit(1)
        ip = row.ip
        data = dict(row.fingerprint or {})

    console.print(f"[bold]{ip}[/bold] at {data.get('timestamp')}")

    properties = Table(title="Properties")
    properties.add_column("Name", style="cyan")
    properties.add_column("Value", style="white")
    for name, value in data.get("properties", []):
        properties.add_row(name, value)
    console.print(properties)

    headers = Table(title="Headers")
    headers.add_column("Name", style="cyan")
    headers.add_column("Value", style="white")
    for name, value in data.get("headers", []):
        headers.add_row(name, value)
    console.print(headers)

    fonts = data.get("fonts", [])
    catalog_path = fonts_catalog or settings.font_catalog_path
    if catalog_path:
        try:
            catalog = load_font_catalog(catalog_path)
        except (FileNotFoundError, ValueError) as e:
            console.print(f"[bold red]Error:[/bold red] {e}")
            raise typer.Exit(1)
        console.print(f"[green]Installed fonts:[/green] {', '.join(installed_fonts(fonts, catalog)) or '-'}")
    else:
        console.print(f"[yellow]Missing fonts:[/yellow] {', '.join(fonts) or '-'}")


if __name__ == "__main__":
    app()
