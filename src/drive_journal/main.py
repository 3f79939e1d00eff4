import logging
import os
from datetime import datetime, timezone
from typing import List, Optional

import typer
from rich import print
from rich.console import Console
from rich.table import Table

from drive_journal.config import config
from drive_journal.utils.formatting import format_distance, format_duration
from drive_journal.utils.logging import setup_logging

# Create CLI app
app = typer.Typer(
    name="drive-journal",
    help="Driving journal on top of a TeslaMate database",
    add_completion=False
)

console = Console()
logger = logging.getLogger(__name__)


def _setup_django():
    """Point Django at the journal settings and load the app registry."""
    import django
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "drive_journal.settings")
    django.setup()


def _service():
    from drive_journal.apps.journal.application.journal_service import get_journal_service
    return get_journal_service()


def _fail(error: Exception):
    print(f"[bold red]Error:[/bold red] {error}")
    raise typer.Exit(code=1)


def _print_range(date_range):
    if date_range is None:
        print("[yellow]No drives were affected[/yellow]")
    else:
        print(f"Affected days: {date_range.start:%Y-%m-%d} to {date_range.end:%Y-%m-%d} (exclusive)")


@app.callback()
def callback():
    """Driving journal."""
    setup_logging()
    _setup_django()


@app.command()
def serve(
    port: Optional[int] = typer.Option(None, "--port", "-p", help="Port for the HTTP API"),
):
    """Start the HTTP API."""
    from django.core.management import call_command

    port = port or config.service.http_port
    print(f"[bold cyan]Drive journal[/bold cyan] listening on port {port}")
    call_command("runserver", f"0.0.0.0:{port}", use_reloader=False)


@app.command()
def migrate(
    fake_initial: bool = typer.Option(
        False, "--fake-initial", help="Skip creating tables that already exist in a TeslaMate database"
    ),
):
    """Create the journal tables."""
    from django.core.management import call_command

    call_command("migrate", fake_initial=fake_initial, interactive=False)
    print("[green]Database is up to date[/green]")


@app.command()
def totals(
    year: Optional[int] = typer.Option(None, "--year", "-y", help="Year, defaults to the current one"),
    month: Optional[int] = typer.Option(None, "--month", "-m", help="Month, defaults to the current one"),
    car: Optional[int] = typer.Option(None, "--car", "-c", help="Car id"),
):
    """Show the totals per classification for one month."""
    from drive_journal.apps.journal.domain.exceptions import JournalError

    now = datetime.now(timezone.utc)
    year = year or now.year
    month = month or now.month
    car = car or config.service.default_car_id

    try:
        result = _service().month_totals(year, month, car)
    except JournalError as e:
        _fail(e)

    table = Table(title=f"Car {car}, {year}-{month:02d}")
    table.add_column("Classification")
    table.add_column("Duration", justify="right")
    table.add_column("Distance (km)", justify="right")
    for name, values in result.to_dict().items():
        table.add_row(name, format_duration(values["duration"]), format_distance(values["distance"]))
    console.print(table)


@app.command()
def classify(
    classification: str = typer.Argument(..., help="business or private"),
    drives: Optional[List[str]] = typer.Option(None, "--drive", "-d", help="Drive id"),
    groups: Optional[List[str]] = typer.Option(None, "--group", "-g", help="Grouped drive id"),
):
    """Classify drives and grouped drives."""
    from drive_journal.apps.journal.domain.exceptions import JournalError

    try:
        date_range = _service().classify(classification, drives or [], groups or [])
    except JournalError as e:
        _fail(e)

    print(f"[green]Classified as {classification}[/green]")
    _print_range(date_range)


@app.command()
def group(
    drives: List[str] = typer.Option(..., "--drive", "-d", help="Drive id"),
    car: Optional[int] = typer.Option(None, "--car", "-c", help="Car id"),
):
    """Merge drives into one grouped drive."""
    from drive_journal.apps.journal.domain.exceptions import JournalError

    try:
        grouped_drive, date_range = _service().group(car or config.service.default_car_id, drives)
    except JournalError as e:
        _fail(e)

    print(f"[green]Created grouped drive {grouped_drive.id}[/green] "
          f"({format_duration(grouped_drive.duration_min)}, {format_distance(grouped_drive.distance)} km)")
    _print_range(date_range)


@app.command()
def ungroup(
    groups: List[str] = typer.Option(..., "--group", "-g", help="Grouped drive id"),
):
    """Split grouped drives back into their drives."""
    from drive_journal.apps.journal.domain.exceptions import JournalError

    try:
        date_range = _service().ungroup(groups)
    except JournalError as e:
        _fail(e)

    print("[green]Ungrouped[/green]")
    _print_range(date_range)


if __name__ == "__main__":
    app()
