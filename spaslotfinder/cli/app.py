"""
Main CLI application using Typer.
"""

import asyncio
import logging
from pathlib import Path
from typing import Annotated, NoReturn, Optional

import pendulum
import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from ..config import AppConfig, get_default_config_path
from ..domain.exceptions import ConflictAtCommit, SpaSlotError
from ..adapters.json_booking_store import JsonBookingStore
from ..adapters.rest_booking_store import RestBookingStore
from ..services.booking_availability import BookingAvailabilityService

app = typer.Typer(
    name="spaslotfinder",
    help="Show and book free appointment slots for a spa day",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
DateOption = Annotated[Optional[str], typer.Option("--date", help="Booking date (YYYY-MM-DD). Defaults to today.")]
DurationArg = Annotated[Optional[str], typer.Option("--duration", "-d", help="Duration from the catalog, e.g. '1 hr'. Defaults to the first option.")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Show debug logging.")] = False,
):
    """
    Appointment availability for a single-resource spa day.
    """
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def _load_config(config_file: Optional[Path]) -> AppConfig:
    config_path = config_file or get_default_config_path()
    return AppConfig.load_from_yaml(config_path)


def _build_service(config: AppConfig) -> BookingAvailabilityService:
    """Wire the configured booking store into the availability service."""
    calculator = config.slot_calculator()

    if config.store.kind == "rest":
        store = RestBookingStore(
            base_url=config.store.url,
            api_key=config.store.api_key,
            table=config.store.table,
            timeout=config.store.timeout
        )
    else:
        store = JsonBookingStore(path=config.store.path, engine=calculator.engine)

    return BookingAvailabilityService(booking_store=store, slot_calculator=calculator)


def _resolve_date(date_option: Optional[str], tz: str):
    if not date_option:
        return pendulum.today(tz).date()
    try:
        return pendulum.from_format(date_option, "YYYY-MM-DD", tz=tz).date()
    except ValueError as e:
        console.print(f"[red]Error parsing date: {e}[/red]")
        raise typer.Exit(1)


def _fail(message: str) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {message}")
    raise typer.Exit(1)


@app.command()
def slots(
    config_file: ConfigOption = None,
    date: DateOption = None,
    duration: DurationArg = None,
    use_24_hour: Annotated[Optional[bool], typer.Option("--24h/--12h", help="Override the configured clock style.")] = None,
):
    """
    List the day's candidate start times for a duration.

    Examples:

        spaslotfinder slots --date 2025-03-02 --duration "1 hr"
    """
    try:
        config = _load_config(config_file)
        if use_24_hour is not None:
            config.use_24_hour = use_24_hour
        booking_date = _resolve_date(date, config.timezone)
        option = config.resolve_duration(duration)

        service = _build_service(config)
        slot_sequence = asyncio.run(service.available_slots(booking_date, option.value))

        table = Table(
            title=f"Slots on {booking_date.isoformat()} for {option.label}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Time", style="bold")
        table.add_column("Status")

        for slot in slot_sequence:
            status = "[green]available[/green]" if slot.available else "[dim]taken[/dim]"
            table.add_row(slot.display_time, status)

        console.print()
        console.print(table)

        if not service.calculator.has_any_available_slot(slot_sequence):
            console.print(
                "[yellow]⚠ No free slot fits this duration on this day.[/yellow]\n"
                "Try a shorter duration or pick another date."
            )
        console.print()

    except FileNotFoundError as e:
        _fail(str(e))
    except SpaSlotError as e:
        _fail(str(e))


@app.command()
def timeline(
    config_file: ConfigOption = None,
    date: DateOption = None,
    at: Annotated[Optional[str], typer.Option("--at", help="Highlight a tentative start time, e.g. '02:00 م'.")] = None,
    duration: DurationArg = None,
):
    """
    Show the day's occupancy grid, one row per hour.
    """
    try:
        config = _load_config(config_file)
        booking_date = _resolve_date(date, config.timezone)
        option = config.resolve_duration(duration)

        service = _build_service(config)
        rows = asyncio.run(service.timeline(booking_date, selected_time=at, duration_text=option.value))

        console.print(f"\n[bold cyan]Timeline {booking_date.isoformat()}[/bold cyan]")
        console.print("[red]■[/red] booked  [blue]■[/blue] your choice  [green]■[/green] free\n")

        for row in rows:
            marks = []
            for cell in row.cells:
                colour = {"booked": "red", "selected": "blue", "free": "green"}[cell.status]
                marks.append(f"[{colour}]■[/{colour}]")
            labels = sorted({cell.booking_label for cell in row.cells if cell.booking_label})
            suffix = f"  [dim]{', '.join(labels)}[/dim]" if labels else ""
            console.print(f"  {row.label:>5}  {' '.join(marks)}{suffix}")

        console.print()

    except FileNotFoundError as e:
        _fail(str(e))
    except SpaSlotError as e:
        _fail(str(e))


@app.command()
def check(
    time: Annotated[str, typer.Argument(help="Start time, e.g. '02:00 م' or '2:00 PM'.")],
    config_file: ConfigOption = None,
    date: DateOption = None,
    duration: DurationArg = None,
):
    """
    Check whether one start time is free. Exits with 1 when it is not.
    """
    try:
        config = _load_config(config_file)
        booking_date = _resolve_date(date, config.timezone)
        option = config.resolve_duration(duration)

        service = _build_service(config)
        available = asyncio.run(service.is_available(booking_date, time, option.value))
    except FileNotFoundError as e:
        _fail(str(e))
    except SpaSlotError as e:
        _fail(str(e))

    if available:
        console.print(f"[green]✓ {time} ({option.label}) is available on {booking_date.isoformat()}[/green]")
    else:
        console.print(f"[yellow]✗ {time} ({option.label}) is not available on {booking_date.isoformat()}[/yellow]")
        raise typer.Exit(1)


@app.command()
def book(
    time: Annotated[str, typer.Argument(help="Start time, e.g. '02:00 م' or '2:00 PM'.")],
    config_file: ConfigOption = None,
    date: DateOption = None,
    duration: DurationArg = None,
):
    """
    Submit a booking after re-checking the slot against fresh data.
    """
    try:
        config = _load_config(config_file)
        booking_date = _resolve_date(date, config.timezone)
        option = config.resolve_duration(duration)

        service = _build_service(config)
        booking = asyncio.run(service.confirm_booking(booking_date, time, option.value))

        console.print(
            f"[bold green]✓ Booking submitted:[/bold green] {booking.label()} on "
            f"{booking_date.isoformat()} - {option.price:g} (pending approval)"
        )

    except ConflictAtCommit as e:
        detail = f" (conflicts with {', '.join(e.conflicts)})" if e.conflicts else ""
        console.print(f"[bold yellow]{e}[/bold yellow]{detail}")
        raise typer.Exit(1)
    except FileNotFoundError as e:
        _fail(str(e))
    except SpaSlotError as e:
        _fail(str(e))


@app.command()
def durations(config_file: ConfigOption = None):
    """
    List the configured duration catalog.
    """
    try:
        config = _load_config(config_file)
    except FileNotFoundError as e:
        _fail(str(e))
    except SpaSlotError as e:
        _fail(str(e))

    table = Table(
        title="Duration options",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Value", style="bold yellow")
    table.add_column("Label")
    table.add_column("Minutes", justify="right")
    table.add_column("Price", justify="right", style="dim")

    for option in config.duration_options:
        table.add_row(option.value, option.label, str(option.minutes()), f"{option.price:g}")

    console.print()
    console.print(table)
    console.print()


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]spaslotfinder[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
