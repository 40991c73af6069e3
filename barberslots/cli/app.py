"""
Main CLI application using Typer.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from ..adapters.memory_store import InMemoryScheduleStore
from ..config import (
    AppConfig,
    AvailabilityConfig,
    BookingConfig,
    TenantConfig,
    get_default_config_path,
)
from ..domain.exceptions import BookingSystemError, TenantNotFoundError
from ..domain.models import BookingStatus
from ..services.availability import AvailabilityService, merge_chronologically
from ..services.bookings import BookingService
from ..services.schedule import ScheduleService

app = typer.Typer(
    name="barberslots",
    help="Find and book appointment slots for barbershops",
    add_completion=False
)

console = Console()

WEEKDAY_NAMES = ["Sunday", "Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday"]

ConfigOption = Annotated[
    Optional[Path],
    typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Show debug logging."),
]


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _load(config_file: Optional[Path], verbose: bool) -> tuple[Path, AppConfig, InMemoryScheduleStore]:
    _configure_logging(verbose)
    config_path = config_file or get_default_config_path()
    config = AppConfig.load_from_yaml(config_path)
    return config_path, config, InMemoryScheduleStore.from_config(config)


def _tenant_config(config: AppConfig, tenant: str) -> TenantConfig:
    tenant_config = config.find_tenant(tenant)
    if tenant_config is None:
        raise TenantNotFoundError(f"Tenant not found: {tenant}")
    return tenant_config


def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error:[/bold red] {escape(str(error))}")
    raise typer.Exit(1)


@app.command()
def slots(
    tenant: Annotated[str, typer.Argument(help="Shop slug, e.g. 'the-barber-shop'")],
    service_id: Annotated[int, typer.Argument(help="Service id")],
    date: Annotated[str, typer.Argument(help="Date (YYYY-MM-DD), interpreted in UTC")],
    staff: Annotated[Optional[int], typer.Option("--staff", "-s", help="Only this staff member")] = None,
    merged: Annotated[bool, typer.Option("--merged", help="Sort slots of all staff chronologically")] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print slots as JSON")] = False,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Show bookable slots for a service on a date.

    Examples:

        barberslots slots the-barber-shop 1 2024-11-25
        barberslots slots the-barber-shop 1 2024-11-25 --staff 10
        barberslots slots the-barber-shop 1 2024-11-25 --merged --json
    """
    try:
        _, config, store = _load(config_file, verbose)

        service = AvailabilityService(directory=store)
        found = service.find_slots(
            tenant_slug=tenant,
            service_id=service_id,
            date=date,
            staff_id=staff,
        )
        if merged:
            found = merge_chronologically(found)

        if as_json:
            typer.echo(json.dumps([slot.to_dict() for slot in found], indent=2))
            return

        console.print()
        if not found:
            console.print(
                "[yellow]⚠ No available slots found.[/yellow]\n"
                "Try another date, staff member or a shorter service."
            )
        else:
            console.print(f"[bold green]✓ {len(found)} available slot(s):[/bold green]\n")
            for slot in found:
                console.print(f"  {slot.format_display(config.display_timezone)}")
        console.print()

    except (BookingSystemError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def services(
    tenant: Annotated[str, typer.Argument(help="Shop slug")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List the services of a shop.
    """
    try:
        _, _, store = _load(config_file, verbose)
        shop = store.get_tenant(tenant)
        if shop is None:
            raise TenantNotFoundError(f"Tenant not found: {tenant}")

        table = Table(title=f"Services – {shop.name}", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="bold yellow")
        table.add_column("Name")
        table.add_column("Duration", justify="right")
        table.add_column("Price", justify="right", style="dim")

        for service in store.list_services(shop.id):
            price = f"{service.price:.2f}" if service.price is not None else "-"
            table.add_row(str(service.id), service.name, f"{service.duration_minutes} min", price)

        console.print()
        console.print(table)
        console.print()

    except (BookingSystemError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def staff(
    tenant: Annotated[str, typer.Argument(help="Shop slug")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List the staff members of a shop.
    """
    try:
        _, _, store = _load(config_file, verbose)
        shop = store.get_tenant(tenant)
        if shop is None:
            raise TenantNotFoundError(f"Tenant not found: {tenant}")

        members = store.list_staff_for_tenant(shop.id)
        if not members:
            console.print("[yellow]No staff members configured for this shop.[/yellow]")
            return

        table = Table(title=f"Staff – {shop.name}", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="bold yellow")
        table.add_column("Name")
        table.add_column("E-Mail", style="dim")

        for member in members:
            table.add_row(str(member.id), member.name or "-", member.email)

        console.print()
        console.print(table)
        console.print()

    except (BookingSystemError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def availability(
    tenant: Annotated[str, typer.Argument(help="Shop slug")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List the weekly availability windows of a shop's staff.
    """
    try:
        _, _, store = _load(config_file, verbose)
        windows = ScheduleService(store=store).list_availability(tenant_slug=tenant)
        shop = store.get_tenant(tenant)

        labels = {member.id: member.label for member in store.list_staff_for_tenant(shop.id)}

        table = Table(title=f"Availability – {shop.name} (UTC)", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="bold yellow")
        table.add_column("Staff")
        table.add_column("Day")
        table.add_column("From")
        table.add_column("Until")

        for window in windows:
            table.add_row(
                str(window.id),
                labels.get(window.staff_id, str(window.staff_id)),
                WEEKDAY_NAMES[window.day_of_week],
                window.start_time.strftime("%H:%M"),
                window.end_time.strftime("%H:%M"),
            )

        console.print()
        console.print(table)
        console.print()

    except (BookingSystemError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def bookings(
    tenant: Annotated[str, typer.Argument(help="Shop slug")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List the bookings of a shop.
    """
    try:
        _, _, store = _load(config_file, verbose)
        found = BookingService(store=store).list_bookings(tenant_slug=tenant)

        table = Table(title="Bookings", show_header=True, header_style="bold cyan")
        table.add_column("ID", style="bold yellow")
        table.add_column("When")
        table.add_column("Staff")
        table.add_column("Customer")
        table.add_column("Status")

        for booking in found:
            status_style = "green" if booking.is_active else "dim"
            table.add_row(
                str(booking.id),
                str(booking.time_range),
                str(booking.staff_id),
                f"{booking.customer_name} <{booking.customer_email}>",
                f"[{status_style}]{booking.status.value}[/{status_style}]",
            )

        console.print()
        console.print(table)
        console.print()

    except (BookingSystemError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def book(
    tenant: Annotated[str, typer.Argument(help="Shop slug")],
    service_id: Annotated[int, typer.Argument(help="Service id")],
    staff_id: Annotated[int, typer.Argument(help="Staff member id")],
    start: Annotated[str, typer.Argument(help="Start time, ISO 8601 (e.g. 2024-11-25T09:30:00Z)")],
    name: Annotated[str, typer.Option("--name", help="Customer name")],
    email: Annotated[str, typer.Option("--email", help="Customer e-mail")],
    phone: Annotated[Optional[str], typer.Option("--phone", help="Customer phone")] = None,
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Book a slot and store it in the config file.
    """
    try:
        config_path, config, store = _load(config_file, verbose)

        created = BookingService(store=store).create_booking(
            tenant_slug=tenant,
            service_id=service_id,
            staff_id=staff_id,
            start=start,
            customer_name=name,
            customer_email=email,
            customer_phone=phone,
        )

        _tenant_config(config, tenant).bookings.append(BookingConfig.from_domain(created))
        config.save_to_yaml(config_path)

        console.print(
            f"\n[green]✓ Booking {created.id} confirmed:[/green] {created.time_range} (UTC)\n"
        )

    except (BookingSystemError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command()
def cancel(
    tenant: Annotated[str, typer.Argument(help="Shop slug")],
    booking_id: Annotated[int, typer.Argument(help="Booking id")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Cancel a booking and store the change in the config file.
    """
    try:
        config_path, config, store = _load(config_file, verbose)

        cancelled = BookingService(store=store).cancel_booking(
            tenant_slug=tenant,
            booking_id=booking_id,
        )

        for booking_config in _tenant_config(config, tenant).bookings:
            if booking_config.id == cancelled.id:
                booking_config.status = BookingStatus.CANCELLED
        config.save_to_yaml(config_path)

        console.print(f"\n[green]✓ Booking {cancelled.id} cancelled.[/green]\n")

    except (BookingSystemError, FileNotFoundError, ValueError) as e:
        _fail(e)

@app.command()
def customers(
    tenant: Annotated[str, typer.Argument(help="Shop slug")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    List the distinct customers who booked at a shop.
    """
    try:
        _, _, store = _load(config_file, verbose)
        found = BookingService(store=store).list_customers(tenant_slug=tenant)

        if not found:
            console.print("[yellow]No customers yet.[/yellow]")
            return

        table = Table(title="Customers", show_header=True, header_style="bold cyan")
        table.add_column("Name", style="bold yellow")
        table.add_column("E-Mail")
        table.add_column("Phone", style="dim")

        for customer in found:
            table.add_row(customer.name, customer.email, customer.phone or "-")

        console.print()
        console.print(table)
        console.print()

    except (BookingSystemError, FileNotFoundError, ValueError) as e:
        _fail(e)


def _save_windows(config: AppConfig, config_path: Path, store: InMemoryScheduleStore, tenant: str) -> None:
    tenant_config = _tenant_config(config, tenant)
    tenant_config.availability = [
        AvailabilityConfig.from_domain(window)
        for window in store.list_availability(tenant_config.id)
    ]
    config.save_to_yaml(config_path)


@app.command("add-window")
def add_window(
    tenant: Annotated[str, typer.Argument(help="Shop slug")],
    staff_id: Annotated[int, typer.Argument(help="Staff member id")],
    day: Annotated[int, typer.Argument(help="Weekday, 0=Sunday ... 6=Saturday")],
    start: Annotated[str, typer.Argument(help="Window start, HH:MM in UTC")],
    end: Annotated[str, typer.Argument(help="Window end, HH:MM in UTC")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Add a weekly availability window and store it in the config file.

    Example:

        barberslots add-window the-barber-shop 10 3 09:00 17:00
    """
    try:
        config_path, config, store = _load(config_file, verbose)

        created = ScheduleService(store=store).add_availability(
            tenant_slug=tenant,
            staff_id=staff_id,
            day_of_week=day,
            start=start,
            end=end,
        )
        _save_windows(config, config_path, store, tenant)

        console.print(
            f"\n[green]✓ Window {created.id} added:[/green] "
            f"{WEEKDAY_NAMES[created.day_of_week]} {start}-{end} (UTC)\n"
        )

    except (BookingSystemError, FileNotFoundError, ValueError) as e:
        _fail(e)


@app.command("remove-window")
def remove_window(
    tenant: Annotated[str, typer.Argument(help="Shop slug")],
    window_id: Annotated[int, typer.Argument(help="Window id, see 'availability'")],
    config_file: ConfigOption = None,
    verbose: VerboseOption = False,
):
    """
    Remove a weekly availability window and store the change in the config file.

    Existing bookings inside the window are kept.
    """
    try:
        config_path, config, store = _load(config_file, verbose)

        removed = ScheduleService(store=store).remove_availability(
            tenant_slug=tenant,
            window_id=window_id,
        )
        _save_windows(config, config_path, store, tenant)

        console.print(f"\n[green]✓ Window {removed.id} removed.[/green]\n")

    except (BookingSystemError, FileNotFoundError, ValueError) as e:
        _fail(e)



@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]barberslots[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
