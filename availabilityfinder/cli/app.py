"""
Main CLI application using Typer.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional, Annotated

import pendulum
import typer
from rich.console import Console
from rich.table import Table

from ..config import AppConfig
from ..domain.exceptions import AvailabilityError
from ..domain.models import AvailabilityResult
from ..domain.zoned import validate_timezone
from ..adapters.google_calendar_client import GoogleCalendarClient
from ..adapters.mock_calendar_client import MockCalendarClient
from ..services.availability_service import AvailabilityQuery, AvailabilityService

app = typer.Typer(
    name="availabilityfinder",
    help="Find free meeting slots in a calendar",
    add_completion=False
)

console = Console()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_client(events_file: Optional[Path], token: Optional[str]):
    """
    Pick the busy-interval source: an events file wins over the Google API.
    """
    if events_file is not None:
        return MockCalendarClient(data_file=events_file)
    if token:
        return GoogleCalendarClient(access_token=token)
    raise typer.BadParameter(
        "Provide --events-file or a Google access token (--token / GOOGLE_ACCESS_TOKEN)."
    )


def _parse_datetime(value: Optional[str], tz: str, label: str):
    if value is None:
        return None
    try:
        return pendulum.parse(value, tz=tz)
    except ValueError as e:
        console.print(f"[red]Could not parse {label}: {e}[/red]")
        raise typer.Exit(1)


def _render_result(result: AvailabilityResult) -> None:
    summary = result.to_dict()["summary"]

    console.print("[bold cyan]Summary:[/bold cyan]")
    console.print(
        f"   Range: {result.range.start.in_timezone(result.timezone).format('YYYY-MM-DD HH:mm')}"
        f" - {result.range.end.in_timezone(result.timezone).format('YYYY-MM-DD HH:mm')} ({result.timezone})"
    )
    console.print(f"   Working hours: {result.working_hours.start} - {result.working_hours.end}")
    console.print(f"   Meetings: {summary['meetingCount']} ({summary['totalBusyHours']} h busy)")
    console.print(f"   Free time: {summary['totalFreeHours']} h")
    console.print()

    if not result.slots:
        console.print(
            "[yellow]No free slots found.[/yellow]\n"
            "Try a longer range, wider working hours or a shorter duration."
        )
        return

    table = Table(
        title=f"{len(result.slots)} of {result.total_slots_found} free slot(s)",
        show_header=True,
        header_style="bold cyan"
    )
    table.add_column("Slot", style="bold")
    table.add_column("Granularity", style="dim")

    for slot in result.slots:
        table.add_row(slot.format_display(result.timezone), slot.granularity.value)

    console.print(table)


@app.command()
def find(
    query: Annotated[Optional[str], typer.Argument(help="Natural-language request, e.g. '30 min tomorrow'.")] = None,
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")] = None,
    timezone: Annotated[Optional[str], typer.Option("--tz", help="IANA timezone. Defaults to the configured timezone.")] = None,
    start: Annotated[Optional[str], typer.Option("--start", help="Explicit window start (ISO-8601)")] = None,
    end: Annotated[Optional[str], typer.Option("--end", help="Explicit window end (ISO-8601)")] = None,
    now: Annotated[Optional[str], typer.Option("--now", help="Reference time for relative phrases (ISO-8601)")] = None,
    duration: Annotated[Optional[int], typer.Option("--duration", "-d", help="Meeting duration in minutes")] = None,
    work_start: Annotated[Optional[str], typer.Option("--work-start", help="Working hours start (HH:MM)")] = None,
    work_end: Annotated[Optional[str], typer.Option("--work-end", help="Working hours end (HH:MM)")] = None,
    include_weekends: Annotated[bool, typer.Option("--include-weekends", help="Also search Saturdays and Sundays.")] = False,
    events_file: Annotated[Optional[Path], typer.Option("--events-file", help="Read busy events from a JSON file instead of Google Calendar.")] = None,
    token: Annotated[Optional[str], typer.Option("--token", envvar="GOOGLE_ACCESS_TOKEN", help="Google OAuth access token.")] = None,
    as_json: Annotated[bool, typer.Option("--json", help="Print the raw JSON payload.")] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Find free meeting slots.

    Examples:

        availabilityfinder find "30 min tomorrow" --events-file events.json

        availabilityfinder find "next tuesday evening" --tz America/New_York

        availabilityfinder find --start 2024-11-25 --end 2024-11-29 --json
    """
    _configure_logging(verbose)

    try:
        config = AppConfig.load(config_file)
        tz = validate_timezone(timezone or config.timezone)

        service = AvailabilityService(
            settings=config.to_engine_settings(),
            calendar_client=_build_client(events_file, token),
            default_timezone=tz,
            calendar_ids=config.calendar_ids,
        )

        availability_query = AvailabilityQuery(
            natural_language_query=query,
            timezone=tz,
            now_instant=_parse_datetime(now, tz, "--now"),
            explicit_start=_parse_datetime(start, tz, "--start"),
            explicit_end=_parse_datetime(end, tz, "--end"),
            duration_minutes=duration,
            working_hours_start=work_start,
            working_hours_end=work_end,
            exclude_weekends=False if include_weekends else None,
        )

        result = asyncio.run(service.find_availability(availability_query))

        if as_json:
            typer.echo(json.dumps(result.to_dict(), indent=2))
        else:
            _render_result(result)

    except (AvailabilityError, FileNotFoundError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def check(
    start: Annotated[str, typer.Argument(help="Proposed meeting start (ISO-8601)")],
    end: Annotated[str, typer.Argument(help="Proposed meeting end (ISO-8601)")],
    config_file: Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file")] = None,
    timezone: Annotated[Optional[str], typer.Option("--tz", help="IANA timezone")] = None,
    events_file: Annotated[Optional[Path], typer.Option("--events-file", help="Read busy events from a JSON file.")] = None,
    token: Annotated[Optional[str], typer.Option("--token", envvar="GOOGLE_ACCESS_TOKEN", help="Google OAuth access token.")] = None,
):
    """
    Check whether a proposed meeting window is free.
    """
    try:
        config = AppConfig.load(config_file)
        tz = validate_timezone(timezone or config.timezone)

        service = AvailabilityService(
            settings=config.to_engine_settings(),
            calendar_client=_build_client(events_file, token),
            default_timezone=tz,
            calendar_ids=config.calendar_ids,
        )

        report = asyncio.run(
            service.check_window(
                _parse_datetime(start, tz, "start"),
                _parse_datetime(end, tz, "end"),
                tz,
            )
        )

        if report["available"]:
            console.print("[green]✓ The window is free.[/green]")
            return

        console.print(f"[yellow]⚠ {len(report['conflicts'])} conflict(s):[/yellow]")
        for conflict in report["conflicts"]:
            console.print(f"  {conflict['start']} - {conflict['end']}  {conflict['title']}")
        raise typer.Exit(2)

    except (AvailabilityError, FileNotFoundError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]availabilityfinder[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
