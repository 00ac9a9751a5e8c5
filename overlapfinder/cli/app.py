"""
Main CLI application using Typer.
"""

import json
import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.table import Table

from ..adapters.api_client import AvailabilityApiClient
from ..adapters.json_source import JsonAvailabilitySource
from ..config import AppConfig, load_config
from ..domain.exceptions import OverlapFinderError
from ..domain.models import format_12h, format_date_long
from ..domain.overlap_engine import OverlapEngine
from ..services.availability_service import AvailabilityService

app = typer.Typer(
    name="overlapfinder",
    help="Find time ranges where meeting participants are available together",
    add_completion=False
)

console = Console()

ConfigOption = Annotated[Optional[Path], typer.Option("--config", "-c", help="Path to config file. Defaults to ./config.yaml")]
FileOption = Annotated[Optional[Path], typer.Option("--file", "-f", help="Read availability from a JSON export instead of the API.")]


@app.callback()
def main(
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable debug logging.")] = False,
):
    """
    Meeting availability overlap finder.
    """
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


def _configure_logging(config: AppConfig) -> None:
    # A no-op when --verbose already configured the root logger
    logging.basicConfig(level=config.log_level, format="%(levelname)s %(name)s: %(message)s")


def _build_service(config: AppConfig, availability_file: Optional[Path], strict: bool) -> AvailabilityService:
    """Create the service with either the file or the API as data source."""
    if availability_file is not None:
        source = JsonAvailabilitySource(availability_file)
    else:
        source = AvailabilityApiClient(
            base_url=config.api.base_url,
            timeout=config.api.timeout_seconds
        )

    engine = OverlapEngine(strict=strict or config.strict)
    return AvailabilityService(source=source, engine=engine)


def _format_time(value: str, time_format: str) -> str:
    if time_format == "24h":
        return value
    try:
        return format_12h(value)
    except ValueError:
        return value


@app.command()
def slots(
    meeting_id: Annotated[str, typer.Argument(help="ID of the meeting")],
    config_file: ConfigOption = None,
    availability_file: FileOption = None,
    strict: Annotated[bool, typer.Option("--strict", help="Fail on malformed availability entries instead of skipping them.")] = False,
    as_json: Annotated[bool, typer.Option("--json", help="Print the result as JSON.")] = False,
):
    """
    Show time ranges where two or more participants are available.

    Examples:

        overlapfinder slots 5f0c...

        overlapfinder slots demo --file availability.json --json
    """
    try:
        config = load_config(config_file)
        _configure_logging(config)

        service = _build_service(config, availability_file, strict)
        report = service.find_common_slots(meeting_id)

        if as_json:
            payload = {
                "meeting_id": meeting_id,
                "slots": [slot.to_dict() for slot in report.slots],
                "rejected": [
                    {"record": rejected.record.to_dict(), "reason": rejected.reason}
                    for rejected in report.rejected
                ],
            }
            typer.echo(json.dumps(payload, indent=2))
            return

        meeting = service.get_meeting(meeting_id)
        title = meeting.title or meeting.id

        for rejected in report.rejected:
            console.print(
                f"[yellow]Warning: skipped entry of {rejected.record.participant_name} "
                f"on {rejected.record.date}: {rejected.reason}[/yellow]"
            )

        console.print()
        if not report.slots:
            console.print(
                f"[yellow]No common availability found for {title}.[/yellow]\n"
                "At least two participants must be available at the same time."
            )
            console.print()
            return

        table = Table(
            title=f"Common availability - {title}",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Date", style="bold")
        table.add_column("Time")
        table.add_column("Minutes", justify="right")
        table.add_column("Participants", style="green")

        time_format = config.display.time_format
        for slot in report.slots:
            table.add_row(
                format_date_long(slot.date),
                slot.format_time_range(time_format),
                str(slot.duration_minutes()),
                ", ".join(slot.participants)
            )

        console.print(table)
        console.print(f"[bold green]{len(report.slots)} common slot(s) found.[/bold green]")
        console.print()

    except (OverlapFinderError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command(name="list")
def list_availability(
    meeting_id: Annotated[str, typer.Argument(help="ID of the meeting")],
    config_file: ConfigOption = None,
    availability_file: FileOption = None,
):
    """
    List all submitted availability grouped by date.
    """
    try:
        config = load_config(config_file)
        _configure_logging(config)

        service = _build_service(config, availability_file, strict=False)
        grouped = service.grouped_availability(meeting_id)

        if not grouped:
            console.print("\n[yellow]No availability added yet.[/yellow]\n")
            return

        total = sum(len(records) for records in grouped.values())
        table = Table(
            title=f"Availability ({total} entries)",
            show_header=True,
            header_style="bold cyan"
        )
        table.add_column("Date", style="bold")
        table.add_column("Participant", style="bold yellow")
        table.add_column("Time")

        time_format = config.display.time_format
        for date, records in grouped.items():
            for index, record in enumerate(records):
                table.add_row(
                    format_date_long(date) if index == 0 else "",
                    record.participant_name,
                    f"{_format_time(record.start_time, time_format)} - "
                    f"{_format_time(record.end_time, time_format)}"
                )

        console.print()
        console.print(table)
        console.print()

    except (OverlapFinderError, FileNotFoundError, ValueError) as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(1)


@app.command()
def version():
    """
    Show version information.
    """
    from .. import __version__
    console.print(f"\n[bold cyan]overlapfinder[/bold cyan] version [bold]{__version__}[/bold]\n")


if __name__ == "__main__":
    app()
