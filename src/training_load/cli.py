#!/usr/bin/env python3
"""
Training load CLI.

Scores activities and shows the fitness-fatigue timeline from JSON files.

Usage:
    training-load score activity.json --thresholds athlete.json
    training-load timeline activities.json --days 30 --end 2024-06-30
    training-load readiness --tsb -18.5 --recovery 54
"""

import argparse
import json
import logging
import sys
from datetime import date
from pathlib import Path
from typing import Any, List, Optional

from pydantic import ValidationError
from rich import box
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .config import get_settings
from .exceptions import TrainingLoadError
from .models import ActivityRecord, AthleteThresholds
from .readiness import interpret_recovery_score, interpret_tsb, needs_fatigue_alert
from .services.load_service import TrainingLoadService

console = Console()
err_console = Console(stderr=True)


class CliInputError(Exception):
    """Input file missing, unreadable or invalid."""


def setup_logging(verbose: bool = False) -> None:
    """Route engine logs through rich on stderr."""
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _read_json(path: str) -> Any:
    try:
        with open(Path(path), encoding="utf-8") as f:
            return json.load(f)
    except OSError as e:
        raise CliInputError(f"Cannot read {path}: {e.strerror or e}") from e
    except json.JSONDecodeError as e:
        raise CliInputError(f"{path} is not valid JSON: {e}") from e


def load_activities(path: str) -> List[ActivityRecord]:
    """Load one activity object or a list of them."""
    data = _read_json(path)
    items = data if isinstance(data, list) else [data]
    try:
        return [ActivityRecord.model_validate(item) for item in items]
    except ValidationError as e:
        raise CliInputError(f"Invalid activity in {path}:\n{e}") from e


def load_thresholds(path: Optional[str]) -> Optional[AthleteThresholds]:
    """Load an athlete threshold profile, if a path was given."""
    if not path:
        return None
    try:
        return AthleteThresholds.model_validate(_read_json(path))
    except ValidationError as e:
        raise CliInputError(f"Invalid thresholds in {path}:\n{e}") from e


def parse_date(value: str) -> date:
    """argparse type for YYYY-MM-DD dates."""
    try:
        return date.fromisoformat(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid date '{value}', expected YYYY-MM-DD")


def format_tsb_rich(tsb: float) -> Text:
    """Format TSB with rich colors."""
    readiness = interpret_tsb(tsb)
    return Text(f"{tsb:+.1f} ({readiness.label})", style=readiness.color)


def cmd_score(args, service: TrainingLoadService) -> None:
    """Score each activity in a file and show the tier used."""
    activities = load_activities(args.activity)
    thresholds = load_thresholds(args.thresholds)

    table = Table(title="Training Stress", box=box.ROUNDED)
    table.add_column("Activity", style="cyan")
    table.add_column("Modality")
    table.add_column("Duration", justify="right")
    table.add_column("Tier")
    table.add_column("IF", justify="right")
    table.add_column("TSS", justify="right", style="bold")

    for index, activity in enumerate(activities, start=1):
        result = service.score(activity, thresholds)
        table.add_row(
            activity.name or activity.external_id or f"#{index}",
            activity.modality.value,
            f"{activity.duration_minutes:.0f} min",
            result.tier.value,
            f"{result.intensity_factor:.2f}" if result.intensity_factor is not None else "-",
            str(result.tss),
        )

    console.print()
    console.print(table)
    console.print()


def cmd_timeline(args, service: TrainingLoadService) -> None:
    """Show the ATL/CTL/TSB timeline for an activity history."""
    activities = load_activities(args.activities)
    thresholds = load_thresholds(args.thresholds)
    points = service.timeline(activities, thresholds, end_date=args.end, display_days=args.days)

    console.print()
    if not points:
        console.print("No completed, dated activities in the requested window.")
        console.print()
        return

    table = Table(title=f"Training Load (Last {args.days or service.settings.display_window_days} Days)", box=box.ROUNDED)
    table.add_column("Date", style="cyan")
    table.add_column("TSS", justify="right")
    table.add_column("CTL", justify="right")
    table.add_column("ATL", justify="right")
    table.add_column("TSB", justify="right")

    for point in points:
        table.add_row(
            point.date.isoformat(),
            f"{point.daily_tss:.1f}",
            f"{point.ctl:.1f}",
            f"{point.atl:.1f}",
            format_tsb_rich(point.tsb),
        )

    console.print(table)
    console.print()

    legend = Table(title="Legend", box=box.SIMPLE, show_header=False)
    legend.add_column("Term")
    legend.add_column("Description")
    legend.add_row("CTL", "Chronic Training Load (fitness, 42-day)")
    legend.add_row("ATL", "Acute Training Load (fatigue, 7-day)")
    legend.add_row("TSB", "Training Stress Balance (yesterday's CTL - ATL)")
    console.print(legend)
    console.print()


def cmd_readiness(args, service: TrainingLoadService) -> None:
    """Interpret a TSB value and/or a recovery score."""
    if args.tsb is None and args.recovery is None:
        raise CliInputError("Pass --tsb, --recovery or both")

    lines = []
    if args.tsb is not None:
        readiness = interpret_tsb(args.tsb)
        lines.append(f"[bold]Form:[/bold] [{readiness.color}]{args.tsb:+.1f} {readiness.label}[/{readiness.color}]")
        lines.append(f"  {readiness.advice}")
        if needs_fatigue_alert(args.tsb, settings=service.settings):
            lines.append("[bold red]Fatigue alert: form is below the alert threshold[/bold red]")
    if args.recovery is not None:
        recovery = interpret_recovery_score(args.recovery)
        lines.append(f"[bold]Recovery:[/bold] [{recovery.color}]{args.recovery:.0f}% {recovery.label}[/{recovery.color}]")
        lines.append(f"  {recovery.advice}")

    console.print()
    console.print(Panel("\n".join(lines), title="Readiness", border_style="cyan"))
    console.print()


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        prog="training-load",
        description="Training load engine - TSS, ATL/CTL/TSB and readiness",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  training-load score ride.json --thresholds athlete.json
  training-load timeline history.json --days 30
  training-load readiness --tsb -12 --recovery 70
        """,
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Show debug logging")

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    score_p = subparsers.add_parser("score", help="Score activities from a JSON file")
    score_p.add_argument("activity", help="JSON file with one activity or a list")
    score_p.add_argument("--thresholds", "-t", help="JSON file with athlete thresholds")

    timeline_p = subparsers.add_parser("timeline", help="Show ATL/CTL/TSB timeline")
    timeline_p.add_argument("activities", help="JSON file with a list of activities")
    timeline_p.add_argument("--thresholds", "-t", help="JSON file with athlete thresholds")
    timeline_p.add_argument("--days", "-d", type=int, default=None, help="Days to display")
    timeline_p.add_argument("--end", type=parse_date, default=None, help="Last day (YYYY-MM-DD)")

    readiness_p = subparsers.add_parser("readiness", help="Interpret TSB and recovery score")
    readiness_p.add_argument("--tsb", type=float, help="Training Stress Balance")
    readiness_p.add_argument("--recovery", type=float, help="Recovery score (0-100)")

    return parser


COMMANDS = {
    "score": cmd_score,
    "timeline": cmd_timeline,
    "readiness": cmd_readiness,
}


def main(argv: Optional[List[str]] = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    command = COMMANDS.get(args.command)
    if command is None:
        parser.print_help()
        return

    try:
        command(args, TrainingLoadService())
    except (CliInputError, TrainingLoadError) as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)


if __name__ == "__main__":
    main()
