#!/usr/bin/env python3
"""
Coach Briefing CLI.

Preview the dashboard briefing for a snapshot of recent reports and workouts.

Usage:
    coach-briefing select snapshot.json --now 2024-01-09
    coach-briefing card snapshot.json --user-id u1 --coach-id c1
    coach-briefing card snapshot.json --json

The snapshot file holds ``{"recentReports": [...], "recentWorkouts": [...]}``,
both most recent first.
"""

import argparse
import json
import logging
import math
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .briefing import build_briefing_card
from .config import get_settings
from .models.briefing import BriefingCard, InsightKind
from .models.reports import parse_datetime
from .selector import is_warning, latest_report, report_age_days, select_insight_source
from .utils.log_sanitizer import install_log_sanitizer


console = Console()


def get_kind_color(kind: InsightKind, warning: bool = False) -> str:
    """Get rich color for a briefing kind."""
    if warning and kind in (InsightKind.WEEKLY, InsightKind.COMBINED):
        return "magenta"
    colors = {
        InsightKind.WEEKLY: "purple",
        InsightKind.COMBINED: "purple",
        InsightKind.WORKOUT: "cyan",
    }
    return colors.get(kind, "white")


def load_snapshot(path: Path) -> Dict[str, Any]:
    """Read a snapshot file; raises ValueError with a readable message."""
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise ValueError(f"Cannot read {path}: {e.strerror}") from e
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e.msg} (line {e.lineno})") from e
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object in {path}")
    return data


def parse_now(value: Optional[str]) -> datetime:
    """Parse --now, defaulting to the current UTC time."""
    if not value:
        return datetime.now(timezone.utc)
    parsed = parse_datetime(value)
    if parsed is None:
        raise ValueError(f"Invalid --now value: {value}")
    return parsed


def render_card(card: BriefingCard) -> Panel:
    """Render a briefing card as a rich panel."""
    body = Text()

    if card.warning_message:
        body.append(card.warning_message + "\n\n", style="bold magenta")

    if card.headline:
        body.append(card.headline + "\n", style="bold white")

    if card.quick_wins:
        body.append("\nQuick Wins\n", style="dim")
        for i, win in enumerate(card.quick_wins, 1):
            body.append(f"{i}. ", style="purple")
            body.append(win + "\n")

    if card.workout:
        name = card.workout.workout_name
        if card.kind is InsightKind.COMBINED:
            label = f"Last Workout · {name}" if name else "Last Workout"
            body.append("\n" + label + "\n", style="dim")
        elif name:
            body.append(name + "\n", style="dim")
        body.append(card.workout.summary + "\n")

    subtitle = None
    if card.week_id:
        subtitle = card.week_id
        if card.workout_count is not None:
            subtitle += f" · {card.workout_count} workouts"

    return Panel(
        body,
        title=f"[bold]{card.title}[/bold]",
        subtitle=subtitle,
        border_style=get_kind_color(card.kind, card.is_warning),
        box=box.ROUNDED,
    )


def cmd_select(args) -> int:
    """Show which insight source would be selected and why."""
    snapshot = load_snapshot(Path(args.file))
    now = parse_now(args.now)
    settings = get_settings()

    reports = snapshot.get("recentReports") or []
    workouts = snapshot.get("recentWorkouts") or []

    source = select_insight_source(
        reports,
        workouts,
        now,
        fresh_max_age_days=settings.fresh_report_max_age_days,
        combined_max_age_days=settings.combined_report_max_age_days,
    )
    report = latest_report(reports)
    age = report_age_days(report, now)
    warning = is_warning(report, settings.deload_action)

    table = Table(title="Briefing Selection", box=box.ROUNDED)
    table.add_column("Field", style="cyan")
    table.add_column("Value", style="white")

    table.add_row("Evaluated at", now.isoformat())
    table.add_row("Kind", Text(source.kind.value, style=get_kind_color(source.kind, warning)))
    table.add_row("Latest report", (report.week_id or "(no id)") if report else "-")
    table.add_row("Report age", "unknown" if math.isinf(age) else f"{age} days")
    table.add_row("Warning", "yes" if warning else "no")
    if source.workout:
        table.add_row("Workout", source.workout.workout_id or "(no id)")

    console.print(table)
    return 0


def cmd_card(args) -> int:
    """Build and render the briefing card."""
    snapshot = load_snapshot(Path(args.file))
    now = parse_now(args.now)

    card = build_briefing_card(
        snapshot.get("recentReports") or [],
        snapshot.get("recentWorkouts") or [],
        now,
        user_id=args.user_id,
        coach_id=args.coach_id,
    )

    if args.json:
        payload = card.model_dump(mode="json", by_alias=True) if card else None
        print(json.dumps({"card": payload}, indent=2))
        return 0

    if card is None:
        console.print("[dim]Nothing to show: no fresh analytics or workout summaries.[/dim]")
        return 0

    console.print(render_card(card))
    if card.report_link:
        console.print(f"[dim]Full report: {card.report_link}[/dim]")
    if card.workout_link:
        console.print(f"[dim]Workout: {card.workout_link}[/dim]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coach-briefing",
        description="Preview the dashboard coach briefing",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    select_parser = subparsers.add_parser("select", help="Show the selected insight source")
    select_parser.add_argument("file", help="Snapshot JSON file")
    select_parser.add_argument("--now", help="Evaluation time (ISO-8601), default now")
    select_parser.set_defaults(func=cmd_select)

    card_parser = subparsers.add_parser("card", help="Render the briefing card")
    card_parser.add_argument("file", help="Snapshot JSON file")
    card_parser.add_argument("--now", help="Evaluation time (ISO-8601), default now")
    card_parser.add_argument("--user-id", help="User id for deep links")
    card_parser.add_argument("--coach-id", help="Coach id for deep links")
    card_parser.add_argument("--json", action="store_true", help="Print the card as JSON")
    card_parser.set_defaults(func=cmd_card)

    return parser


def main(argv: Optional[list] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    install_log_sanitizer()

    try:
        return args.func(args)
    except ValueError as e:
        console.print(f"[red]Error:[/red] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
