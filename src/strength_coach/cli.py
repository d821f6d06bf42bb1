#!/usr/bin/env python3
"""
Strength Coach CLI.

Progress analysis and pre-workout suggestions from exported workout history.

Usage:
    strength-coach analyze history.json --exercise bench-press --target-reps 8
    strength-coach suggest request.json
    strength-coach cycles --type strength
    strength-coach recommend-cycle history.json --experience beginner --goal build
    strength-coach serve --port 8000
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path
from typing import Any, List

from pydantic import TypeAdapter, ValidationError
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from .analysis.performance import PerformanceAnalyzer
from .analysis.sufficiency import has_enough_history_for_plateau_detection
from .config import get_settings
from .db.suggestion_cache import SuggestionCacheRepository
from .models.analysis import ProgressStatus
from .models.cycles import list_cycles
from .models.goals import ExperienceLevel, WorkoutGoal
from .models.requests import SuggestionsRequest
from .models.sessions import ExerciseType, WorkoutSession
from .recommendations.cycles import CycleRecommender
from .recommendations.suggestions import SuggestionService
from .utils.logging_config import configure_logging

console = Console()

_SESSIONS = TypeAdapter(List[WorkoutSession])


def get_status_color(status: ProgressStatus) -> str:
    """Get rich color for a progress status."""
    colors = {
        ProgressStatus.IMPROVING: "green",
        ProgressStatus.PLATEAU: "yellow",
        ProgressStatus.DECLINING: "red",
        ProgressStatus.INSUFFICIENT_DATA: "blue",
    }
    return colors.get(status, "white")


def format_trend(value: float) -> Text:
    color = "green" if value > 0 else "red" if value < 0 else "white"
    return Text(f"{value:+.1f}%", style=color)


def _read_json(path: str) -> Any:
    try:
        with open(Path(path), encoding="utf-8") as f:
            return json.load(f)
    except FileNotFoundError:
        console.print(f"[red]File not found:[/red] {path}")
        sys.exit(1)
    except json.JSONDecodeError as e:
        console.print(f"[red]Invalid JSON in {path}:[/red] {e}")
        sys.exit(1)


def load_sessions(path: str) -> List[WorkoutSession]:
    """Load sessions from a JSON list or an object with a ``sessions`` key."""
    data = _read_json(path)
    if isinstance(data, dict):
        data = data.get("sessions", [])
    try:
        return _SESSIONS.validate_python(data)
    except ValidationError as e:
        console.print(f"[red]Invalid session history:[/red] {e.error_count()} errors")
        console.print(str(e))
        sys.exit(1)


# ============================================================================
# Commands
# ============================================================================

def cmd_analyze(args):
    """Show the ten-week analysis of one exercise."""
    sessions = load_sessions(args.file)
    analyzer = PerformanceAnalyzer()
    analysis = analyzer.analyze(args.exercise, sessions, target_reps=args.target_reps)

    status_color = get_status_color(analysis.progress_status)
    console.print()
    console.print(Panel(
        f"[bold]{analysis.exercise_name}[/bold]  "
        f"[{status_color}]{analysis.progress_status.value.upper()}[/{status_color}]"
    ))

    if not analysis.weekly_performance:
        console.print("No completed sets for this exercise in the last 10 weeks.")
        console.print()
        return

    table = Table(title="Weekly Performance", box=box.ROUNDED)
    table.add_column("Weeks Ago", justify="right", style="cyan")
    table.add_column("Sessions", justify="right")
    table.add_column("Avg Weight", justify="right")
    table.add_column("Avg Reps", justify="right")
    table.add_column("Max Weight", justify="right")
    table.add_column("Sets", justify="right")
    table.add_column("Est. 1RM", justify="right", style="bold")

    for week in analysis.weekly_performance:
        table.add_row(
            str(week.weeks_ago),
            str(week.sessions),
            f"{week.avg_weight:g}",
            f"{week.avg_reps:g}",
            f"{week.max_weight:g}",
            str(week.total_sets),
            f"{week.estimated_1rm:g}",
        )
    console.print(table)

    trends = Table(box=box.SIMPLE, show_header=False)
    trends.add_column("Trend")
    trends.add_column("Change", justify="right")
    trends.add_row("Weight", format_trend(analysis.weight_trend))
    trends.add_row("Reps", format_trend(analysis.reps_trend))
    trends.add_row("Est. 1RM", format_trend(analysis.estimated_1rm_trend))
    console.print(trends)

    signals = analysis.plateau_signals
    if signals.count():
        console.print(f"Plateau signals ({signals.count()}/3): {', '.join(signals.describe())}")
    elif not has_enough_history_for_plateau_detection(sessions):
        console.print("[dim]Not enough history yet for plateau detection.[/dim]")
    console.print()


def cmd_suggest(args):
    """Print pre-workout suggestions for a template."""
    try:
        request = SuggestionsRequest.model_validate(_read_json(args.file))
    except ValidationError as e:
        console.print(f"[red]Invalid suggestion request:[/red] {e}")
        sys.exit(1)

    settings = get_settings()
    cache = None
    if not args.no_cache:
        cache = SuggestionCacheRepository(
            settings.suggestion_cache_path,
            ttl_seconds=settings.suggestion_cache_ttl_seconds,
        )
    service = SuggestionService(cache_repository=cache)

    with console.status("Generating suggestions..."):
        suggestions = asyncio.run(service.get_pre_workout_suggestions(
            request.template, request.sessions, request.profile,
        ))

    unit = request.profile.weight_unit.value
    table = Table(title=request.template.name, box=box.ROUNDED)
    table.add_column("Exercise", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("Status")
    table.add_column("Source", style="dim")
    table.add_column("Reasoning")

    for suggestion in suggestions:
        color = get_status_color(suggestion.progress_status)
        table.add_row(
            suggestion.exercise_id,
            f"{suggestion.suggested_weight:g} {unit}",
            str(suggestion.suggested_reps),
            Text(suggestion.progress_status.value, style=color),
            suggestion.source.value,
            suggestion.reasoning,
        )
    console.print()
    console.print(table)

    for suggestion in suggestions:
        if suggestion.technique_tip:
            console.print(f"[yellow]{suggestion.exercise_id}:[/yellow] {suggestion.technique_tip}")
        if suggestion.rep_range_change:
            change = suggestion.rep_range_change
            console.print(
                f"[yellow]{suggestion.exercise_id}:[/yellow] switch reps "
                f"{change.from_range} -> {change.to_range}. {change.reason}"
            )
    console.print()


def cmd_cycles(args):
    """List predefined training cycles."""
    cycle_type = ExerciseType(args.type) if args.type else None
    for cycle in list_cycles(cycle_type):
        table = Table(
            title=f"{cycle.name} ({cycle.total_weeks} weeks)  [dim]{cycle.id}[/dim]",
            box=box.ROUNDED,
        )
        table.add_column("Phase", style="cyan")
        table.add_column("Weeks", justify="right")
        table.add_column("Intensity")
        table.add_column("Reps", justify="right")
        for phase in cycle.phases:
            table.add_row(
                phase.name,
                str(phase.duration_weeks),
                phase.intensity_description,
                phase.rep_range or "-",
            )
        console.print(table)
        console.print(f"[italic]{cycle.description}[/italic]")
        console.print()


def cmd_recommend_cycle(args):
    """Recommend a training cycle from history."""
    sessions = load_sessions(args.file)
    recommender = CycleRecommender()

    with console.status("Choosing a cycle..."):
        recommendation = asyncio.run(recommender.recommend(
            sessions,
            ExperienceLevel(args.experience),
            WorkoutGoal(args.goal),
            current_cycle_id=args.current,
        ))

    body = f"[bold]{recommendation.recommended_cycle_id}[/bold]\n{recommendation.reasoning}"
    if recommendation.alternative_id:
        body += (
            f"\n\nAlternative: [bold]{recommendation.alternative_id}[/bold]"
            f"\n{recommendation.alternative_reason or ''}"
        )
    console.print()
    console.print(Panel(
        body,
        title=f"Recommended cycle ({recommendation.confidence.value} confidence)",
        subtitle=recommendation.source.value,
    ))
    console.print()


def cmd_serve(args):
    """Run the HTTP API."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "strength_coach.main:app",
        host=args.host or settings.api_host,
        port=args.port or settings.api_port,
        reload=args.reload,
    )


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Strength Coach - progress analysis and workout suggestions",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  strength-coach analyze history.json --exercise squat --target-reps 5
  strength-coach suggest request.json --no-cache
  strength-coach cycles --type cardio
  strength-coach recommend-cycle history.json --experience advanced --goal build
  strength-coach serve --port 8080
        """,
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default from settings)")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Analyze command
    analyze_p = subparsers.add_parser("analyze", help="Analyze one exercise's history")
    analyze_p.add_argument("file", help="JSON file with workout sessions")
    analyze_p.add_argument("--exercise", "-e", required=True, help="Exercise catalog ID")
    analyze_p.add_argument("--target-reps", "-r", type=int, help="Rep target for plateau checks")

    # Suggest command
    suggest_p = subparsers.add_parser("suggest", help="Suggest weights for a template")
    suggest_p.add_argument("file", help="JSON file with template, sessions and profile")
    suggest_p.add_argument("--no-cache", action="store_true", help="Skip the suggestion cache")

    # Cycles command
    cycles_p = subparsers.add_parser("cycles", help="List training cycles")
    cycles_p.add_argument("--type", choices=[t.value for t in ExerciseType], help="Cycle type")

    # Recommend-cycle command
    rec_p = subparsers.add_parser("recommend-cycle", help="Recommend a training cycle")
    rec_p.add_argument("file", help="JSON file with workout sessions")
    rec_p.add_argument(
        "--experience",
        choices=[e.value for e in ExperienceLevel],
        default=ExperienceLevel.INTERMEDIATE.value,
    )
    rec_p.add_argument(
        "--goal",
        choices=[g.value for g in WorkoutGoal],
        default=WorkoutGoal.BUILD.value,
    )
    rec_p.add_argument("--current", help="ID of the cycle currently followed")

    # Serve command
    serve_p = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_p.add_argument("--host", help="Bind address")
    serve_p.add_argument("--port", type=int, help="Port")
    serve_p.add_argument("--reload", action="store_true", help="Reload on code changes")

    args = parser.parse_args()

    configure_logging(args.log_level)

    if args.command == "analyze":
        cmd_analyze(args)
    elif args.command == "suggest":
        cmd_suggest(args)
    elif args.command == "cycles":
        cmd_cycles(args)
    elif args.command == "recommend-cycle":
        cmd_recommend_cycle(args)
    elif args.command == "serve":
        cmd_serve(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
