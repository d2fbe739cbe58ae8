"""CLI Entry Point - Main command interface.

This module provides the main entry point for the masterycore CLI. Records,
attempts and sessions are read from JSON files; results are rendered with
rich or printed as JSON with --json.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Optional, TypeVar

import typer
from pydantic import ValidationError as PydanticValidationError
from rich.console import Console
from rich.panel import Panel

from masterycore.cli.commands.config import config_app
from masterycore.cli.ui.display import (
    display_recommendations,
    display_stats,
    display_trend,
    display_updates,
    display_weak_areas,
)
from masterycore.modules.mastery import (
    MasteryStatsResponse,
    PracticeRecommendationResponse,
    ProficiencyUpdateResponse,
    QuestionAttemptRecord,
    WeakAreaResponse,
    get_mastery_engine,
)
from masterycore.modules.mastery.interface import LearningSession, TopicProficiency
from masterycore.modules.mastery.schemas import dump_records, parse_records, parse_sessions
from masterycore.shared.exceptions import MasteryCoreException
from masterycore.shared.logging_config import setup_logging

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Main application
app = typer.Typer(
    name="masterycore",
    help="masterycore - Topic proficiency tracking and practice recommendations",
    no_args_is_help=True,
    pretty_exceptions_enable=False,
)
console = Console()

app.add_typer(config_app, name="config", help="Engine configuration")


# =============================================================================
# Input helpers
# =============================================================================

def _read_json(path: Path) -> Any:
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        console.print(f"[red]Error:[/red] File not found: {path}")
        raise typer.Exit(1)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]Error:[/red] Could not read {path}: {e}")
        raise typer.Exit(1)


def _validated(path: Path, parse: Callable[[Any], T]) -> T:
    try:
        return parse(_read_json(path))
    except PydanticValidationError as e:
        console.print(f"[red]Error:[/red] Invalid data in {path}:")
        for err in e.errors(include_url=False):
            loc = ".".join(str(p) for p in err["loc"])
            console.print(f"  - {loc}: {err['msg']}")
        raise typer.Exit(1)
    except MasteryCoreException as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)


def _load_records(path: Path) -> list[TopicProficiency]:
    return _validated(path, parse_records)


def _load_sessions(path: Path | None) -> list[LearningSession]:
    if path is None:
        return []
    return _validated(path, parse_sessions)


def _parse_now(value: str | None) -> datetime | None:
    if value is None:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        raise typer.BadParameter(f"Not an ISO 8601 timestamp: {value}", param_hint="--now")


def _echo_json(data: Any) -> None:
    typer.echo(json.dumps(data, indent=2))


NOW_OPTION = typer.Option(None, "--now", help="Evaluate as of this ISO 8601 time (default: now)")
JSON_OPTION = typer.Option(False, "--json", help="Print machine-readable JSON")


# =============================================================================
# Commands
# =============================================================================

@app.command("weak-areas")
def weak_areas(
    records_file: Path = typer.Argument(..., help="JSON list of topic records"),
    now: Optional[str] = NOW_OPTION,
    as_json: bool = JSON_OPTION,
) -> None:
    """List topics that need remediation, most urgent first."""
    engine = get_mastery_engine()
    records = _load_records(records_file)

    result = engine.weak_areas(records, now=_parse_now(now))

    if as_json:
        _echo_json([WeakAreaResponse.model_validate(wa).model_dump(by_alias=True, mode="json") for wa in result])
        return
    display_weak_areas(result, engine.config.proficiency_threshold)


@app.command("recommend")
def recommend(
    records_file: Path = typer.Argument(..., help="JSON list of topic records"),
    sessions_file: Optional[Path] = typer.Option(None, "--sessions", "-s", help="JSON list of recent sessions"),
    now: Optional[str] = NOW_OPTION,
    as_json: bool = JSON_OPTION,
) -> None:
    """Suggest practice batches ordered by priority."""
    engine = get_mastery_engine()
    records = _load_records(records_file)
    sessions = _load_sessions(sessions_file)

    result = engine.recommendations(records, sessions, now=_parse_now(now))

    if as_json:
        _echo_json([
            PracticeRecommendationResponse.model_validate(rec).model_dump(by_alias=True, mode="json")
            for rec in result
        ])
        return
    display_recommendations(result)


@app.command("process")
def process(
    attempt_file: Path = typer.Argument(..., help="JSON object describing one answered question"),
    records_file: Path = typer.Argument(..., help="JSON list of topic records (may not exist yet with --write)"),
    write: bool = typer.Option(False, "--write", "-w", help="Write updated records back to RECORDS_FILE"),
    now: Optional[str] = NOW_OPTION,
    as_json: bool = JSON_OPTION,
) -> None:
    """Apply one answered question to the topic records."""
    engine = get_mastery_engine()

    attempt = _validated(attempt_file, lambda data: QuestionAttemptRecord.model_validate(data).to_domain())
    if write and not records_file.exists():
        records: list[TopicProficiency] = []
    else:
        records = _load_records(records_file)

    current = {r.topic_id: r for r in records}
    updates = engine.process_attempt(attempt, current, now=_parse_now(now))

    updated = dict(current)
    for update in updates:
        updated[update.topic_id] = update.apply_to(current.get(update.topic_id))

    if write:
        records_file.write_text(json.dumps(dump_records(list(updated.values())), indent=2), encoding="utf-8")
        logger.info(f"Wrote {len(updated)} records to {records_file}")

    if as_json:
        _echo_json([
            ProficiencyUpdateResponse.from_domain(u).model_dump(by_alias=True, mode="json")
            for u in updates
        ])
        return

    if not updates:
        console.print("[dim]Attempt has no topics; nothing to update.[/dim]")
        return

    display_updates(updates, {r.topic_id: r.proficiency for r in records})
    feedback = engine.attempt_feedback(updated, attempt.topic_ids, attempt.is_correct)
    color = "green" if attempt.is_correct else "yellow"
    console.print(f"\n[{color}]{feedback}[/{color}]")
    if write:
        console.print(f"[dim]Saved {len(updated)} records to {records_file}[/dim]")


@app.command("stats")
def stats(
    records_file: Path = typer.Argument(..., help="JSON list of topic records"),
    sessions_file: Optional[Path] = typer.Option(None, "--sessions", "-s", help="JSON list of learning sessions"),
    as_json: bool = JSON_OPTION,
) -> None:
    """Show the mastery dashboard summary."""
    engine = get_mastery_engine()
    records = _load_records(records_file)
    sessions = _load_sessions(sessions_file)

    summary = engine.overall_stats(records, sessions)
    level = engine.mastery_level(summary.average_proficiency)

    if as_json:
        response = MasteryStatsResponse.model_validate(summary).model_copy(update={"level": level})
        _echo_json(response.model_dump(by_alias=True, mode="json"))
        return
    display_stats(summary, level)


@app.command("trend")
def trend(
    history: list[float] = typer.Argument(..., help="Proficiency snapshots, oldest first"),
    window: int = typer.Option(10, "--window", "-n", min=1, help="Number of recent snapshots to use"),
    as_json: bool = JSON_OPTION,
) -> None:
    """Classify the direction of a proficiency history."""
    result = get_mastery_engine().trend(history, window)

    if as_json:
        _echo_json({"trend": result.value, "points": len(history), "window": window})
        return
    display_trend(history, result)


@app.command("version")
def version() -> None:
    """Show version information."""
    from masterycore import __version__

    console.print(Panel.fit(
        "[bold]masterycore[/bold]\n"
        f"Version: {__version__}\n"
        "Proficiency tracking and spaced-repetition recommendations",
        border_style="cyan",
    ))


@app.callback()
def callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
) -> None:
    """masterycore - Topic proficiency tracking and practice recommendations.

    Use 'masterycore --help' to see all available commands.

    Quick start:
      masterycore process attempt.json records.json --write
      masterycore weak-areas records.json
      masterycore recommend records.json
    """
    setup_logging("DEBUG" if verbose else None)


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
