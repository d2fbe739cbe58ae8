"""Display Utilities - Rich output formatting."""

from typing import Sequence

from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from masterycore.modules.mastery.config import MasteryConfig
from masterycore.modules.mastery.interface import (
    MasteryStats,
    PracticeRecommendation,
    ProficiencyUpdate,
    WeakArea,
)
from masterycore.shared.models import MasteryLevel, Trend

console = Console()

LEVEL_COLORS = {
    MasteryLevel.NOVICE: "red",
    MasteryLevel.DEVELOPING: "yellow",
    MasteryLevel.PROFICIENT: "cyan",
    MasteryLevel.ADVANCED: "green",
    MasteryLevel.EXPERT: "bold green",
}

TREND_STYLES = {
    Trend.IMPROVING: "[green]improving[/green]",
    Trend.STABLE: "[dim]stable[/dim]",
    Trend.DECLINING: "[red]declining[/red]",
    Trend.UNKNOWN: "[dim]unknown[/dim]",
}


def proficiency_color(value: float, threshold: float = 0.7) -> str:
    if value >= threshold:
        return "green"
    return "yellow" if value >= 0.5 else "red"


def display_progress_bar(
    label: str,
    progress: float,
    width: int = 20,
    filled_char: str = "#",
    empty_char: str = "-",
) -> str:
    """Create a text-based progress bar."""
    filled = int(max(0.0, min(1.0, progress)) * width)
    empty = width - filled

    bar = filled_char * filled + empty_char * empty
    percentage = f"{progress:.0%}"

    return f"{label}: [{bar}] {percentage}"


def display_weak_areas(weak_areas: Sequence[WeakArea], threshold: float = 0.7) -> None:
    """Display detected weak areas, most urgent first."""
    console.print(Panel.fit(
        "[bold yellow]Weak Areas[/bold yellow]",
        border_style="yellow",
    ))

    if not weak_areas:
        console.print("[green]No weak areas detected. Keep it up![/green]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#", style="dim", width=3)
    table.add_column("Topic", min_width=15)
    table.add_column("Proficiency", justify="right")
    table.add_column("Priority", justify="right")
    table.add_column("Reason")
    table.add_column("Questions", justify="right")
    table.add_column("Focus")

    for i, wa in enumerate(weak_areas, 1):
        color = proficiency_color(wa.proficiency, threshold)
        table.add_row(
            str(i),
            wa.topic_id,
            f"[{color}]{wa.proficiency:.0%}[/{color}]",
            f"{wa.priority:.1f}",
            wa.reason_code.value.replace("_", " "),
            f"{wa.recommended_questions} (~{wa.estimated_study_time} min)",
            wa.difficulty_focus.value,
        )

    console.print(table)


def display_recommendations(recommendations: Sequence[PracticeRecommendation]) -> None:
    """Display practice recommendations as cards."""
    if not recommendations:
        console.print("[dim]No recommendations right now. Answer a few more questions first.[/dim]")
        return

    for rec in recommendations:
        console.print(Panel(
            f"{rec.description}\n"
            f"[dim]{rec.reasoning}[/dim]\n\n"
            f"Topics: {', '.join(rec.topic_ids)}\n"
            f"Questions: {rec.question_count} | Duration: ~{rec.estimated_duration} min | "
            f"Difficulty: {rec.difficulty.value}\n"
            f"Expected gain: +{rec.expected_impact.proficiency_gain:.0%}",
            title=f"[bold blue]{rec.title}[/bold blue] [dim](priority {rec.priority})[/dim]",
            border_style="blue",
        ))


def display_updates(updates: Sequence[ProficiencyUpdate], previous: dict[str, float]) -> None:
    """Display per-topic changes after an attempt."""
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Topic", min_width=15)
    table.add_column("Proficiency", justify="right")
    table.add_column("Confidence", justify="right")
    table.add_column("Streak")
    table.add_column("Next Review")

    for update in updates:
        before = previous.get(update.topic_id)
        change = f"{before:.0%} -> " if before is not None else ""
        streak = (
            f"[green]{update.consecutive_correct} correct[/green]"
            if update.consecutive_correct
            else f"[red]{update.consecutive_incorrect} incorrect[/red]"
        )
        review = update.next_review_date.strftime("%Y-%m-%d %H:%M")
        if update.needs_review:
            review += " [yellow](review)[/yellow]"
        table.add_row(
            update.topic_id,
            f"{change}{update.proficiency:.0%}",
            f"{update.confidence:.0%}",
            streak,
            review,
        )

    console.print(table)


def display_stats(stats: MasteryStats, level: MasteryLevel) -> None:
    """Display the mastery dashboard summary."""
    console.print(Panel.fit(
        "[bold cyan]Mastery Overview[/bold cyan]",
        border_style="cyan",
    ))

    table = Table(show_header=False, box=None)
    table.add_column("Stat", style="bold")
    table.add_column("Value")

    color = LEVEL_COLORS.get(level, "white")
    table.add_row("Topics", str(stats.total_topics))
    table.add_row("Mastered", f"[green]{stats.mastered_topics}[/green]")
    table.add_row("Weak areas", f"[yellow]{stats.weak_areas}[/yellow]")
    table.add_row("Average", display_progress_bar("Proficiency", stats.average_proficiency))
    table.add_row("Level", f"[{color}]{level.value.title()}[/{color}]")
    table.add_row("Practice time", f"{stats.total_practice_time:g} min")
    table.add_row("Streak", f"{stats.streak} day{'s' if stats.streak != 1 else ''}")

    console.print(table)


def display_trend(history: Sequence[float], trend: Trend) -> None:
    console.print(f"Trend over {len(history)} snapshots: {TREND_STYLES.get(trend, trend.value)}")


def display_config(config: MasteryConfig, key: str, backend: str) -> None:
    """Display the active engine configuration."""
    console.print(Panel.fit(
        "[bold]Mastery Configuration[/bold]",
        border_style="cyan",
    ))

    console.print(f"\n[dim]Store: {backend} (key '{key}')[/dim]")

    console.print("\n[bold]Learning:[/bold]")
    console.print(f"  EWMA alpha: {config.ewma_alpha}")
    console.print(f"  Proficiency threshold: {config.proficiency_threshold}")
    console.print(f"  Confidence threshold: {config.confidence_threshold:g} attempts")

    console.print("\n[bold]Spaced Repetition:[/bold]")
    console.print(f"  Base interval: {config.spaced_repetition_base:g} days")
    console.print(f"  Max interval: {config.max_spaced_interval:g} days")

    weights = config.difficulty_weights
    console.print("\n[bold]Difficulty Weights:[/bold]")
    console.print(f"  easy {weights.easy} | med {weights.med} | hard {weights.hard}")

    timing = config.time_weights
    console.print("\n[bold]Time Weights:[/bold]")
    console.print(f"  Optimal time: {timing.optimal_time:g}s")
    console.print(f"  Fast bonus: x{timing.fast_bonus} | Slow penalty: x{timing.slow_penalty}")
