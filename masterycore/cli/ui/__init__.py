"""CLI UI Components - Rich tables and panels for mastery data."""

from masterycore.cli.ui.display import (
    display_config,
    display_progress_bar,
    display_recommendations,
    display_stats,
    display_trend,
    display_updates,
    display_weak_areas,
)

__all__ = [
    "display_config",
    "display_progress_bar",
    "display_recommendations",
    "display_stats",
    "display_trend",
    "display_updates",
    "display_weak_areas",
]
