"""CLI Module - Command-line interface for the mastery engine.

This module provides a CLI built with Typer and Rich.

Usage:
    masterycore --help                              Show all commands
    masterycore process attempt.json records.json   Apply one answered question
    masterycore weak-areas records.json             Rank topics needing practice
    masterycore recommend records.json              Suggest practice batches
    masterycore stats records.json                  Dashboard summary
    masterycore trend 0.4 0.5 0.6                   Classify a proficiency history
    masterycore config show                         Show engine configuration
"""

from masterycore.cli.main import app, main

__all__ = ["app", "main"]
