"""CLI Commands - Command group modules."""

from masterycore.cli.commands.config import config_app

__all__ = [
    "config_app",
]
