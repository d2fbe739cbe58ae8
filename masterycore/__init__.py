"""masterycore - Topic proficiency tracking, weak-area detection and practice recommendations."""

__version__ = "0.1.0"
