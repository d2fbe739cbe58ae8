"""Shared exceptions for the mastery core.

This module defines a consistent exception hierarchy used across all modules
to standardize error handling and provide clear error semantics.
"""

from typing import Any


class MasteryCoreException(Exception):
    """Base exception for all application errors.

    All domain-specific exceptions should inherit from this class
    to enable consistent error handling at the boundary.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary for CLI/JSON output."""
        return {
            "error": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# ===================
# Validation Errors
# ===================

class ValidationError(MasteryCoreException):
    """Raised when input validation fails."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(
            f"Validation error for '{field}': {message}",
            {"field": field}
        )


class InvalidAttemptError(ValidationError):
    """Raised when a question attempt carries values the formulas cannot use."""

    def __init__(self, field: str, value: Any, reason: str) -> None:
        super().__init__(field, f"{reason}, got {value!r}")
        self.details["value"] = repr(value)


class InvalidDifficultyError(ValidationError):
    """Raised when a difficulty tier is not one of easy/med/hard."""

    def __init__(self, difficulty: Any) -> None:
        super().__init__(
            "difficulty",
            f"Difficulty must be one of 'easy', 'med', 'hard', got {difficulty!r}"
        )


# ===================
# Configuration Errors
# ===================

class ConfigurationError(MasteryCoreException):
    """Raised when there's a configuration problem."""
    pass


class InvalidConfigurationError(ConfigurationError):
    """Raised when a configuration override fails validation."""

    def __init__(self, errors: list[dict[str, Any]]) -> None:
        fields = sorted({".".join(str(p) for p in e.get("loc", ())) for e in errors})
        super().__init__(
            f"Invalid mastery configuration: {', '.join(fields) or 'unknown field'}",
            {"errors": errors}
        )


# ===================
# Storage Errors
# ===================

class StorageError(MasteryCoreException):
    """Raised when a key-value store operation fails."""

    def __init__(self, backend: str, message: str) -> None:
        super().__init__(
            f"Storage error ({backend}): {message}",
            {"backend": backend}
        )


class ConfigPersistenceError(StorageError):
    """Raised when the merged configuration cannot be persisted.

    The in-memory configuration has already been updated when this is raised.
    """

    def __init__(self, key: str, message: str) -> None:
        super().__init__("config", f"failed to persist '{key}': {message}")
        self.details["key"] = key
