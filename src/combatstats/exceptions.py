# src/combatstats/exceptions.py

"""Custom exception hierarchy for the Combat Stats API.

This module provides a structured exception hierarchy that enables:
1. HTTP status code mapping in the global exception handlers
2. Error context for logging and debugging
3. A clear split between caller mistakes and data source faults
"""

from __future__ import annotations


class CombatStatsError(Exception):
    """Base exception for all Combat Stats errors.

    Attributes:
        message: Human-readable error description
        details: Optional dict with additional context for logging/debugging
    """

    def __init__(self, message: str, details: dict | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


# =============================================================================
# Validation Errors (HTTP 400)
# =============================================================================


class ValidationError(CombatStatsError):
    """Base class for request validation errors."""

    pass


class MissingRequiredFilterError(ValidationError):
    """Raised when a resource requires a filter that was not supplied."""

    def __init__(self, filter_name: str, resource: str) -> None:
        super().__init__(
            message=f"The '{filter_name}' parameter is required.",
            details={"filter": filter_name, "resource": resource},
        )


# =============================================================================
# Data Source Errors (HTTP 500)
# =============================================================================


class DatabaseError(CombatStatsError):
    """Raised when a statement fails against the relational store."""

    pass


class QueryTimeoutError(DatabaseError):
    """Raised when a statement does not finish within the configured timeout."""

    def __init__(self, template: str, timeout: float) -> None:
        super().__init__(
            message=f"Database error: query '{template}' timed out "
            f"after {timeout:g}s",
            details={"template": template, "timeout": timeout},
        )
