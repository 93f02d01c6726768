"""Base exception types shared across the payroll scheduler.

Concrete errors live next to the code that raises them; the API layer maps
each family below to an HTTP status.
"""

from __future__ import annotations

from typing import Any


class PayrollError(Exception):
    """Base class for all payroll scheduler errors."""

    code = "PAYROLL_ERROR"

    def __init__(self, message: str, context: dict[str, Any] | None = None):
        self.message = message
        self.context = context or {}
        super().__init__(message)


class ValidationFailedError(PayrollError):
    """Input is malformed or logically inconsistent.

    ``issues`` is a list of ``{"field": ..., "message": ...}`` dicts so callers
    can report problems per field.
    """

    code = "VALIDATION_FAILED"

    def __init__(self, message: str, issues: list[dict[str, str]] | None = None):
        self.issues = issues or []
        super().__init__(message, {"issues": self.issues})

    @classmethod
    def for_field(cls, field: str, message: str) -> ValidationFailedError:
        return cls(message, [{"field": field, "message": message}])


class NotFoundError(PayrollError):
    """A referenced record does not exist."""

    code = "NOT_FOUND"


class AuthorizationError(PayrollError):
    """Missing or incorrect shared secret."""

    code = "UNAUTHORIZED"


class ConfigurationError(PayrollError):
    """Required configuration is missing or invalid."""

    code = "CONFIGURATION_ERROR"
