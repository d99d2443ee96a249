"""Application-level exception types.

Errors raised by this package are limited to configuration and wiring
problems. Rate limit bookkeeping never raises into the caller's request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability."""

    code: str
    message: str
    hint: str
    backend: str
    setting: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for package failures.

    Attributes:
        code: Stable, machine-readable error code.
        message: Human-readable error message.
        details: Optional structured details for debugging/observability.
    """

    code: str
    message: str
    details: ErrorDetails | None = None

    def __post_init__(self) -> None:
        # Populate Exception args so str(error) is useful in logs/tracebacks.
        super().__init__(self.message)


class ValidationAppError(AppError):
    """Raised when configuration validation fails."""
