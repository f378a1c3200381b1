"""Error taxonomy for hostel API calls.

Errors are tagged where the failure happens (the HTTP client) so callers can
branch on the type instead of inspecting messages.
"""

from __future__ import annotations


class ApiError(Exception):
    """Base class for failures reported by the hostel API or its transport."""

    def __init__(self, message: str, status: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class AuthError(ApiError):
    """Missing or expired credentials. Never retried; ends the session."""


class TransientError(ApiError):
    """Timeouts and connectivity loss. Eligible for retry."""


class ValidationError(ApiError):
    """4xx business/validation failure with a user-facing message."""


class StaleResultError(Exception):
    """A newer request of the same kind superseded this one."""

    def __init__(self, kind: str) -> None:
        super().__init__(f"Result for {kind!r} superseded by a newer request")
        self.kind = kind


__all__ = [
    "ApiError",
    "AuthError",
    "TransientError",
    "ValidationError",
    "StaleResultError",
]
