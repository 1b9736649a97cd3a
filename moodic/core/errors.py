"""Application-level exception types.

Domain errors used across services/adapters, enabling consistent error
handling, logging, and API responses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, NotRequired, TypedDict


class ErrorDetails(TypedDict, total=False):
    """Structured error context for observability and clients."""

    code: str
    message: str
    hint: str
    http_status: int
    retry_after: int
    model: str
    request_id: str
    context: NotRequired[dict[str, Any]]


@dataclass
class AppError(Exception):
    """Base error for application/domain failures.

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
    """Raised when request input fails domain validation."""


class LLMAppError(AppError):
    """Raised when LLM provider/client operations fail."""


class ConfigurationAppError(AppError):
    """Raised when a required setting (credentials, URLs) is missing."""


class AuthenticationAppError(AppError):
    """Raised when the caller's Spotify credentials are missing or rejected."""


class SpotifyAppError(AppError):
    """Raised when the Spotify Web API or token endpoint fails."""


@dataclass
class RateLimitExceededError(AppError):
    """Raised by rate-limited routes when the caller is over quota.

    Attributes:
        limit: Policy maximum for the window.
        reset_at: Epoch milliseconds when the window resets.
        headers: Rate-limit headers to attach to the 429 response.
    """

    limit: int = 0
    reset_at: int = 0
    headers: dict[str, str] = field(default_factory=dict)
