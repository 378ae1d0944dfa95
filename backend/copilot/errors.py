"""Typed failures of a completion call."""
from __future__ import annotations

from enum import Enum
from typing import Optional

from errors import AppError

# statuses worth another attempt; everything else fails on the first response
RETRYABLE_STATUSES = (429, 500, 503)


class CompletionKind(str, Enum):
    UNAUTHORIZED = "unauthorized"
    RATE_LIMITED = "rate_limited"
    SERVICE_UNAVAILABLE = "service_unavailable"
    UNKNOWN = "unknown"


class CompletionError(AppError):
    status_code = 500
    error = "completion_error"
    kind = CompletionKind.UNKNOWN
    retryable = False

    def __init__(
        self,
        message: str,
        *,
        upstream_status: Optional[int] = None,
        retryable: Optional[bool] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message, hint=hint)
        self.upstream_status = upstream_status
        if retryable is not None:
            self.retryable = retryable


class AuthError(CompletionError):
    status_code = 401
    error = "unauthorized"
    kind = CompletionKind.UNAUTHORIZED


class RateLimitError(CompletionError):
    status_code = 429
    error = "rate_limited"
    kind = CompletionKind.RATE_LIMITED
    retryable = True


class ServiceError(CompletionError):
    status_code = 500
    error = "service_unavailable"
    kind = CompletionKind.SERVICE_UNAVAILABLE
    retryable = True


def error_for_status(status: int, detail: str = "", *, key_hint: Optional[str] = None) -> CompletionError:
    """Map an upstream HTTP status to the matching CompletionError."""
    if status == 401:
        return AuthError(
            "Invalid or expired AI provider API key.",
            upstream_status=status,
            hint=key_hint,
        )
    if status == 429:
        return RateLimitError(
            "AI rate limit reached. Please try again in a few minutes.",
            upstream_status=status,
        )
    if status >= 500:
        return ServiceError(
            f"AI service error ({status}){': ' + detail if detail else ''}",
            upstream_status=status,
            retryable=status in RETRYABLE_STATUSES,
        )
    return CompletionError(
        f"AI request rejected ({status}){': ' + detail if detail else ''}",
        upstream_status=status,
    )
