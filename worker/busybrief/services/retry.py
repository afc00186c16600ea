"""Backoff policy for the brief pipeline.

Delays grow linearly with the attempt number rather than exponentially: with
a small attempt budget this bounds the worst-case latency of one request.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..errors import AppError, forbidden, invalid_api_key, upstream_bad_request
from .upstream import FailureCause

TERMINAL_CAUSES = frozenset(
    {
        FailureCause.CLIENT,
        FailureCause.UNAUTHORIZED,
        FailureCause.FORBIDDEN,
        FailureCause.BAD_REQUEST,
    }
)

RATE_LIMIT_STEP_S = 1.0
SERVER_ERROR_STEP_S = 1.5
TRANSIENT_STEP_S = 0.75


@dataclass(frozen=True)
class FailureRecord:
    attempt: int
    cause: FailureCause
    message: str


def is_terminal(cause: FailureCause) -> bool:
    return cause in TERMINAL_CAUSES


def backoff_seconds(cause: FailureCause, attempt: int) -> Optional[float]:
    """Seconds to wait after failed `attempt` (1-based); None means do not retry."""
    if is_terminal(cause):
        return None
    if cause is FailureCause.RATE_LIMITED:
        return RATE_LIMIT_STEP_S * attempt
    if cause is FailureCause.SERVER_ERROR:
        return SERVER_ERROR_STEP_S * attempt
    return TRANSIENT_STEP_S * attempt


def terminal_error(cause: FailureCause, exc: BaseException) -> AppError:
    """Map a terminal failure onto the error surfaced to the caller."""
    if isinstance(exc, AppError):
        return exc
    if cause is FailureCause.UNAUTHORIZED:
        return invalid_api_key()
    if cause is FailureCause.FORBIDDEN:
        return forbidden()
    if cause is FailureCause.BAD_REQUEST:
        return upstream_bad_request()
    raise ValueError(f"{cause.value} is not a terminal cause")
