"""Retry policy for rate-limited captures.

The capture endpoint enforces a rolling per-minute quota. A 429 is retried
once per `delay` until `max_attempts` requests have been made, which with the
defaults (60 attempts, 1 second) lets a report land in the next quota window.
Every other failure propagates on the first attempt.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from .transport import HttpStatusFailure, RetriesExhausted

logger = logging.getLogger(__name__)

_T = TypeVar("_T")

DEFAULT_MAX_ATTEMPTS = 60
DEFAULT_DELAY = 1.0


class RateLimitRetryPolicy:
    """Fixed-delay retry on HTTP 429.

    - max_attempts: total attempts, including the first one
    - delay: seconds slept between attempts (`asyncio.sleep`, so other tasks keep running)
    - run(operation):
        - success: return the result
        - 429 and attempts left: sleep, try again
        - 429 on the last attempt: raise `RetriesExhausted`
        - anything else: re-raise immediately
    """

    def __init__(self, *, max_attempts: int = DEFAULT_MAX_ATTEMPTS, delay: float = DEFAULT_DELAY):
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1. Got: {max_attempts}")
        if delay < 0:
            raise ValueError(f"delay must be >= 0. Got: {delay}")

        self.max_attempts = max_attempts
        self.delay = delay

    async def run(self, operation: Callable[[], Awaitable[_T]]) -> _T:
        """Run `operation` until it succeeds, fails terminally, or attempts run out."""
        attempt = 0
        while True:
            attempt += 1
            try:
                return await operation()
            except HttpStatusFailure as exc:
                if not exc.rate_limited:
                    raise
                if attempt >= self.max_attempts:
                    raise RetriesExhausted(attempts=attempt, last_error=exc) from exc

                logger.debug(
                    "Rate limited by capture endpoint; retrying in %.3fs (attempt %d of %d)",
                    self.delay,
                    attempt,
                    self.max_attempts,
                )
                await asyncio.sleep(self.delay)
