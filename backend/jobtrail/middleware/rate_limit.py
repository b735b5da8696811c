"""
JobTrail Backend — Auth Attempt Rate Limiting
===============================================

What:  Per-IP sliding window limiter for register/login attempts.
Why:   A 4-digit PIN has only 10,000 values; unthrottled login would make
       guessing one trivial.
How:   Tracks attempt timestamps per client IP in memory. The limiter object
       lives on the ServiceContext and is applied to the auth routes through
       the limit_auth_attempts dependency (not as app-wide middleware).

Algorithm: Sliding Window Counter
    1. Each IP gets a list of attempt timestamps
    2. On each attempt, drop timestamps older than the window
    3. If the remaining count >= limit, reject with 429
    4. Otherwise record the attempt and let it through

    Time complexity: O(k) where k = attempts in window per IP
    Space complexity: O(n × k) where n = unique IPs

Production Upgrade Path:
    State is per process. Several workers each enforce their own limit; a
    shared store (Redis INCR with TTL) is needed for a global one.
"""

import logging
import time
from collections import defaultdict
from typing import Callable, Dict, List

from fastapi import Request

from jobtrail.exceptions import RateLimitExceededError

logger = logging.getLogger(__name__)


def client_ip(request: Request) -> str:
    # Behind a proxy this is the proxy's address unless uvicorn runs with
    # --proxy-headers.
    return getattr(request.client, "host", "unknown") if request.client else "unknown"


class AuthAttemptLimiter:
    """
    In-memory sliding window limiter.

    Args:
        max_attempts: Attempts allowed per IP within the window.
        window_seconds: Window length.
        clock: Monotonic time source; tests substitute a fake.
    """

    # Prune idle IPs every N recorded attempts.
    CLEANUP_EVERY = 1000

    def __init__(
        self,
        max_attempts: int,
        window_seconds: int,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_attempts = max_attempts
        self.window_seconds = window_seconds
        self._clock = clock
        self._attempts: Dict[str, List[float]] = defaultdict(list)
        self._recorded = 0

    def hit(self, key: str) -> None:
        """
        Records one attempt for ``key``.

        Raises:
            RateLimitExceededError: the key already used up its window.
        """
        now = self._clock()
        window_start = now - self.window_seconds

        # ── Sliding Window: drop old entries ──────────────────────────────
        attempts = [ts for ts in self._attempts[key] if ts > window_start]
        self._attempts[key] = attempts

        if len(attempts) >= self.max_attempts:
            retry_after = int(attempts[0] + self.window_seconds - now) + 1
            logger.warning(
                "Auth rate limit exceeded for %s: %d attempts in %ds window",
                key,
                len(attempts),
                self.window_seconds,
            )
            raise RateLimitExceededError(retry_after=retry_after)

        attempts.append(now)
        self._recorded += 1
        if self._recorded % self.CLEANUP_EVERY == 0:
            self._cleanup_inactive(window_start)

    def reset(self) -> None:
        self._attempts.clear()
        self._recorded = 0

    def _cleanup_inactive(self, window_start: float) -> None:
        inactive = [
            key for key, stamps in self._attempts.items()
            if not stamps or stamps[-1] <= window_start
        ]
        for key in inactive:
            del self._attempts[key]

        if inactive:
            logger.debug("Cleaned up %d inactive rate limit entries", len(inactive))


async def limit_auth_attempts(request: Request) -> None:
    """FastAPI dependency: counts one auth attempt for the caller's IP."""
    request.app.state.context.auth_limiter.hit(client_ip(request))
