"""
Rate Limiting for the HTTP API

Per-client sliding-window limiter, kept in process memory.
"""

import asyncio
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from loguru import logger


@dataclass
class RateLimitResult:
    """
    Result of a rate limit check.

    Attributes:
        allowed: Whether the request may proceed
        remaining: Requests left in the current window
        reset_at: When the oldest counted request leaves the window
        retry_after: Seconds to wait before retrying (if blocked)
        reason: Why the request was blocked (if applicable)
    """
    allowed: bool
    remaining: int
    reset_at: datetime
    retry_after: Optional[int] = None
    reason: Optional[str] = None


class RateLimiter(ABC):
    """Abstract rate limiter interface."""

    @abstractmethod
    async def check_rate_limit(self, client_id: str) -> RateLimitResult:
        """Count one request for `client_id` unless its window is full."""

    @abstractmethod
    async def reset(self, client_id: Optional[str] = None) -> None:
        """Forget counted requests for one client, or for all clients."""


class InMemoryRateLimiter(RateLimiter):
    """
    Sliding window: a client may make `max_requests` requests in any
    `window_seconds` span. Rejected requests are not counted.

    Suitable for single-instance deployments; counts do not survive a restart.
    """

    def __init__(self, max_requests: int = 100, window_seconds: float = 15 * 60):
        self.max_requests = max_requests
        self.window_seconds = window_seconds

        self._requests: Dict[str, List[datetime]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def check_rate_limit(self, client_id: str) -> RateLimitResult:
        async with self._lock:
            now = datetime.now(timezone.utc)
            window_start = now - timedelta(seconds=self.window_seconds)

            recent = [ts for ts in self._requests[client_id] if ts > window_start]
            self._requests[client_id] = recent

            if len(recent) >= self.max_requests:
                reset_at = recent[0] + timedelta(seconds=self.window_seconds)
                retry_after = max(int((reset_at - now).total_seconds()), 1)

                logger.warning(
                    f"Rate limit exceeded for {client_id}",
                    extra={"client": client_id, "requests": len(recent), "limit": self.max_requests},
                )
                return RateLimitResult(
                    allowed=False,
                    remaining=0,
                    reset_at=reset_at,
                    retry_after=retry_after,
                    reason=f"Rate limit exceeded: {len(recent)}/{self.max_requests} requests",
                )

            recent.append(now)
            return RateLimitResult(
                allowed=True,
                remaining=self.max_requests - len(recent),
                reset_at=recent[0] + timedelta(seconds=self.window_seconds),
            )

    async def reset(self, client_id: Optional[str] = None) -> None:
        async with self._lock:
            if client_id is None:
                self._requests.clear()
            else:
                self._requests.pop(client_id, None)
