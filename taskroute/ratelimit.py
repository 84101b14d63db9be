"""In-memory fixed-window rate limiter.

Counts requests per ``identifier:resource`` key inside named limiters
(one per provider, e.g. ``ai_openai``). A window opens on the first
checked request and lasts ``window_ms``; once it expires the full budget
is available again.

The router only needs ``get_remaining_requests``; it is async so a
networked limiter can be substituted without changing callers.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Protocol

from taskroute.schemas.settings import RateLimitConfig

logger = logging.getLogger(__name__)


class RequestBudgetSource(Protocol):
    """Anything that can report the remaining request budget."""

    async def get_remaining_requests(
        self,
        limiter_id: str,
        identifier: str,
        resource: str,
        config: RateLimitConfig,
    ) -> int: ...


@dataclass
class _Window:
    count: int
    reset_at: float  # milliseconds on the limiter clock


@dataclass(frozen=True)
class LimitCheck:
    allowed: bool
    remaining: int
    reset_at: float


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class RateLimiter:
    """Fixed-window request counters grouped by limiter id."""

    def __init__(self, clock: Callable[[], float] = _monotonic_ms) -> None:
        self._clock = clock
        self._limiters: dict[str, dict[str, _Window]] = {}

    @staticmethod
    def _key(identifier: str, resource: str) -> str:
        return f"{identifier}:{resource}"

    def _limiter(self, limiter_id: str) -> dict[str, _Window]:
        return self._limiters.setdefault(limiter_id, {})

    async def check_limit(
        self,
        limiter_id: str,
        identifier: str,
        resource: str,
        config: RateLimitConfig,
    ) -> LimitCheck:
        """Consume one request if the budget allows it.

        ``remaining`` is the budget before this request was counted.
        """
        limiter = self._limiter(limiter_id)
        key = self._key(identifier, resource)
        now = self._clock()

        window = limiter.get(key)
        if window is None or now > window.reset_at:
            window = _Window(count=0, reset_at=now + config.window_ms)
            limiter[key] = window

        allowed = window.count < config.max_requests
        remaining = max(0, config.max_requests - window.count)
        if allowed:
            window.count += 1
        else:
            logger.debug("Rate limit reached for %s %s", limiter_id, key)

        return LimitCheck(allowed=allowed, remaining=remaining, reset_at=window.reset_at)

    async def increment(
        self,
        limiter_id: str,
        identifier: str,
        resource: str,
        success: bool,
        config: RateLimitConfig,
    ) -> None:
        """Count an extra request against an open window."""
        if success and config.skip_successful_requests:
            return
        if not success and config.skip_failed_requests:
            return

        window = self._limiter(limiter_id).get(self._key(identifier, resource))
        if window is not None:
            window.count += 1

    async def get_remaining_requests(
        self,
        limiter_id: str,
        identifier: str,
        resource: str,
        config: RateLimitConfig,
    ) -> int:
        window = self._limiter(limiter_id).get(self._key(identifier, resource))
        if window is None or self._clock() > window.reset_at:
            return config.max_requests
        return max(0, config.max_requests - window.count)

    async def get_reset_time(
        self, limiter_id: str, identifier: str, resource: str,
    ) -> float | None:
        window = self._limiter(limiter_id).get(self._key(identifier, resource))
        return window.reset_at if window is not None else None

    def clear_identifier(self, limiter_id: str, identifier: str) -> None:
        """Drop every window belonging to *identifier* in one limiter."""
        limiter = self._limiter(limiter_id)
        prefix = f"{identifier}:"
        for key in [k for k in limiter if k.startswith(prefix)]:
            del limiter[key]

    def cleanup(self) -> None:
        """Remove expired windows and limiters left empty."""
        now = self._clock()
        for limiter_id in list(self._limiters):
            limiter = self._limiters[limiter_id]
            for key in [k for k, w in limiter.items() if now > w.reset_at]:
                del limiter[key]
            if not limiter:
                del self._limiters[limiter_id]

    def get_stats(self) -> dict[str, dict[str, int]]:
        """Return entry count and total counted requests per limiter."""
        return {
            limiter_id: {
                "entries": len(limiter),
                "total_requests": sum(w.count for w in limiter.values()),
            }
            for limiter_id, limiter in self._limiters.items()
        }
