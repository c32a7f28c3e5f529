from dataclasses import dataclass

from listing_lens.config.settings import Settings
from listing_lens.logging.logger import Log
from listing_lens.store.base import BaseEphemeralStore


@dataclass(frozen=True)
class RateLimitResult:
    allowed: bool
    count: int
    remaining: int


class RateLimiter:
    """Fixed-window request counter per identity (usually a client IP).

    The increment that opens a window (count == 1) sets its expiry; the window
    resets only when that key expires.
    """

    def __init__(self, store: BaseEphemeralStore, settings: Settings) -> None:
        self._store = store
        self._window_seconds = settings.rate_limit_window_seconds
        self._ceiling = settings.rate_limit_max_requests

    def check(self, identity: str) -> RateLimitResult:
        key = f"ratelimit:{identity}"
        count = self._store.increment(key)
        if count == 1:
            self._store.expire(key, self._window_seconds)

        allowed = count <= self._ceiling
        if not allowed:
            Log.warning(f"Rate limit exceeded for {identity}: {count} requests in window")
        return RateLimitResult(
            allowed=allowed,
            count=count,
            remaining=max(0, self._ceiling - count),
        )
