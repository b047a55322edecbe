# Standard library imports
import math
import time
from typing import NamedTuple

# Third-party imports
from limits import RateLimitItem, RateLimitItemPerSecond
from limits.storage import MemoryStorage, Storage
from limits.strategies import FixedWindowRateLimiter


class RateLimitResult(NamedTuple):
    allowed: bool
    remaining: int
    retry_after: int


class AddressRateLimiter:
    """
    Fixed-window hit counter keyed by client address, backed by ``limits``.

    Each address gets ``max_attempts`` hits per ``window_seconds``. Counters
    live in ``storage`` (in-memory unless given) under ``scope``, so several
    limiters can share one store, and they expire together with their window.
    Instances are process-local and meant to be injected, not imported.
    """

    def __init__(
        self,
        max_attempts: int,
        window_seconds: int,
        scope: str = "default",
        storage: Storage | None = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be at least 1")
        self.item: RateLimitItem = RateLimitItemPerSecond(max_attempts, window_seconds)
        self.scope = scope
        self.storage = storage if storage is not None else MemoryStorage()
        self._strategy = FixedWindowRateLimiter(self.storage)

    @property
    def max_attempts(self) -> int:
        return self.item.amount

    def hit(self, key: str) -> RateLimitResult:
        """Record one hit for ``key`` and report whether it is allowed."""
        allowed = self._strategy.hit(self.item, self.scope, key)
        stats = self._strategy.get_window_stats(self.item, self.scope, key)
        retry_after = max(1, math.ceil(stats.reset_time - time.time()))
        return RateLimitResult(allowed, stats.remaining, retry_after)

    def reset_key(self, key: str) -> None:
        self._strategy.clear(self.item, self.scope, key)

    def clear(self) -> None:
        self.storage.reset()
