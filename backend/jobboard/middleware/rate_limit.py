"""
JobBoard Backend - Rate Limiter
================================

What:  Per-client fixed-window request counter with per-operation policies.
How:   Each bucket key (operation name + client address) owns one RateWindow.
       The limiter is policy-agnostic: every call site passes its own
       (max_requests, window_ms) pair through a RatePolicy.
Who:   Called by the request pipeline as its first stage.

Algorithm: Fixed Reset Window
    1. Purge every stored window whose reset time has already passed
    2. No window for the key, or its reset time reached → start a new
       window with count=1 and allow
    3. Otherwise increment the count; reject once count > max_requests,
       telling the client how many seconds remain until the reset

    Rejected requests still increment the count.

Deployment Note:
    InMemoryRateLimitStore keeps state in the current process only. With
    several workers each one counts independently, and interleaved requests
    from the same client are not synchronized. A shared store (e.g. Redis)
    can be dropped in by implementing RateLimitStore; call sites do not change.
"""

import logging
import math
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, Optional, Tuple

from starlette.requests import Request

logger = logging.getLogger(__name__)

UNKNOWN_CLIENT = "unknown"


@dataclass
class RateWindow:
    count: int
    reset_at: float  # epoch milliseconds


@dataclass(frozen=True)
class RatePolicy:
    """Named (max requests, window) pair applied to one group of operations."""

    name: str
    max_requests: int
    window_ms: int


@dataclass(frozen=True)
class RateLimitDecision:
    allowed: bool
    retry_after: int = 0


# ══════════════════════════════════════════════════════════════════════════
# Window Stores
# ══════════════════════════════════════════════════════════════════════════


class RateLimitStore(ABC):
    """
    Storage contract for rate windows, keyed by bucket key.

    `items()` exists for the opportunistic purge of expired windows.
    """

    @abstractmethod
    def get(self, key: str) -> Optional[RateWindow]:
        ...

    @abstractmethod
    def set(self, key: str, window: RateWindow) -> None:
        ...

    @abstractmethod
    def delete(self, key: str) -> None:
        ...

    @abstractmethod
    def items(self) -> Iterable[Tuple[str, RateWindow]]:
        ...


class InMemoryRateLimitStore(RateLimitStore):
    """Dict-backed store for single-process deployments."""

    def __init__(self):
        self._windows: Dict[str, RateWindow] = {}

    def get(self, key: str) -> Optional[RateWindow]:
        return self._windows.get(key)

    def set(self, key: str, window: RateWindow) -> None:
        self._windows[key] = window

    def delete(self, key: str) -> None:
        self._windows.pop(key, None)

    def items(self) -> Iterable[Tuple[str, RateWindow]]:
        # Snapshot so callers may delete while iterating
        return list(self._windows.items())

    def __len__(self) -> int:
        return len(self._windows)


# ══════════════════════════════════════════════════════════════════════════
# Limiter
# ══════════════════════════════════════════════════════════════════════════


def _now_ms() -> float:
    return time.time() * 1000


class RateLimiter:
    """
    Fixed-window limiter over a pluggable RateLimitStore.

    Args:
        store: Window storage (defaults to a fresh in-memory store)
        clock: Returns the current time in epoch milliseconds (injectable for tests)
    """

    def __init__(
        self,
        store: Optional[RateLimitStore] = None,
        clock: Callable[[], float] = _now_ms,
    ):
        self.store = store if store is not None else InMemoryRateLimitStore()
        self._clock = clock

    def check(self, identifier: str, max_requests: int, window_ms: int) -> RateLimitDecision:
        now = self._clock()
        self._purge_expired(now)

        window = self.store.get(identifier)
        if window is None or now >= window.reset_at:
            self.store.set(identifier, RateWindow(count=1, reset_at=now + window_ms))
            return RateLimitDecision(allowed=True)

        window.count += 1
        self.store.set(identifier, window)

        if window.count > max_requests:
            retry_after = math.ceil((window.reset_at - now) / 1000)
            return RateLimitDecision(allowed=False, retry_after=retry_after)

        return RateLimitDecision(allowed=True)

    def check_policy(self, policy: RatePolicy, client: str) -> RateLimitDecision:
        """Check a client against a named policy (bucket key = '<policy>:<client>')."""
        decision = self.check(f"{policy.name}:{client}", policy.max_requests, policy.window_ms)
        if not decision.allowed:
            logger.warning(
                "Rate limit exceeded for %s on %s: max %d per %dms, retry in %ds",
                client,
                policy.name,
                policy.max_requests,
                policy.window_ms,
                decision.retry_after,
            )
        return decision

    def _purge_expired(self, now: float) -> None:
        expired = [key for key, window in self.store.items() if window.reset_at < now]
        for key in expired:
            self.store.delete(key)
        if expired:
            logger.debug("Purged %d expired rate windows", len(expired))


def client_identifier(request: Request) -> str:
    """
    Derive the rate-limit key for the caller.

    Order: first address in X-Forwarded-For, then X-Real-IP, then "unknown".
    """
    forwarded = request.headers.get("x-forwarded-for", "")
    if forwarded.strip():
        return forwarded.split(",")[0].strip()
    real_ip = request.headers.get("x-real-ip", "").strip()
    if real_ip:
        return real_ip
    return UNKNOWN_CLIENT
