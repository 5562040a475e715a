"""In-memory sliding-window rate limiter."""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Callable

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_MS = 60_000
DEFAULT_MAX_REQUESTS = 10
CLEANUP_INTERVAL_MS = 60_000


def _now_ms() -> int:
    return int(time.time() * 1000)


@dataclass(frozen=True)
class RateLimitResult:
    """Outcome of a single rate-limit check."""

    allowed: bool
    limit: int
    remaining: int
    reset_time: int  # epoch ms


@dataclass
class _WindowEntry:
    requests: list[int] = field(default_factory=list)
    last_cleanup: int = 0
    retired: bool = False
    lock: threading.Lock = field(default_factory=threading.Lock)


class RateLimiter:
    """Track request timestamps per identifier and enforce a sliding window.

    Each identifier keeps the millisecond timestamps of its admitted requests.
    Every check re-filters that list against ``now - window_ms``, so the
    window slides continuously instead of resetting on bucket boundaries.
    Identifiers that go quiet are swept by a global cleanup that runs at most
    once per ``cleanup_interval_ms``, piggybacked on regular checks.

    One instance is meant to live for the whole process and be shared by the
    request handlers.
    """

    def __init__(self, window_ms: int = DEFAULT_WINDOW_MS,
                 max_requests: int = DEFAULT_MAX_REQUESTS,
                 cleanup_interval_ms: int = CLEANUP_INTERVAL_MS,
                 clock: Callable[[], int] = _now_ms) -> None:
        self.window_ms = window_ms
        self.max_requests = max_requests
        self.cleanup_interval_ms = cleanup_interval_ms
        self._clock = clock
        self._store: dict[str, _WindowEntry] = {}
        # Guards the identifier map only; timestamps are guarded per entry.
        self._store_lock = threading.Lock()
        self._last_global_cleanup = clock()

    def check(self, identifier: str) -> RateLimitResult:
        """Count a request from *identifier* if the window has room.

        Denied attempts do not consume a slot.
        """
        self._maybe_cleanup()

        while True:
            entry = self._get_entry(identifier)
            with entry.lock:
                if entry.retired:
                    # Swept by cleanup between fetch and lock; take the live one.
                    continue
                now = self._clock()
                window_start = now - self.window_ms
                entry.requests = [ts for ts in entry.requests if ts > window_start]

                count = len(entry.requests)
                remaining = max(0, self.max_requests - count)
                allowed = count < self.max_requests

                if allowed:
                    entry.requests.append(now)
                    remaining -= 1

                oldest = entry.requests[0] if entry.requests else now
                return RateLimitResult(
                    allowed=allowed,
                    limit=self.max_requests,
                    remaining=remaining,
                    reset_time=oldest + self.window_ms,
                )

    def now(self) -> int:
        """Current time in epoch ms, as seen by this limiter."""
        return self._clock()

    def exempt_result(self) -> RateLimitResult:
        """Synthetic always-allowed result for allow-listed identifiers."""
        return RateLimitResult(
            allowed=True,
            limit=self.max_requests,
            remaining=max(0, self.max_requests - 1),
            reset_time=self._clock() + self.window_ms,
        )

    def reset(self, identifier: str) -> None:
        """Forget all recorded requests for *identifier*."""
        with self._store_lock:
            entry = self._store.pop(identifier, None)
        if entry is not None:
            with entry.lock:
                entry.retired = True

    def stats(self) -> dict:
        """Number of tracked identifiers and of recorded timestamps."""
        with self._store_lock:
            entries = list(self._store.values())
        total_requests = 0
        for entry in entries:
            with entry.lock:
                total_requests += len(entry.requests)
        return {"total_keys": len(entries), "total_requests": total_requests}

    def cleanup(self) -> int:
        """Drop expired timestamps everywhere and delete empty identifiers.

        Returns:
            Number of identifiers removed.
        """
        now = self._clock()
        window_start = now - self.window_ms
        removed = 0

        with self._store_lock:
            for identifier, entry in list(self._store.items()):
                with entry.lock:
                    entry.requests = [ts for ts in entry.requests if ts > window_start]
                    if entry.requests:
                        entry.last_cleanup = now
                        continue
                    entry.retired = True
                del self._store[identifier]
                removed += 1
            self._last_global_cleanup = now
            remaining_keys = len(self._store)

        logger.debug("Rate limiter cleanup removed %d keys, %d remain",
                     removed, remaining_keys)
        return removed

    def _maybe_cleanup(self) -> None:
        if self._clock() - self._last_global_cleanup < self.cleanup_interval_ms:
            return
        self.cleanup()

    def _get_entry(self, identifier: str) -> _WindowEntry:
        with self._store_lock:
            entry = self._store.get(identifier)
            if entry is None:
                entry = _WindowEntry(last_cleanup=self._clock())
                self._store[identifier] = entry
            return entry
