from __future__ import annotations

import threading
import time
from dataclasses import dataclass

from venuebook.core.config import get_settings


@dataclass
class _Window:
    started_at: float
    count: int = 0


class FixedWindowRateLimiter:
    """Fixed window counter per key, kept in process memory.

    Good enough for a single API process; multiple workers each keep their own
    counts.
    """

    def __init__(self, max_requests: int, window_seconds: int, *, max_keys: int = 10_000) -> None:
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.max_keys = max_keys
        self._windows: dict[str, _Window] = {}
        self._lock = threading.Lock()

    def _prune(self, now: float) -> None:
        expired = [k for k, w in self._windows.items() if now >= w.started_at + self.window_seconds]
        for k in expired:
            del self._windows[k]

    def hit(self, key: str, *, now: float | None = None) -> tuple[bool, int, int]:
        """Count one request for ``key``.

        Returns (allowed, remaining, retry_after_seconds).
        """
        now = time.monotonic() if now is None else now
        with self._lock:
            window = self._windows.get(key)
            if window is None or now >= window.started_at + self.window_seconds:
                if window is None and len(self._windows) >= self.max_keys:
                    self._prune(now)
                window = _Window(started_at=now)
                self._windows[key] = window

            if window.count >= self.max_requests:
                retry_after = int(window.started_at + self.window_seconds - now)
                return False, 0, max(retry_after, 1)

            window.count += 1
            return True, self.max_requests - window.count, 0

    def reset(self) -> None:
        with self._lock:
            self._windows.clear()


_public_limiter: FixedWindowRateLimiter | None = None


def get_public_booking_limiter() -> FixedWindowRateLimiter:
    global _public_limiter
    if _public_limiter is None:
        settings = get_settings()
        _public_limiter = FixedWindowRateLimiter(settings.public_bookings_per_hour, settings.rate_limit_window_seconds)
    return _public_limiter
