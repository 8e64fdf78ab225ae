from __future__ import annotations

import time
from dataclasses import dataclass
from threading import RLock
from typing import Dict, Tuple

from dream_audio.logging_utils import get_logger
from dream_audio import metrics as app_metrics


logger = get_logger(__name__)


@dataclass
class RateLimitConfig:
    """Configuration for per-client rate limiting."""

    max_requests_per_window: int = 20
    window_seconds: int = 60


class RateLimiter:
    """In-memory fixed-window rate limiter keyed by user id.

    Rendering is CPU-heavy, so the generation endpoints are limited per user.
    Buckets whose window has expired are dropped on the next request.
    """

    def __init__(self, config: RateLimitConfig | None = None, *, scope: str = "client") -> None:
        self._config = config or RateLimitConfig()
        self._scope = scope
        self._lock = RLock()
        # key -> (window_start_epoch, count)
        self._buckets: Dict[str, Tuple[float, int]] = {}

    def __len__(self) -> int:
        with self._lock:
            return len(self._buckets)

    def allow_request(self, key: str) -> bool:
        """Return True if a request from `key` is allowed."""
        now = time.time()
        with self._lock:
            self._evict_expired(now)
            window_start, count = self._buckets.get(key, (now, 0))

            allowed = count < self._config.max_requests_per_window
            if allowed:
                count += 1
            else:
                logger.warning(
                    "Rate limit exceeded for key=%s (count=%d, window_start=%f)",
                    key,
                    count,
                    window_start,
                )
                app_metrics.record_rate_limit_hit(scope=self._scope)

            self._buckets[key] = (window_start, count)
            self._publish_usage()
            return allowed

    def _evict_expired(self, now: float) -> None:
        expired = [
            key
            for key, (window_start, _) in self._buckets.items()
            if now - window_start >= self._config.window_seconds
        ]
        for key in expired:
            del self._buckets[key]

    def _publish_usage(self) -> None:
        if self._config.max_requests_per_window <= 0:
            return
        max_count = max((c for _, c in self._buckets.values()), default=0)
        app_metrics.record_rate_limit_max_bucket_usage(
            scope=self._scope,
            usage_fraction=max_count / float(self._config.max_requests_per_window),
        )
