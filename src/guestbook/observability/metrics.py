from __future__ import annotations

import time

from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


class GuestbookMetrics:
    """Prometheus metrics for the guestbook, on a registry owned by this instance.

    A private registry keeps multiple app instances (tests) from colliding on
    the process-global default registry.
    """

    content_type = CONTENT_TYPE_LATEST

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.registry = registry or CollectorRegistry()
        self._start_time = time.monotonic()

        self.requests_total = Counter(
            "guestbook_requests_total",
            "Total number of HTTP requests",
            ["method", "endpoint", "status"],
            registry=self.registry,
        )
        self.http_duration = Histogram(
            "guestbook_http_duration_seconds",
            "Duration of HTTP requests in seconds",
            ["method", "endpoint"],
            registry=self.registry,
        )
        self.cache_hits = Counter(
            "guestbook_cache_hits_total",
            "Total number of cache hits",
            registry=self.registry,
        )
        self.cache_misses = Counter(
            "guestbook_cache_misses_total",
            "Total number of cache misses",
            registry=self.registry,
        )
        self.db_entries = Gauge(
            "guestbook_db_entries_total",
            "Total number of entries in database",
            registry=self.registry,
        )
        self.db_up = Gauge(
            "guestbook_db_up",
            "Database availability (1 = up, 0 = down)",
            registry=self.registry,
        )
        self.redis_up = Gauge(
            "guestbook_redis_up",
            "Redis availability (1 = up, 0 = down)",
            registry=self.registry,
        )

    def observe_request(self, method: str, endpoint: str, status: int, duration: float) -> None:
        self.requests_total.labels(method=method, endpoint=endpoint, status=str(status)).inc()
        self.http_duration.labels(method=method, endpoint=endpoint).observe(duration)

    def value(self, name: str, labels: dict[str, str] | None = None) -> float | None:
        """Current value of a sample, or None if it has never been set."""
        return self.registry.get_sample_value(name, labels or {})

    def get_stats(self) -> dict[str, float]:
        return {
            "cache_hits": self.value("guestbook_cache_hits_total") or 0.0,
            "cache_misses": self.value("guestbook_cache_misses_total") or 0.0,
            "db_entries": self.value("guestbook_db_entries_total") or 0.0,
            "db_up": self.value("guestbook_db_up") or 0.0,
            "redis_up": self.value("guestbook_redis_up") or 0.0,
            "uptime_seconds": round(time.monotonic() - self._start_time, 1),
        }

    def render(self) -> bytes:
        return generate_latest(self.registry)
