from __future__ import annotations

from prometheus_client import Counter, Gauge, Histogram


AUDIO_GENERATIONS_TOTAL = Counter(
    "audio_generations_total",
    "Total audio generation requests by kind and outcome.",
    ["kind", "status"],
)

AUDIO_GENERATED_BYTES_TOTAL = Counter(
    "audio_generated_bytes_total",
    "Total number of WAV bytes rendered.",
    ["kind"],
)

AUDIO_GENERATION_SECONDS = Histogram(
    "audio_generation_seconds",
    "Wall-clock time spent rendering audio on worker threads.",
    ["kind"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0),
)

AUDIO_ACTIVE_GENERATIONS = Gauge(
    "audio_active_generations",
    "Current number of renders holding a concurrency slot.",
    ["kind"],
)

AUDIO_STORAGE_FAILURES_TOTAL = Counter(
    "audio_storage_failures_total",
    "Total number of object-storage failures.",
    ["operation"],
)

AUDIO_RATE_LIMIT_HITS_TOTAL = Counter(
    "audio_rate_limit_hits_total",
    "Total number of HTTP requests rejected by the rate limiter.",
    ["scope"],
)

AUDIO_RATE_LIMIT_MAX_BUCKET_USAGE = Gauge(
    "audio_rate_limit_max_bucket_usage",
    "Maximum per-key request count as a fraction of the configured limit.",
    ["scope"],
)


def record_generation_succeeded(kind: str, num_bytes: int) -> None:
    AUDIO_GENERATIONS_TOTAL.labels(kind=kind, status="succeeded").inc()
    AUDIO_GENERATED_BYTES_TOTAL.labels(kind=kind).inc(num_bytes)


def record_generation_failed(kind: str, *, reason: str) -> None:
    """Count a failed request; ``reason`` becomes the status label."""
    AUDIO_GENERATIONS_TOTAL.labels(kind=kind, status=reason).inc()


def observe_render_seconds(kind: str, seconds: float) -> None:
    AUDIO_GENERATION_SECONDS.labels(kind=kind).observe(seconds)


def increment_active_generations(kind: str) -> None:
    AUDIO_ACTIVE_GENERATIONS.labels(kind=kind).inc()


def decrement_active_generations(kind: str) -> None:
    AUDIO_ACTIVE_GENERATIONS.labels(kind=kind).dec()


def record_storage_failure(operation: str) -> None:
    AUDIO_STORAGE_FAILURES_TOTAL.labels(operation=operation).inc()


def record_rate_limit_hit(scope: str) -> None:
    AUDIO_RATE_LIMIT_HITS_TOTAL.labels(scope=scope).inc()


def record_rate_limit_max_bucket_usage(scope: str, usage_fraction: float) -> None:
    AUDIO_RATE_LIMIT_MAX_BUCKET_USAGE.labels(scope=scope).set(usage_fraction)
