"""Prometheus instruments shared by the provider adapters."""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Iterator

from prometheus_client import Counter, Histogram

from weathercompare.core.config import settings

PROVIDER_REQUEST_SECONDS = Histogram(
    "weathercompare_provider_request_seconds",
    "Latency of outbound requests to weather/geocoding providers.",
    ["provider"],
)
PROVIDER_REQUEST_FAILURES = Counter(
    "weathercompare_provider_request_failures_total",
    "Outbound provider requests that failed (transport error or non-2xx).",
    ["provider"],
)
ARCHIVE_FALLBACKS = Counter(
    "weathercompare_archive_fallbacks_total",
    "Daily parameters that fell back from the archive CSV to the recent-window JSON.",
    ["parameter"],
)
INSIGHTS_EMITTED = Counter(
    "weathercompare_insights_emitted_total",
    "Insights produced by the insight engine.",
    ["kind"],
)


@contextmanager
def track_request(provider: str) -> Iterator[None]:
    """Time a provider request and count it as failed if it raises."""

    started = time.perf_counter()
    try:
        yield
    except Exception:
        if settings.metrics_enabled:
            PROVIDER_REQUEST_FAILURES.labels(provider=provider).inc()
        raise
    finally:
        if settings.metrics_enabled:
            PROVIDER_REQUEST_SECONDS.labels(provider=provider).observe(
                time.perf_counter() - started
            )


def record_failure(provider: str) -> None:
    if settings.metrics_enabled:
        PROVIDER_REQUEST_FAILURES.labels(provider=provider).inc()


def record_archive_fallback(parameter: str) -> None:
    if settings.metrics_enabled:
        ARCHIVE_FALLBACKS.labels(parameter=parameter).inc()


def record_insight(kind: str) -> None:
    if settings.metrics_enabled:
        INSIGHTS_EMITTED.labels(kind=kind).inc()


__all__ = [
    "track_request",
    "record_failure",
    "record_archive_fallback",
    "record_insight",
]
