"""External API usage telemetry: one event per outbound call attempt.

Every client wraps its HTTP call in ``track_call`` which emits exactly one
``ApiCallEvent`` (success, HTTP error, timeout or cancellation) to the
injected recorder. Recorders never fail a request: ``emit`` swallows their
exceptions.

The default recorder, ``ApiUsageMetrics``, accumulates per-service counters
for cost accounting and is read by the health endpoint.
"""

import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from threading import Lock
from typing import Any, Protocol

from loguru import logger

# Estimated credit cost per call (paid providers only)
SERVICE_CREDITS: dict[str, int] = {
    "rpc": 1,
    "solscan": 1,
    "dexscreener": 0,
    "rugcheck": 0,
    "pumpfun": 0,
    "bagsfm": 0,
    "jupiter": 0,
    "coingecko": 0,
}


@dataclass
class ApiCallEvent:
    """A single outbound API call attempt."""

    service: str
    endpoint: str
    token_mint: str | None = None
    status: int = 0  # HTTP status, 0 when no response (timeout / connect error)
    latency_ms: float = 0.0
    credits: int = 0
    cached: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)
    error: str | None = None

    @property
    def success(self) -> bool:
        return 200 <= self.status < 400


class UsageRecorder(Protocol):
    def record(self, event: ApiCallEvent) -> None: ...


@dataclass
class CallTrace:
    """Mutable handle a client fills in while its call is in flight."""

    status: int = 0
    metadata: dict[str, Any] = field(default_factory=dict)
    error: str | None = None


def emit(recorder: UsageRecorder | None, event: ApiCallEvent) -> None:
    """Hand an event to the recorder; recorder failures are logged and dropped."""
    if recorder is None:
        return
    try:
        recorder.record(event)
    except Exception as e:
        logger.debug(f"[USAGE] Recorder failed for {event.service}:{event.endpoint}: {e}")


@asynccontextmanager
async def track_call(
    recorder: UsageRecorder | None,
    service: str,
    endpoint: str,
    token_mint: str | None = None,
    *,
    credits: int | None = None,
    metadata: dict[str, Any] | None = None,
) -> AsyncIterator[CallTrace]:
    """Measure one call attempt and emit its ApiCallEvent on exit."""
    trace = CallTrace(metadata=dict(metadata or {}))
    start = time.monotonic()
    try:
        yield trace
    except BaseException as e:
        if trace.error is None:
            trace.error = f"{type(e).__name__}: {e}" if str(e) else type(e).__name__
        raise
    finally:
        emit(
            recorder,
            ApiCallEvent(
                service=service,
                endpoint=endpoint,
                token_mint=token_mint,
                status=trace.status,
                latency_ms=round((time.monotonic() - start) * 1000, 1),
                credits=credits if credits is not None else SERVICE_CREDITS.get(service, 0),
                metadata=trace.metadata,
                error=trace.error,
            ),
        )


@dataclass
class ServiceUsage:
    """Accumulated usage for a single external service."""

    calls: int = 0
    errors: int = 0
    credits: int = 0
    total_latency_ms: float = 0.0
    max_latency_ms: float = 0.0

    @property
    def avg_latency_ms(self) -> float:
        if self.calls == 0:
            return 0.0
        return self.total_latency_ms / self.calls


class ApiUsageMetrics:
    """Process-wide API usage accumulator.

    Thread-safe via a simple lock (reports run on the event loop
    but the health endpoint may read concurrently).
    """

    def __init__(self) -> None:
        self._lock = Lock()
        self._services: dict[str, ServiceUsage] = {}
        self._start_time: float = time.monotonic()

    def record(self, event: ApiCallEvent) -> None:
        with self._lock:
            usage = self._services.setdefault(event.service, ServiceUsage())
            usage.calls += 1
            usage.credits += event.credits
            usage.total_latency_ms += event.latency_ms
            if event.latency_ms > usage.max_latency_ms:
                usage.max_latency_ms = event.latency_ms
            if not event.success:
                usage.errors += 1

        mint = (event.token_mint or "-")[:12]
        logger.debug(
            f"[USAGE] {event.service}:{event.endpoint} mint={mint} "
            f"status={event.status} {event.latency_ms:.0f}ms credits={event.credits}"
            + (f" error={event.error}" if event.error else "")
        )

    def get_summary(self) -> dict:
        """Return a snapshot of all counters."""
        with self._lock:
            return {
                "uptime_sec": round(time.monotonic() - self._start_time),
                "services": {
                    name: {
                        "calls": u.calls,
                        "errors": u.errors,
                        "credits": u.credits,
                        "avg_latency_ms": round(u.avg_latency_ms),
                        "max_latency_ms": round(u.max_latency_ms),
                    }
                    for name, u in self._services.items()
                },
            }

    def format_stats_line(self) -> str:
        """One-line summary for logs."""
        with self._lock:
            calls = sum(u.calls for u in self._services.values())
            errors = sum(u.errors for u in self._services.values())
            credits = sum(u.credits for u in self._services.values())
            return f"api_calls={calls} errors={errors} credits={credits}"


# Global singleton: default recorder for the API server and CLI
usage_metrics = ApiUsageMetrics()
