"""Prometheus metrics for the Riley application.

Custom business metrics that complement the auto-instrumented HTTP
metrics provided by ``prometheus-fastapi-instrumentator``.

All metrics use the ``riley_`` prefix.
"""

import functools
import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from fastapi import FastAPI
from prometheus_client import Counter, Histogram
from prometheus_fastapi_instrumentator import Instrumentator

from riley.configs.config import AppConfig

logger = logging.getLogger(__name__)

T = TypeVar("T")

# ---------------------------------------------------------------------------
# Operation metrics
# ---------------------------------------------------------------------------

CHAT_OPERATIONS_TOTAL = Counter(
    "riley_chat_operations_total",
    "Total chat/comment operations handled, by outcome",
    ["operation", "status"],  # status: "ok" | "error"
)

CHAT_OPERATION_DURATION_SECONDS = Histogram(
    "riley_chat_operation_duration_seconds",
    "Duration of chat/comment operations",
    ["operation"],
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2, 5, 10, 30, 60),
)

# ---------------------------------------------------------------------------
# Completion engine metrics
# ---------------------------------------------------------------------------

COMPLETION_LATENCY_SECONDS = Histogram(
    "riley_completion_latency_seconds",
    "Latency of completion engine calls",
    ["model_name"],
    buckets=(0.25, 0.5, 1, 2, 5, 10, 20, 30, 60),
)

COMPLETION_FAILURES_TOTAL = Counter(
    "riley_completion_failures_total",
    "Completion calls that raised or returned empty content",
    ["model_name"],
)

# ---------------------------------------------------------------------------
# History metrics
# ---------------------------------------------------------------------------

HISTORY_MESSAGES_CLEARED_TOTAL = Counter(
    "riley_history_messages_cleared_total",
    "Total messages deleted by clear history",
)


# ---------------------------------------------------------------------------
# Decorator
# ---------------------------------------------------------------------------


def observe_operation(
    operation: str,
) -> Callable[[Callable[..., Awaitable[T]]], Callable[..., Awaitable[T]]]:
    """Decorator for service coroutines that records count and duration.

    Usage::

        @observe_operation("send_message")
        async def send_message(self, ...): ...
    """

    def decorator(fn: Callable[..., Awaitable[T]]) -> Callable[..., Awaitable[T]]:
        @functools.wraps(fn)
        async def wrapper(*args: Any, **kwargs: Any) -> T:
            start = time.monotonic()
            status = "ok"
            try:
                return await fn(*args, **kwargs)
            except Exception:
                status = "error"
                raise
            finally:
                CHAT_OPERATIONS_TOTAL.labels(operation=operation, status=status).inc()
                CHAT_OPERATION_DURATION_SECONDS.labels(operation=operation).observe(
                    time.monotonic() - start
                )

        return wrapper

    return decorator


# ---------------------------------------------------------------------------
# HTTP instrumentation
# ---------------------------------------------------------------------------


def instrument_metrics(app: FastAPI, config: AppConfig) -> None:
    """Attach ``prometheus-fastapi-instrumentator`` and expose ``/metrics``.

    Must run before the application starts; middleware cannot be added
    afterwards.
    """
    Instrumentator(
        should_instrument_requests_inprogress=True,
        excluded_handlers=config.tracing.excluded_urls,
    ).instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

    logger.info("Prometheus metrics initialised")
