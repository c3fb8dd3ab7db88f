"""OpenTelemetry bootstrap: tracing initialisation and span names.

Configures a ``TracerProvider`` with an OTLP HTTP exporter when tracing
is enabled via ``TracingConfig``.  When disabled the module is a no-op
and ``tracer`` hands out non-recording spans.

Auto-instrumentations wired here:

- **FastAPI** (inbound HTTP spans)
- **httpx** (outbound HTTP spans, which covers the OpenAI client)
- **SQLAlchemy** (DB spans)

Usage::

    from riley.infra.telemetry import SPAN_CHAT_COMPLETION, tracer

    with tracer.start_as_current_span(SPAN_CHAT_COMPLETION) as span:
        ...
"""

from __future__ import annotations

import base64
import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, FastAPI
from opentelemetry import trace

from riley.configs.system import TracingConfig
from riley.infra.db_engine import build_db
from riley.infra.lifespan import get_app

logger = logging.getLogger(__name__)

_otel_enabled = False

tracer = trace.get_tracer("riley")

# ---------------------------------------------------------------------------
# Span names
# ---------------------------------------------------------------------------

SPAN_CHAT_COMPLETION = "chat.completion"
SPAN_HISTORY_LOAD = "history.load"
SPAN_HISTORY_CLEAR = "history.clear"
SPAN_IDENTITY_VERIFY = "identity.verify"

# ---------------------------------------------------------------------------
# Span attribute keys
# ---------------------------------------------------------------------------

ATTR_CHAT_CONTEXT_SIZE = "chat.context_size"
ATTR_CHAT_MODEL = "chat.model"
ATTR_HISTORY_MESSAGE_COUNT = "history.message_count"
ATTR_HISTORY_BATCH_COUNT = "history.batch_count"


def init_telemetry(
    app: object | None = None,
    settings: TracingConfig | None = None,
) -> None:
    """Initialise the OTEL ``TracerProvider`` and auto-instrumentations.

    Parameters
    ----------
    app:
        The FastAPI application instance, handed to the FastAPI
        instrumentor so it can attach ASGI middleware.
    settings:
        Tracing configuration.  When ``None`` or ``enabled`` is
        ``False``, this function is a no-op.
    """
    global _otel_enabled  # noqa: PLW0603

    if settings is None or not settings.enabled:
        logger.info("OpenTelemetry tracing disabled.")
        return

    if not settings.endpoint:
        logger.warning("Tracing enabled but no endpoint configured; skipping.")
        return

    from opentelemetry.exporter.otlp.proto.http.trace_exporter import (
        OTLPSpanExporter,
    )
    from opentelemetry.sdk.resources import Resource
    from opentelemetry.sdk.trace import TracerProvider
    from opentelemetry.sdk.trace.export import BatchSpanProcessor
    from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased

    resource = Resource.create({"service.name": settings.service_name})
    sampler = ParentBased(root=TraceIdRatioBased(settings.sample_rate))
    provider = TracerProvider(resource=resource, sampler=sampler)

    headers: dict[str, str] = {}
    if settings.username and settings.password:
        credentials = f"{settings.username}:{settings.password}"
        encoded = base64.b64encode(credentials.encode()).decode()
        headers["Authorization"] = f"Basic {encoded}"

    exporter = OTLPSpanExporter(endpoint=settings.endpoint, headers=headers)
    provider.add_span_processor(BatchSpanProcessor(exporter))
    trace.set_tracer_provider(provider)

    if app is not None:
        from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor

        excluded = ",".join(settings.excluded_urls) if settings.excluded_urls else ""
        FastAPIInstrumentor.instrument_app(app, excluded_urls=excluded)

    from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

    HTTPXClientInstrumentor().instrument()

    _otel_enabled = True
    logger.info(
        "OpenTelemetry tracing initialised (service=%s).", settings.service_name
    )


def instrument_sqlalchemy(engine: object | None) -> None:
    """Instrument a SQLAlchemy engine for DB span tracing.

    No-op when OTEL is not enabled or no engine was built (memory store).
    """
    if not _otel_enabled or engine is None:
        return

    from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor

    sync_engine = getattr(engine, "sync_engine", engine)
    SQLAlchemyInstrumentor().instrument(engine=sync_engine)
    logger.info("SQLAlchemy engine instrumented for OTEL tracing.")


# ---------------------------------------------------------------------------
# Lifespan dependency
# ---------------------------------------------------------------------------


async def build_telemetry(
    app: Annotated[FastAPI, Depends(get_app)],
    _db: Annotated[None, Depends(build_db)],
) -> AsyncGenerator[None, None]:
    """Instrument the engine ``build_db`` created.

    ``init_telemetry`` itself runs in ``get_app`` because ASGI
    middleware cannot be added once the application has started.
    """
    instrument_sqlalchemy(getattr(app.state, "engine", None))
    yield
