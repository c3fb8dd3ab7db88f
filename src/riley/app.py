"""FastAPI application entry point."""

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware

from riley.api.chat import router as chat_router
from riley.api.comments import router as comments_router
from riley.api.exceptions import register_exception_handlers
from riley.configs.config import AppConfig, get_app_config
from riley.core.service.metrics import instrument_metrics
from riley.infra.db import build_stores
from riley.infra.lifespan import inject
from riley.infra.logging import setup_logging
from riley.infra.telemetry import build_telemetry, init_telemetry

logger = logging.getLogger(__name__)


@inject
async def lifespan(
    app: FastAPI,
    _stores: Annotated[None, Depends(build_stores)],
    _telemetry: Annotated[None, Depends(build_telemetry)],
) -> AsyncGenerator[None, None]:
    """Engine, stores and DB instrumentation are owned by the dependencies."""
    logger.info("Riley started")
    yield
    logger.info("Riley shutting down")


def get_app(config: AppConfig | None = None) -> FastAPI:
    """Create and configure the FastAPI application.

    Everything that installs middleware runs here, before the
    application starts serving.
    """
    config = config or get_app_config()
    setup_logging(config.logging)

    app = FastAPI(
        title="Riley",
        description="Persona chat assistant with authenticated, persistent history",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    init_telemetry(app, config.tracing)
    instrument_metrics(app, config)
    register_exception_handlers(app)

    app.include_router(chat_router, prefix=config.api.prefix)
    app.include_router(comments_router, prefix=config.api.prefix)

    @app.get("/health", include_in_schema=False)
    async def health() -> dict[str, bool]:
        return {"ok": True}

    return app


app = get_app()
