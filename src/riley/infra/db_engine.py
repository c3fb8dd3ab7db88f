"""Async SQLAlchemy engine and session factory (leaf module).

``build_db`` is a lifespan dependency: it creates the engine +
session factory, attaches them to ``app.state``, and disposes the
engine on shutdown.  ``build_stores`` hands the factory to the stores.

This module lives outside the ``db`` package so that ``telemetry`` can
``Depends(build_db)`` without importing the stores, which themselves
import ``telemetry``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, FastAPI
from sqlalchemy.ext.asyncio import (
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from riley.configs.config import AppConfig, get_app_config
from riley.infra.lifespan import get_app

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Lifespan dependency
# ---------------------------------------------------------------------------


async def build_db(
    app: Annotated[FastAPI, Depends(get_app)],
    config: Annotated[AppConfig, Depends(get_app_config)],
) -> AsyncGenerator[None, None]:
    """Create engine + session factory, attach to ``app.state``.

    With the memory backend no engine is created and both attributes
    are ``None``.
    """
    tp = config.third_party
    if tp.store_backend != "postgres":
        logger.info("Store backend is %r; no database engine created.", tp.store_backend)
        app.state.engine = None
        app.state.session_factory = None
        yield
        return

    engine = create_async_engine(
        tp.postgres_uri,
        pool_pre_ping=True,
        pool_size=tp.postgres_pool_size,
        max_overflow=tp.postgres_max_overflow,
    )
    factory: async_sessionmaker[AsyncSession] = async_sessionmaker(
        engine, expire_on_commit=False
    )
    app.state.engine = engine
    app.state.session_factory = factory
    yield
    await engine.dispose()
