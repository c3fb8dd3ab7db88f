"""Store construction and per-request store dependencies.

``build_stores`` runs in the lifespan after ``build_db`` and places one
conversation store and one comment store on ``app.state``.  Routes read
them through ``get_conversation_store`` / ``get_comment_store`` which
tests replace via ``app.dependency_overrides``.
"""

from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, FastAPI, Request

from riley.configs.config import AppConfig, get_app_config
from riley.infra.db_engine import build_db
from riley.infra.lifespan import get_app

from .base import CommentStore, ConversationStore
from .comments import SqlCommentStore
from .history import SqlConversationStore
from .memory import InMemoryCommentStore, InMemoryConversationStore

logger = logging.getLogger(__name__)


def create_stores(
    config: AppConfig, session_factory=None
) -> tuple[ConversationStore, CommentStore]:
    """Instantiate the stores selected by ``third_party.store_backend``."""
    batch_size = config.chat.clear_batch_size
    if config.third_party.store_backend == "memory":
        return InMemoryConversationStore(batch_size), InMemoryCommentStore()

    if session_factory is None:
        raise RuntimeError("postgres store backend requires a session factory")

    return (
        SqlConversationStore(session_factory, batch_size),
        SqlCommentStore(session_factory),
    )


async def build_stores(
    app: Annotated[FastAPI, Depends(get_app)],
    config: Annotated[AppConfig, Depends(get_app_config)],
    _db: Annotated[None, Depends(build_db)],
) -> AsyncGenerator[None, None]:
    """Lifespan dependency attaching the stores to ``app.state``."""
    conversations, comments = create_stores(config, app.state.session_factory)
    app.state.conversation_store = conversations
    app.state.comment_store = comments
    logger.info("Stores ready (backend=%s)", config.third_party.store_backend)
    yield


def get_conversation_store(request: Request) -> ConversationStore:
    return request.app.state.conversation_store


def get_comment_store(request: Request) -> CommentStore:
    return request.app.state.comment_store
