"""FastAPI dependency factories for the services.

Stores are read from ``app.state`` (created in lifespan); the services
themselves are built per request with an explicit parameter chain.
"""

from typing import Annotated

from fastapi import Depends
from langchain_core.language_models import BaseChatModel

from riley.configs.config import AppConfig, get_app_config, get_comments_config
from riley.configs.system import CommentsConfig
from riley.core.llm import get_llm
from riley.infra.db import (
    CommentStore,
    ConversationStore,
    get_comment_store,
    get_conversation_store,
)

from .chat import ChatSessionService
from .comments import CommentService


def get_chat_service(
    llm: Annotated[BaseChatModel, Depends(get_llm)],
    store: Annotated[ConversationStore, Depends(get_conversation_store)],
    config: Annotated[AppConfig, Depends(get_app_config)],
) -> ChatSessionService:
    return ChatSessionService(llm, store, config)


def get_comment_service(
    store: Annotated[CommentStore, Depends(get_comment_store)],
    config: Annotated[CommentsConfig, Depends(get_comments_config)],
) -> CommentService:
    return CommentService(store, config)
