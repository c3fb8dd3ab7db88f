"""Persistence layer: store interfaces, SQL and in-memory backends."""

from riley.infra.db_engine import build_db

from .base import CommentStore, ConversationStore, StoreError, chunked
from .comments import SqlCommentStore
from .constants import ROLE_ASSISTANT, ROLE_SYSTEM, ROLE_USER, Role
from .deps import build_stores, create_stores, get_comment_store, get_conversation_store
from .history import SqlConversationStore
from .memory import InMemoryCommentStore, InMemoryConversationStore
from .models import Base, ChatMessage, Comment, UserProfile
from .records import StoredComment, StoredMessage

__all__ = [
    "build_db",
    "build_stores",
    "chunked",
    "create_stores",
    "get_comment_store",
    "get_conversation_store",
    "Base",
    "ChatMessage",
    "Comment",
    "CommentStore",
    "ConversationStore",
    "InMemoryCommentStore",
    "InMemoryConversationStore",
    "Role",
    "SqlCommentStore",
    "SqlConversationStore",
    "ROLE_ASSISTANT",
    "ROLE_SYSTEM",
    "ROLE_USER",
    "StoreError",
    "StoredComment",
    "StoredMessage",
    "UserProfile",
]
