"""Single-process stores kept in memory.

Used with ``third_party.store_backend: memory`` for local development
and by the test-suite.  Contents are lost on restart.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any

from riley.infra.id_utils import PREFIX_COMMENT, PREFIX_MESSAGE, generate_id

from .base import CommentStore, ConversationStore
from .constants import DEFAULT_CLEAR_BATCH_SIZE, ROLE_ASSISTANT, ROLE_USER
from .converters import toggled_likes
from .records import StoredComment, StoredMessage

_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


class InMemoryConversationStore(ConversationStore):
    """Conversation log in a dict of per-identity lists (insertion ordered)."""

    def __init__(self, clear_batch_size: int = DEFAULT_CLEAR_BATCH_SIZE) -> None:
        super().__init__(clear_batch_size)
        self._messages: dict[str, list[StoredMessage]] = {}
        self.profiles: dict[str, dict[str, Any]] = {}

    def seed(self, identity_id: str, messages: Sequence[StoredMessage]) -> None:
        """Append pre-built records, bypassing the exchange API."""
        self._messages.setdefault(identity_id, []).extend(messages)

    def count(self, identity_id: str) -> int:
        return len(self._messages.get(identity_id, []))

    async def append_exchange(
        self,
        identity_id: str,
        user_content: str,
        assistant_content: str,
        timestamp: datetime,
    ) -> list[StoredMessage]:
        records = [
            StoredMessage(generate_id(PREFIX_MESSAGE), ROLE_USER, user_content, timestamp),
            StoredMessage(
                generate_id(PREFIX_MESSAGE), ROLE_ASSISTANT, assistant_content, timestamp
            ),
        ]
        self._messages.setdefault(identity_id, []).extend(records)
        return records

    async def list_messages(self, identity_id: str, limit: int) -> list[StoredMessage]:
        # sorted() is stable, so equal timestamps keep insertion order.
        ordered = sorted(
            self._messages.get(identity_id, []),
            key=lambda m: m.timestamp or _EPOCH,
        )
        return ordered[:limit]

    async def touch_profile(
        self, identity_id: str, email: str | None, timestamp: datetime
    ) -> None:
        profile = self.profiles.setdefault(identity_id, {})
        profile["last_chat_activity"] = timestamp
        if email:
            profile["email"] = email

    async def _list_message_keys(self, identity_id: str) -> list[Any]:
        return [m.id for m in self._messages.get(identity_id, [])]

    async def _delete_batch(self, identity_id: str, keys: Sequence[Any]) -> None:
        doomed = set(keys)
        self._messages[identity_id] = [
            m for m in self._messages.get(identity_id, []) if m.id not in doomed
        ]


class InMemoryCommentStore(CommentStore):
    """Comment board in a list; newest entries are appended last."""

    def __init__(self) -> None:
        self._comments: list[StoredComment] = []

    async def add(
        self,
        *,
        text: str,
        user_id: str,
        user_email: str | None,
        user_name: str,
        timestamp: datetime,
    ) -> StoredComment:
        comment = StoredComment(
            id=generate_id(PREFIX_COMMENT),
            text=text,
            user_id=user_id,
            user_name=user_name,
            user_email=user_email,
            timestamp=timestamp,
        )
        self._comments.append(comment)
        return comment

    async def list_recent(self, limit: int) -> list[StoredComment]:
        ordered = sorted(
            reversed(self._comments),
            key=lambda c: c.timestamp or _EPOCH,
            reverse=True,
        )
        return ordered[:limit]

    async def toggle_like(self, comment_id: str, user_id: str) -> StoredComment | None:
        for index, comment in enumerate(self._comments):
            if comment.id == comment_id:
                updated = replace(
                    comment, likes=tuple(toggled_likes(comment.likes, user_id))
                )
                self._comments[index] = updated
                return updated
        return None
