"""PostgreSQL-backed conversation store.

Reads and writes the ``chat_messages`` and ``user_profiles`` tables.
Every public call opens its own session so a failure never leaks a
half-finished transaction into the next request.
"""

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from riley.infra.id_utils import PREFIX_MESSAGE, generate_id
from riley.infra.telemetry import (
    ATTR_HISTORY_MESSAGE_COUNT,
    SPAN_HISTORY_LOAD,
    tracer,
)

from .base import ConversationStore, StoreError
from .constants import DEFAULT_CLEAR_BATCH_SIZE, ROLE_ASSISTANT, ROLE_USER
from .converters import row_to_message
from .models import ChatMessage, UserProfile
from .records import StoredMessage

logger = logging.getLogger(__name__)


class SqlConversationStore(ConversationStore):
    """Conversation store over an ``async_sessionmaker``."""

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        clear_batch_size: int = DEFAULT_CLEAR_BATCH_SIZE,
    ) -> None:
        super().__init__(clear_batch_size)
        self._session_factory = session_factory

    async def append_exchange(
        self,
        identity_id: str,
        user_content: str,
        assistant_content: str,
        timestamp: datetime,
    ) -> list[StoredMessage]:
        rows = [
            ChatMessage(
                message_id=generate_id(PREFIX_MESSAGE),
                identity_id=identity_id,
                role=role,
                content=content,
                created_at=timestamp,
            )
            for role, content in (
                (ROLE_USER, user_content),
                (ROLE_ASSISTANT, assistant_content),
            )
        ]
        try:
            async with self._session_factory() as session:
                # Flush one at a time so the sequence ids follow turn order.
                for row in rows:
                    session.add(row)
                    await session.flush()
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to append exchange: {exc}") from exc
        return [row_to_message(row) for row in rows]

    async def list_messages(self, identity_id: str, limit: int) -> list[StoredMessage]:
        stmt = (
            select(ChatMessage)
            .where(ChatMessage.identity_id == identity_id)
            .order_by(ChatMessage.created_at.asc().nulls_first(), ChatMessage.id.asc())
            .limit(limit)
        )
        with tracer.start_as_current_span(SPAN_HISTORY_LOAD) as span:
            try:
                async with self._session_factory() as session:
                    rows = (await session.scalars(stmt)).all()
            except SQLAlchemyError as exc:
                raise StoreError(f"Failed to load history: {exc}") from exc
            span.set_attribute(ATTR_HISTORY_MESSAGE_COUNT, len(rows))
        logger.debug("Loaded %d messages for %s", len(rows), identity_id)
        return [row_to_message(row) for row in rows]

    async def touch_profile(
        self, identity_id: str, email: str | None, timestamp: datetime
    ) -> None:
        stmt = insert(UserProfile).values(
            identity_id=identity_id,
            email=email,
            last_chat_activity=timestamp,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[UserProfile.identity_id],
            set_={
                "last_chat_activity": stmt.excluded.last_chat_activity,
                "email": func.coalesce(stmt.excluded.email, UserProfile.email),
            },
        )
        try:
            async with self._session_factory() as session:
                await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to update profile: {exc}") from exc

    async def _list_message_keys(self, identity_id: str) -> list[Any]:
        stmt = select(ChatMessage.id).where(ChatMessage.identity_id == identity_id)
        try:
            async with self._session_factory() as session:
                return list((await session.scalars(stmt)).all())
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to list messages: {exc}") from exc

    async def _delete_batch(self, identity_id: str, keys: Sequence[Any]) -> None:
        stmt = delete(ChatMessage).where(
            ChatMessage.identity_id == identity_id,
            ChatMessage.id.in_(list(keys)),
        )
        async with self._session_factory() as session:
            await session.execute(stmt)
            await session.commit()
