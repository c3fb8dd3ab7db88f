"""PostgreSQL-backed comment store."""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from riley.infra.id_utils import PREFIX_COMMENT, generate_id

from .base import CommentStore, StoreError
from .converters import row_to_comment, toggled_likes
from .models import Comment
from .records import StoredComment

logger = logging.getLogger(__name__)


class SqlCommentStore(CommentStore):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def add(
        self,
        *,
        text: str,
        user_id: str,
        user_email: str | None,
        user_name: str,
        timestamp: datetime,
    ) -> StoredComment:
        row = Comment(
            comment_id=generate_id(PREFIX_COMMENT),
            text=text,
            user_id=user_id,
            user_email=user_email,
            user_name=user_name,
            created_at=timestamp,
            likes=[],
            like_count=0,
        )
        try:
            async with self._session_factory() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to add comment: {exc}") from exc
        return row_to_comment(row)

    async def list_recent(self, limit: int) -> list[StoredComment]:
        stmt = (
            select(Comment)
            .order_by(Comment.created_at.desc().nulls_last(), Comment.id.desc())
            .limit(limit)
        )
        try:
            async with self._session_factory() as session:
                rows = (await session.scalars(stmt)).all()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to list comments: {exc}") from exc
        return [row_to_comment(row) for row in rows]

    async def toggle_like(self, comment_id: str, user_id: str) -> StoredComment | None:
        """Toggle under a row lock so concurrent likes cannot lose updates."""
        stmt = (
            select(Comment).where(Comment.comment_id == comment_id).with_for_update()
        )
        try:
            async with self._session_factory() as session:
                row = (await session.scalars(stmt)).first()
                if row is None:
                    return None
                likes = toggled_likes(row.likes or [], user_id)
                row.likes = likes
                row.like_count = max(0, len(likes))
                await session.commit()
        except SQLAlchemyError as exc:
            raise StoreError(f"Failed to toggle like: {exc}") from exc
        logger.debug("Comment %s now has %d likes", comment_id, len(likes))
        return row_to_comment(row)
