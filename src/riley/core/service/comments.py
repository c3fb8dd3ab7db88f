"""Comment board service."""

import logging

from riley.configs.system import CommentsConfig
from riley.infra.db import CommentStore, StoredComment
from riley.infra.identity import Identity
from riley.infra.time_utils import utc_now

from .metrics import observe_operation
from .models import (
    MSG_COMMENT_NOT_FOUND,
    MSG_COMMENT_REQUIRED,
    MSG_COMMENT_TOO_LONG,
    OP_ADD_COMMENT,
    OP_LIST_COMMENTS,
    OP_TOGGLE_LIKE,
    BadRequest,
    NotFound,
)

logger = logging.getLogger(__name__)


class CommentService:
    def __init__(self, store: CommentStore, config: CommentsConfig) -> None:
        self.store = store
        self.list_limit = config.list_limit
        self.max_length = config.max_length

    @observe_operation(OP_LIST_COMMENTS)
    async def list_recent(self) -> list[StoredComment]:
        return await self.store.list_recent(self.list_limit)

    @observe_operation(OP_ADD_COMMENT)
    async def add(self, identity: Identity, text: str) -> StoredComment:
        """Post *text* as *identity*; the author name is derived from the identity."""
        body = (text or "").strip()
        if not body:
            raise BadRequest(MSG_COMMENT_REQUIRED)
        if len(body) > self.max_length:
            raise BadRequest(MSG_COMMENT_TOO_LONG.format(max_length=self.max_length))

        comment = await self.store.add(
            text=body,
            user_id=identity.uid,
            user_email=identity.email,
            user_name=identity.display_name,
            timestamp=utc_now(),
        )
        logger.info("Comment %s added by %s", comment.id, identity.uid)
        return comment

    @observe_operation(OP_TOGGLE_LIKE)
    async def toggle_like(self, identity: Identity, comment_id: str) -> StoredComment:
        comment = await self.store.toggle_like(comment_id, identity.uid)
        if comment is None:
            raise NotFound(MSG_COMMENT_NOT_FOUND)
        return comment
