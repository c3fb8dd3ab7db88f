"""ORM row -> record converters, kept in one place."""

from .models import ChatMessage, Comment
from .records import StoredComment, StoredMessage


def row_to_message(row: ChatMessage) -> StoredMessage:
    return StoredMessage(
        id=row.message_id,
        role=row.role,
        content=row.content or "",
        timestamp=row.created_at,
    )


def row_to_comment(row: Comment) -> StoredComment:
    return StoredComment(
        id=row.comment_id,
        text=row.text,
        user_id=row.user_id,
        user_name=row.user_name,
        user_email=row.user_email,
        timestamp=row.created_at,
        likes=tuple(row.likes or ()),
    )


def toggled_likes(likes: list[str] | tuple[str, ...], user_id: str) -> list[str]:
    """Return *likes* with *user_id* added, or removed if already present."""
    if user_id in likes:
        return [uid for uid in likes if uid != user_id]
    return [*likes, user_id]
