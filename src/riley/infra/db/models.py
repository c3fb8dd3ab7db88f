"""SQLAlchemy ORM models.

All tables are managed by Alembic migrations.  The ``Base.metadata``
naming convention keeps constraint names deterministic across
environments so ``--autogenerate`` diffs stay stable.
"""

from datetime import datetime

from sqlalchemy import (
    JSON,
    BigInteger,
    CheckConstraint,
    DateTime,
    Index,
    Integer,
    String,
    Text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from .constants import TABLE_CHAT_MESSAGES, TABLE_COMMENTS, TABLE_USER_PROFILES

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Shared declarative base with explicit naming convention."""


Base.metadata.naming_convention = NAMING_CONVENTION

# JSONB on PostgreSQL, plain JSON elsewhere.
JSONType = JSON().with_variant(JSONB(), "postgresql")


# ---------------------------------------------------------------------------
# Conversation log
# ---------------------------------------------------------------------------


class ChatMessage(Base):
    """One turn of an identity's conversation.

    Rows are append-only.  ``id`` is the insertion sequence: the user and
    assistant turns of one exchange share ``created_at``, so readers order
    by ``(created_at, id)``.
    """

    __tablename__ = TABLE_CHAT_MESSAGES

    id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=True,
    )
    message_id: Mapped[str] = mapped_column(
        String,
        unique=True,
        nullable=False,
    )
    identity_id: Mapped[str] = mapped_column(
        String,
        nullable=False,
    )
    role: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    __table_args__ = (
        Index(
            "ix_chat_messages_identity_id_created_at",
            "identity_id",
            "created_at",
            "id",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<ChatMessage(id={self.id}, identity_id={self.identity_id!r}, "
            f"role={self.role!r})>"
        )


class UserProfile(Base):
    """Per-identity profile, merged on every exchange."""

    __tablename__ = TABLE_USER_PROFILES

    identity_id: Mapped[str] = mapped_column(String, primary_key=True)
    email: Mapped[str | None] = mapped_column(String, nullable=True)
    last_chat_activity: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<UserProfile(identity_id={self.identity_id!r})>"


# ---------------------------------------------------------------------------
# Comment board
# ---------------------------------------------------------------------------


class Comment(Base):
    """A public comment; ``likes`` holds the uids that liked it."""

    __tablename__ = TABLE_COMMENTS

    id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=True,
    )
    comment_id: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False)
    user_id: Mapped[str] = mapped_column(String, nullable=False)
    user_email: Mapped[str | None] = mapped_column(String, nullable=True)
    user_name: Mapped[str] = mapped_column(String, nullable=False)
    created_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
    )
    likes: Mapped[list[str]] = mapped_column(JSONType, nullable=False, default=list)
    like_count: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    __table_args__ = (
        Index("ix_comments_created_at", "created_at"),
        CheckConstraint("like_count >= 0", name="like_count_non_negative"),
    )

    def __repr__(self) -> str:
        return f"<Comment(id={self.id}, comment_id={self.comment_id!r})>"
