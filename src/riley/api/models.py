"""Pydantic models for the chat and comment APIs.

Wire fields are camelCase (``chatHistory``, ``likeCount``); Python code
uses snake_case and either spelling is accepted on input.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from riley.infra.db import Role, StoredComment, StoredMessage
from riley.infra.time_utils import to_iso


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Chat
# ---------------------------------------------------------------------------


class HistoryMessage(_WireModel):
    """A prior turn echoed back by the client."""

    role: Role = Field(description="Sender role")
    content: str = Field(description="Message content")


class SendMessageRequest(_WireModel):
    message: str = Field(default="", description="New user message")
    chat_history: list[HistoryMessage] = Field(
        default_factory=list,
        description="Previous conversation turns used as context",
    )


class SendMessageResponse(_WireModel):
    success: bool = True
    response: str = Field(description="Assistant reply")
    timestamp: str = Field(description="ISO-8601 server time of the exchange")


class MessageOut(_WireModel):
    id: str
    role: str
    content: str
    timestamp: str

    @classmethod
    def from_record(cls, record: StoredMessage) -> "MessageOut":
        return cls(
            id=record.id,
            role=record.role,
            content=record.content,
            timestamp=to_iso(record.timestamp),
        )


class HistoryResponse(_WireModel):
    success: bool = True
    messages: list[MessageOut] = Field(default_factory=list)


class ClearHistoryResponse(_WireModel):
    success: bool = True
    message: str


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


class CommentRequest(_WireModel):
    text: str = Field(default="", description="Comment body")


class CommentOut(_WireModel):
    id: str
    text: str
    user_id: str
    user_name: str
    user_email: str | None = None
    timestamp: str
    likes: list[str] = Field(default_factory=list)
    like_count: int = 0

    @classmethod
    def from_record(cls, record: StoredComment) -> "CommentOut":
        return cls(
            id=record.id,
            text=record.text,
            user_id=record.user_id,
            user_name=record.user_name,
            user_email=record.user_email,
            timestamp=to_iso(record.timestamp),
            likes=list(record.likes),
            like_count=record.like_count,
        )


class CommentResponse(_WireModel):
    success: bool = True
    comment: CommentOut


class CommentListResponse(_WireModel):
    success: bool = True
    comments: list[CommentOut] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class ErrorResponse(BaseModel):
    """Body of every non-2xx response."""

    error: str = Field(description="Human-readable error message")
    code: str = Field(description="Machine-readable error code")
    details: str | None = Field(default=None, description="Extra diagnostic text")
