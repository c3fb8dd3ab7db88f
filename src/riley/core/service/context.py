"""Context assembly: the message list sent to the completion engine."""

from collections.abc import Sequence
from typing import Protocol

from langchain_core.messages import (
    AIMessage,
    BaseMessage,
    ChatMessage,
    HumanMessage,
    SystemMessage,
)

from riley.infra.db.constants import ROLE_ASSISTANT, ROLE_SYSTEM, ROLE_USER

DEFAULT_CONTEXT_WINDOW = 10

_MESSAGE_TYPES: dict[str, type[BaseMessage]] = {
    ROLE_SYSTEM: SystemMessage,
    ROLE_USER: HumanMessage,
    ROLE_ASSISTANT: AIMessage,
}


class HistoryTurn(Protocol):
    role: str
    content: str


def to_langchain_message(role: str, content: str) -> BaseMessage:
    """Map a wire role onto the matching LangChain message class."""
    message_cls = _MESSAGE_TYPES.get(role)
    if message_cls is None:
        return ChatMessage(role=role, content=content)
    return message_cls(content=content)


def assemble_context(
    system_prompt: str,
    history: Sequence[HistoryTurn],
    message: str,
    window: int = DEFAULT_CONTEXT_WINDOW,
) -> list[BaseMessage]:
    """Build ``[system] + last window turns of history + [user message]``.

    Only role and content of each history entry are used; the order of
    roles is taken as given.  The result never exceeds ``window + 2``
    messages and *history* is not modified.
    """
    recent = history[-window:] if window > 0 else []
    return [
        SystemMessage(content=system_prompt),
        *(to_langchain_message(turn.role, turn.content) for turn in recent),
        HumanMessage(content=message),
    ]
