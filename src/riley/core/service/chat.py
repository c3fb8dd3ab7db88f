"""Chat session service: send message, fetch history, clear history.

Callers are already authenticated; every method takes the verified
``Identity`` and touches only that identity's conversation.
"""

import logging
import math
import time
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime

from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage

from riley.configs.config import AppConfig
from riley.infra.db import ConversationStore, StoredMessage
from riley.infra.identity import Identity
from riley.infra.telemetry import (
    ATTR_CHAT_CONTEXT_SIZE,
    ATTR_CHAT_MODEL,
    ATTR_HISTORY_BATCH_COUNT,
    ATTR_HISTORY_MESSAGE_COUNT,
    SPAN_CHAT_COMPLETION,
    SPAN_HISTORY_CLEAR,
    tracer,
)
from riley.infra.time_utils import utc_now

from .context import HistoryTurn, assemble_context
from .metrics import (
    COMPLETION_FAILURES_TOTAL,
    COMPLETION_LATENCY_SECONDS,
    HISTORY_MESSAGES_CLEARED_TOTAL,
    observe_operation,
)
from .models import (
    MSG_COMPLETION_FAILED,
    MSG_MESSAGE_REQUIRED,
    OP_CLEAR_HISTORY,
    OP_FETCH_HISTORY,
    OP_SEND_MESSAGE,
    BadRequest,
    UpstreamError,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ChatReply:
    response: str
    timestamp: datetime


def _reply_text(message: BaseMessage) -> str:
    """Plain text of a model reply, joining text blocks when content is a list."""
    content = message.content
    if isinstance(content, str):
        return content
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class ChatSessionService:
    """One assistant conversation per identity, persisted in a store."""

    def __init__(
        self,
        llm: BaseChatModel,
        store: ConversationStore,
        config: AppConfig,
    ) -> None:
        self.llm = llm
        self.store = store
        self.context_window = config.chat.context_window
        self.history_limit = config.chat.history_limit
        self.model_name = config.llm.model_name
        self.system_prompt = config.persona.build_system_prompt(
            config.prompt.system_prompt
        )

    async def _complete(self, messages: list[BaseMessage]) -> str:
        with tracer.start_as_current_span(SPAN_CHAT_COMPLETION) as span:
            span.set_attribute(ATTR_CHAT_CONTEXT_SIZE, len(messages))
            span.set_attribute(ATTR_CHAT_MODEL, self.model_name)
            start = time.monotonic()
            try:
                reply = await self.llm.ainvoke(messages)
            except Exception as exc:
                COMPLETION_FAILURES_TOTAL.labels(model_name=self.model_name).inc()
                logger.error("Completion call failed: %s", exc, exc_info=True)
                raise UpstreamError(MSG_COMPLETION_FAILED, detail=str(exc)) from exc
            finally:
                COMPLETION_LATENCY_SECONDS.labels(model_name=self.model_name).observe(
                    time.monotonic() - start
                )

        text = _reply_text(reply).strip()
        if not text:
            COMPLETION_FAILURES_TOTAL.labels(model_name=self.model_name).inc()
            logger.error("Completion returned empty content")
            raise UpstreamError(MSG_COMPLETION_FAILED, detail="empty completion")
        return text

    @observe_operation(OP_SEND_MESSAGE)
    async def send_message(
        self,
        identity: Identity,
        message: str,
        history: Sequence[HistoryTurn] = (),
    ) -> ChatReply:
        """Answer *message* in the context of the client-supplied *history*.

        The exchange is persisted only after the completion succeeded:
        user turn first, then the assistant turn, both stamped with the
        same server time.  The profile's ``last_chat_activity`` follows.
        """
        if not (message or "").strip():
            raise BadRequest(MSG_MESSAGE_REQUIRED)

        context = assemble_context(
            self.system_prompt, history, message, window=self.context_window
        )
        response = await self._complete(context)

        timestamp = utc_now()
        await self.store.append_exchange(identity.uid, message, response, timestamp)
        await self.store.touch_profile(identity.uid, identity.email, timestamp)
        logger.info(
            "Stored exchange for %s (%d context messages)", identity.uid, len(context)
        )
        return ChatReply(response=response, timestamp=timestamp)

    @observe_operation(OP_FETCH_HISTORY)
    async def fetch_history(self, identity: Identity) -> list[StoredMessage]:
        return await self.store.list_messages(identity.uid, self.history_limit)

    @observe_operation(OP_CLEAR_HISTORY)
    async def clear_history(self, identity: Identity) -> int:
        with tracer.start_as_current_span(SPAN_HISTORY_CLEAR) as span:
            removed = await self.store.clear(identity.uid)
            span.set_attribute(ATTR_HISTORY_MESSAGE_COUNT, removed)
            span.set_attribute(
                ATTR_HISTORY_BATCH_COUNT,
                math.ceil(removed / self.store.clear_batch_size),
            )
        HISTORY_MESSAGES_CLEARED_TOTAL.inc(removed)
        return removed
