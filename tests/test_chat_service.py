"""Tests for ChatSessionService (no HTTP layer)."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

from riley.configs.config import AppConfig
from riley.core.service.chat import ChatSessionService
from riley.core.service.models import BadRequest, UpstreamError
from riley.infra.db import ConversationStore, InMemoryConversationStore, StoredMessage
from riley.infra.identity import Identity

U1 = Identity(uid="u1", email="u1@example.com")


def _service(llm, store=None) -> ChatSessionService:
    return ChatSessionService(llm, store or InMemoryConversationStore(), AppConfig())


class TestSendMessage:
    @pytest.mark.asyncio
    async def test_hello_scenario(self, recording_llm):
        store = InMemoryConversationStore()
        service = _service(recording_llm, store)

        reply = await service.send_message(U1, "Hello", [])

        assert reply.response == "Hi there!"
        (context,), _ = recording_llm.ainvoke.call_args
        assert len(context) == 2
        assert isinstance(context[0], SystemMessage)
        assert "Riley" in context[0].content
        assert isinstance(context[1], HumanMessage)
        assert context[1].content == "Hello"

        stored = await store.list_messages("u1", 50)
        assert [(m.role, m.content) for m in stored] == [
            ("user", "Hello"),
            ("assistant", "Hi there!"),
        ]
        assert stored[0].timestamp == stored[1].timestamp == reply.timestamp
        assert store.profiles["u1"]["last_chat_activity"] == reply.timestamp
        assert store.profiles["u1"]["email"] == "u1@example.com"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    async def test_blank_message_rejected(self, recording_llm, text):
        store = InMemoryConversationStore()
        with pytest.raises(BadRequest):
            await _service(recording_llm, store).send_message(U1, text, [])
        recording_llm.ainvoke.assert_not_called()
        assert store.count("u1") == 0

    @pytest.mark.asyncio
    async def test_message_kept_verbatim(self, recording_llm):
        store = InMemoryConversationStore()
        await _service(recording_llm, store).send_message(U1, "  Hello  ", [])

        (context,), _ = recording_llm.ainvoke.call_args
        assert context[-1].content == "  Hello  "
        stored = await store.list_messages("u1", 50)
        assert stored[0].content == "  Hello  "

    @pytest.mark.asyncio
    async def test_empty_completion_persists_nothing(self, recording_llm):
        recording_llm.ainvoke.return_value = AIMessage(content="  ")
        store = InMemoryConversationStore()
        with pytest.raises(UpstreamError):
            await _service(recording_llm, store).send_message(U1, "Hello", [])
        assert store.count("u1") == 0
        assert "u1" not in store.profiles

    @pytest.mark.asyncio
    async def test_engine_failure_persists_nothing(self, recording_llm):
        recording_llm.ainvoke.side_effect = ConnectionError("unreachable")
        store = InMemoryConversationStore()
        with pytest.raises(UpstreamError) as exc_info:
            await _service(recording_llm, store).send_message(U1, "Hello", [])
        assert exc_info.value.detail == "unreachable"
        assert store.count("u1") == 0

    @pytest.mark.asyncio
    async def test_context_uses_client_history_not_store(self, recording_llm):
        store = MagicMock(spec=ConversationStore)
        history = [StoredMessage(str(i), "user", f"h{i}") for i in range(25)]

        await _service(recording_llm, store).send_message(U1, "next", history)

        (context,), _ = recording_llm.ainvoke.call_args
        assert len(context) == 12
        assert context[1].content == "h15"
        store.list_messages.assert_not_called()
        store.append_exchange.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_list_content_blocks_are_joined(self, recording_llm):
        recording_llm.ainvoke.return_value = AIMessage(
            content=[{"type": "text", "text": "Hi "}, {"type": "text", "text": "there"}]
        )
        reply = await _service(recording_llm).send_message(U1, "Hello", [])
        assert reply.response == "Hi there"


class TestHistory:
    @pytest.mark.asyncio
    async def test_n_sends_give_2n_messages(self, llm):
        service = _service(llm)
        for i in range(4):
            await service.send_message(U1, f"q{i}", [])
        messages = await service.fetch_history(U1)
        assert len(messages) == 8
        assert [m.role for m in messages] == ["user", "assistant"] * 4
        assert [m.content for m in messages[::2]] == ["q0", "q1", "q2", "q3"]

    @pytest.mark.asyncio
    async def test_clear_then_fetch_empty(self, llm):
        service = _service(llm)
        await service.send_message(U1, "Hello", [])
        assert await service.clear_history(U1) == 2
        assert await service.fetch_history(U1) == []
        assert await service.clear_history(U1) == 0

    @pytest.mark.asyncio
    async def test_fetch_limit_from_config(self, llm):
        config = AppConfig()
        config.chat.history_limit = 3
        service = ChatSessionService(llm, InMemoryConversationStore(), config)
        for i in range(3):
            await service.send_message(U1, f"q{i}", [])
        assert len(await service.fetch_history(U1)) == 3


def test_recording_llm_is_async(recording_llm):
    assert isinstance(recording_llm.ainvoke, AsyncMock)
