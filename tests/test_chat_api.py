"""HTTP tests for the chat endpoints."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from langchain_core.language_models import FakeListChatModel

from riley.core.llm import get_llm
from riley.infra.db import (
    ConversationStore,
    StoredMessage,
    StoreError,
    get_conversation_store,
)

CHAT = "/api/v1/chat"
HISTORY = "/api/v1/chat/history"
CLEAR = "/api/v1/chat/history/clear"

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _auth(token: str = "token-u1") -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def untouchable_store(app) -> MagicMock:
    """A store that must never be reached."""
    store = MagicMock(spec=ConversationStore)
    app.dependency_overrides[get_conversation_store] = lambda: store
    return store


# =========================================================================
# Authorization
# =========================================================================


class TestAuthorization:
    @pytest.mark.parametrize(
        ("method", "path"),
        [("post", CHAT), ("get", HISTORY), ("post", CLEAR)],
    )
    def test_missing_header(self, client, untouchable_store, method, path):
        kwargs = {"json": {"message": "Hello"}} if path == CHAT else {}
        response = getattr(client, method)(path, **kwargs)

        assert response.status_code == 401
        assert response.json() == {
            "error": "Unauthorized: No valid token provided",
            "code": "UNAUTHORIZED",
        }
        assert untouchable_store.method_calls == []

    def test_basic_scheme_rejected(self, client, untouchable_store):
        response = client.get(HISTORY, headers={"Authorization": "Basic dXNlcjpwYXNz"})
        assert response.status_code == 401
        assert response.json()["error"] == "Unauthorized: No valid token provided"
        assert untouchable_store.method_calls == []

    def test_empty_bearer_rejected(self, client, untouchable_store):
        response = client.get(HISTORY, headers={"Authorization": "Bearer "})
        assert response.status_code == 401
        assert untouchable_store.method_calls == []

    def test_invalid_token(self, client, untouchable_store):
        response = client.post(CHAT, json={"message": "Hello"}, headers=_auth("forged"))
        assert response.status_code == 401
        assert response.json() == {"error": "Invalid token", "code": "UNAUTHORIZED"}
        assert untouchable_store.method_calls == []


# =========================================================================
# Send message
# =========================================================================


class TestSendMessage:
    def test_hello(self, client, conversation_store):
        response = client.post(
            CHAT, json={"message": "Hello", "chatHistory": []}, headers=_auth()
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["response"] == "Hi there!"
        assert datetime.fromisoformat(body["timestamp"]).tzinfo is not None
        assert conversation_store.count("u1") == 2

    @pytest.mark.parametrize("message", ["", "   "])
    def test_blank_message(self, client, conversation_store, message):
        response = client.post(CHAT, json={"message": message}, headers=_auth())
        assert response.status_code == 400
        assert response.json() == {"error": "Message is required", "code": "BAD_REQUEST"}
        assert conversation_store.count("u1") == 0

    def test_missing_message_field(self, client, conversation_store):
        response = client.post(CHAT, json={}, headers=_auth())
        assert response.status_code == 400
        assert response.json()["error"] == "Message is required"

    def test_unknown_history_role(self, client):
        response = client.post(
            CHAT,
            json={"message": "Hi", "chatHistory": [{"role": "robot", "content": "x"}]},
            headers=_auth(),
        )
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "BAD_REQUEST"
        assert "chatHistory" in body["details"]

    def test_empty_completion(self, app, client, conversation_store):
        app.dependency_overrides[get_llm] = lambda: FakeListChatModel(responses=[""])
        response = client.post(CHAT, json={"message": "Hello"}, headers=_auth())
        assert response.status_code == 502
        assert response.json()["code"] == "UPSTREAM_ERROR"
        assert conversation_store.count("u1") == 0

    def test_engine_unreachable(self, app, client, conversation_store, recording_llm):
        recording_llm.ainvoke.side_effect = TimeoutError("engine timed out")
        app.dependency_overrides[get_llm] = lambda: recording_llm
        response = client.post(CHAT, json={"message": "Hello"}, headers=_auth())
        assert response.status_code == 502
        assert response.json()["details"] == "engine timed out"
        assert conversation_store.count("u1") == 0

    def test_client_history_becomes_context(self, app, client, recording_llm):
        app.dependency_overrides[get_llm] = lambda: recording_llm
        history = [
            {"role": "user" if i % 2 == 0 else "assistant", "content": f"t{i}"}
            for i in range(14)
        ]
        response = client.post(
            CHAT,
            json={"message": "latest", "chatHistory": history},
            headers=_auth(),
        )
        assert response.status_code == 200
        (context,), _ = recording_llm.ainvoke.call_args
        assert len(context) == 12
        assert [m.content for m in context[1:-1]] == [f"t{i}" for i in range(4, 14)]
        assert context[-1].content == "latest"

    def test_store_failure_is_internal_error(self, app, client):
        store = MagicMock(spec=ConversationStore)
        store.append_exchange = AsyncMock(side_effect=StoreError("write rejected"))
        app.dependency_overrides[get_conversation_store] = lambda: store

        response = client.post(CHAT, json={"message": "Hello"}, headers=_auth())
        assert response.status_code == 500
        assert response.json() == {
            "error": "Internal server error",
            "code": "INTERNAL_ERROR",
            "details": "write rejected",
        }


# =========================================================================
# History
# =========================================================================


class TestHistory:
    def test_sends_accumulate_in_order(self, client):
        for i in range(3):
            client.post(CHAT, json={"message": f"q{i}"}, headers=_auth())

        response = client.get(HISTORY, headers=_auth())
        assert response.status_code == 200
        messages = response.json()["messages"]
        assert len(messages) == 6
        assert [m["role"] for m in messages] == ["user", "assistant"] * 3
        assert [m["content"] for m in messages[::2]] == ["q0", "q1", "q2"]
        assert {"id", "role", "content", "timestamp"} <= messages[0].keys()

    def test_empty_history(self, client):
        response = client.get(HISTORY, headers=_auth())
        assert response.json() == {"success": True, "messages": []}

    def test_limited_to_fifty_oldest(self, client, conversation_store):
        conversation_store.seed(
            "u1",
            [
                StoredMessage(f"m{i}", "user", f"msg {i}", T0 + timedelta(seconds=i))
                for i in range(60)
            ],
        )
        messages = client.get(HISTORY, headers=_auth()).json()["messages"]
        assert len(messages) == 50
        assert messages[0]["content"] == "msg 0"

    def test_missing_timestamp_is_filled(self, client, conversation_store):
        conversation_store.seed("u1", [StoredMessage("m0", "user", "old")])
        (message,) = client.get(HISTORY, headers=_auth()).json()["messages"]
        assert datetime.fromisoformat(message["timestamp"]).tzinfo is not None

    def test_histories_are_private(self, client):
        client.post(CHAT, json={"message": "secret"}, headers=_auth("token-u1"))
        response = client.get(HISTORY, headers=_auth("token-u2"))
        assert response.json()["messages"] == []


# =========================================================================
# Clear
# =========================================================================


class TestClearHistory:
    def test_clear(self, client, conversation_store):
        client.post(CHAT, json={"message": "Hello"}, headers=_auth())

        response = client.post(CLEAR, headers=_auth())
        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "message": "Chat history cleared successfully",
        }
        assert conversation_store.count("u1") == 0

    def test_clear_empty_is_idempotent(self, client):
        for _ in range(2):
            response = client.post(CLEAR, headers=_auth())
            assert response.status_code == 200
            assert response.json()["success"] is True

    def test_clear_large_history(self, client, conversation_store):
        conversation_store.seed(
            "u1", [StoredMessage(f"m{i}", "user", "x", T0) for i in range(1200)]
        )
        assert client.post(CLEAR, headers=_auth()).status_code == 200
        assert conversation_store.count("u1") == 0

    def test_store_failure(self, app, client):
        store = MagicMock(spec=ConversationStore)
        store.clear_batch_size = 500
        store.clear = AsyncMock(side_effect=StoreError("1 of 3 delete batches failed"))
        app.dependency_overrides[get_conversation_store] = lambda: store

        response = client.post(CLEAR, headers=_auth())
        assert response.status_code == 500
        assert response.json()["code"] == "INTERNAL_ERROR"
        assert response.json()["error"] == "Internal server error"


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"ok": True}
