"""Tests for the conversation and comment stores (in-memory backend)."""

from collections.abc import Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from riley.configs.config import AppConfig
from riley.infra.db import (
    InMemoryCommentStore,
    InMemoryConversationStore,
    SqlCommentStore,
    SqlConversationStore,
    StoredMessage,
    StoreError,
    chunked,
    create_stores,
)

T0 = datetime(2026, 1, 1, tzinfo=timezone.utc)


def _seeded(n: int, **kwargs: Any) -> "RecordingStore":
    store = RecordingStore(**kwargs)
    store.seed(
        "u1",
        [StoredMessage(f"m{i}", "user", f"msg {i}", T0 + timedelta(seconds=i)) for i in range(n)],
    )
    return store


class RecordingStore(InMemoryConversationStore):
    """Records the size of every delete batch; can fail chosen batches."""

    def __init__(self, fail_batches: Sequence[int] = (), **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.batch_sizes: list[int] = []
        self.fail_batches = set(fail_batches)

    async def _delete_batch(self, identity_id: str, keys: Sequence[Any]) -> None:
        index = len(self.batch_sizes)
        self.batch_sizes.append(len(keys))
        if index in self.fail_batches:
            raise RuntimeError(f"batch {index} rejected")
        await super()._delete_batch(identity_id, keys)


# =========================================================================
# chunked
# =========================================================================


class TestChunked:
    def test_splits_with_remainder(self):
        assert [len(c) for c in chunked(list(range(1200)), 500)] == [500, 500, 200]

    def test_empty(self):
        assert list(chunked([], 500)) == []

    def test_rejects_zero_size(self):
        with pytest.raises(ValueError):
            list(chunked([1], 0))


# =========================================================================
# Conversation store
# =========================================================================


class TestConversationStore:
    @pytest.mark.asyncio
    async def test_exchange_appends_user_then_assistant(self):
        store = InMemoryConversationStore()
        records = await store.append_exchange("u1", "Hello", "Hi there!", T0)
        assert [r.role for r in records] == ["user", "assistant"]
        assert records[0].timestamp == records[1].timestamp == T0
        assert all(r.id.startswith("msg_") for r in records)

    @pytest.mark.asyncio
    async def test_list_keeps_insertion_order_on_equal_timestamps(self):
        store = InMemoryConversationStore()
        for i in range(3):
            await store.append_exchange("u1", f"q{i}", f"a{i}", T0)
        messages = await store.list_messages("u1", 50)
        assert [m.content for m in messages] == ["q0", "a0", "q1", "a1", "q2", "a2"]

    @pytest.mark.asyncio
    async def test_list_is_oldest_first_and_limited(self):
        store = _seeded(60)
        messages = await store.list_messages("u1", 50)
        assert len(messages) == 50
        assert messages[0].content == "msg 0"
        assert messages[-1].content == "msg 49"

    @pytest.mark.asyncio
    async def test_identities_are_isolated(self):
        store = InMemoryConversationStore()
        await store.append_exchange("u1", "mine", "ok", T0)
        assert await store.list_messages("u2", 50) == []

    @pytest.mark.asyncio
    async def test_touch_profile_keeps_email_when_missing(self):
        store = InMemoryConversationStore()
        await store.touch_profile("u1", "u1@example.com", T0)
        later = T0 + timedelta(minutes=5)
        await store.touch_profile("u1", None, later)
        assert store.profiles["u1"] == {
            "email": "u1@example.com",
            "last_chat_activity": later,
        }


class TestClear:
    @pytest.mark.asyncio
    async def test_clear_1200_in_three_batches(self):
        store = _seeded(1200, clear_batch_size=500)
        removed = await store.clear("u1")
        assert removed == 1200
        assert sorted(store.batch_sizes) == [200, 500, 500]
        assert store.count("u1") == 0

    @pytest.mark.asyncio
    async def test_clear_is_idempotent(self):
        store = _seeded(1200, clear_batch_size=500)
        await store.clear("u1")
        store.batch_sizes.clear()
        assert await store.clear("u1") == 0
        assert store.batch_sizes == []
        assert store.count("u1") == 0

    @pytest.mark.asyncio
    async def test_failed_batch_raises_after_all_settle(self):
        store = _seeded(1200, clear_batch_size=500, fail_batches=[1])
        with pytest.raises(StoreError, match="1 of 3"):
            await store.clear("u1")
        # Every batch was attempted; only the failed one survives.
        assert len(store.batch_sizes) == 3
        assert store.count("u1") == store.batch_sizes[1]

    @pytest.mark.asyncio
    async def test_clear_leaves_other_identities(self):
        store = _seeded(10)
        await store.append_exchange("u2", "q", "a", T0)
        await store.clear("u1")
        assert store.count("u2") == 2

    def test_rejects_zero_batch_size(self):
        with pytest.raises(ValueError):
            InMemoryConversationStore(clear_batch_size=0)


# =========================================================================
# Comment store
# =========================================================================


class TestCommentStore:
    @pytest.mark.asyncio
    async def test_list_newest_first(self):
        store = InMemoryCommentStore()
        for i in range(3):
            await store.add(
                text=f"c{i}",
                user_id="u1",
                user_email=None,
                user_name="u1",
                timestamp=T0 + timedelta(minutes=i),
            )
        comments = await store.list_recent(2)
        assert [c.text for c in comments] == ["c2", "c1"]

    @pytest.mark.asyncio
    async def test_toggle_like_is_symmetric(self):
        store = InMemoryCommentStore()
        comment = await store.add(
            text="nice", user_id="u1", user_email=None, user_name="u1", timestamp=T0
        )
        liked = await store.toggle_like(comment.id, "u2")
        assert liked.likes == ("u2",)
        assert liked.like_count == 1
        unliked = await store.toggle_like(comment.id, "u2")
        assert unliked.likes == ()
        assert unliked.like_count == 0

    @pytest.mark.asyncio
    async def test_toggle_unknown_comment(self):
        store = InMemoryCommentStore()
        assert await store.toggle_like("cmt_missing", "u1") is None


# =========================================================================
# Backend selection
# =========================================================================


class TestCreateStores:
    def test_memory_backend(self):
        config = AppConfig()
        config.third_party.store_backend = "memory"
        config.chat.clear_batch_size = 7
        conversations, comments = create_stores(config)
        assert isinstance(conversations, InMemoryConversationStore)
        assert conversations.clear_batch_size == 7
        assert isinstance(comments, InMemoryCommentStore)

    def test_postgres_needs_session_factory(self):
        config = AppConfig()
        config.third_party.store_backend = "postgres"
        with pytest.raises(RuntimeError):
            create_stores(config)

    def test_postgres_backend(self):
        config = AppConfig()
        config.third_party.store_backend = "postgres"
        conversations, comments = create_stores(config, session_factory=object())
        assert isinstance(conversations, SqlConversationStore)
        assert isinstance(comments, SqlCommentStore)
