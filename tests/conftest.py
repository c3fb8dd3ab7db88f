"""Shared fixtures: in-memory stores, fake completion engine, API client."""

from collections.abc import Iterator
from unittest.mock import AsyncMock

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from langchain_core.language_models import FakeListChatModel
from langchain_core.messages import AIMessage

from riley.app import app as riley_app
from riley.core.llm import get_llm
from riley.infra.db import (
    InMemoryCommentStore,
    InMemoryConversationStore,
    get_comment_store,
    get_conversation_store,
)
from riley.infra.identity import StaticTokenVerifier, get_identity_verifier

TOKENS = {"token-u1": "u1", "token-u2": "u2"}


@pytest.fixture
def conversation_store() -> InMemoryConversationStore:
    return InMemoryConversationStore(clear_batch_size=500)


@pytest.fixture
def comment_store() -> InMemoryCommentStore:
    return InMemoryCommentStore()


@pytest.fixture
def llm() -> FakeListChatModel:
    """Always answers ``Hi there!``."""
    return FakeListChatModel(responses=["Hi there!"])


@pytest.fixture
def recording_llm() -> AsyncMock:
    """Stand-in whose ``ainvoke`` records the context it was given."""
    fake = AsyncMock()
    fake.ainvoke.return_value = AIMessage(content="Hi there!")
    return fake


@pytest.fixture
def app(conversation_store, comment_store, llm) -> Iterator[FastAPI]:
    riley_app.dependency_overrides[get_conversation_store] = lambda: conversation_store
    riley_app.dependency_overrides[get_comment_store] = lambda: comment_store
    riley_app.dependency_overrides[get_llm] = lambda: llm
    riley_app.dependency_overrides[get_identity_verifier] = lambda: StaticTokenVerifier(
        TOKENS
    )
    yield riley_app
    riley_app.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    # No ``with``: the lifespan (database engine) is not started.
    return TestClient(app)
