"""Store interfaces and the shared store exception."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence
from datetime import datetime
from typing import Any, TypeVar

from .constants import DEFAULT_CLEAR_BATCH_SIZE
from .records import StoredComment, StoredMessage

logger = logging.getLogger(__name__)

T = TypeVar("T")


class StoreError(Exception):
    """Raised when the backing store rejects or fails an operation."""


def chunked(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of *items* holding at most *size* elements."""
    if size < 1:
        raise ValueError("size must be >= 1")
    for start in range(0, len(items), size):
        yield items[start : start + size]


# ---------------------------------------------------------------------------
# Conversation store
# ---------------------------------------------------------------------------


class ConversationStore(ABC):
    """Per-identity append-only message log plus a profile record.

    Subclasses implement the primitive reads/writes; ``clear`` is shared
    and deletes in bounded batches of ``clear_batch_size``.
    """

    def __init__(self, clear_batch_size: int = DEFAULT_CLEAR_BATCH_SIZE) -> None:
        if clear_batch_size < 1:
            raise ValueError("clear_batch_size must be >= 1")
        self.clear_batch_size = clear_batch_size

    @abstractmethod
    async def append_exchange(
        self,
        identity_id: str,
        user_content: str,
        assistant_content: str,
        timestamp: datetime,
    ) -> list[StoredMessage]:
        """Append the user turn, then the assistant turn, both at *timestamp*."""

    @abstractmethod
    async def list_messages(self, identity_id: str, limit: int) -> list[StoredMessage]:
        """Return up to *limit* messages, oldest first."""

    @abstractmethod
    async def touch_profile(
        self, identity_id: str, email: str | None, timestamp: datetime
    ) -> None:
        """Merge ``last_chat_activity`` (and email, when known) into the profile."""

    @abstractmethod
    async def _list_message_keys(self, identity_id: str) -> list[Any]:
        """Return the backend keys of every message owned by *identity_id*."""

    @abstractmethod
    async def _delete_batch(self, identity_id: str, keys: Sequence[Any]) -> None:
        """Delete one batch of messages and commit it."""

    async def clear(self, identity_id: str) -> int:
        """Delete every message of *identity_id*; return how many were removed.

        Batches are committed concurrently and all of them settle before
        the outcome is decided.  Any failed batch raises ``StoreError``;
        batches that already committed stay deleted.
        """
        keys = await self._list_message_keys(identity_id)
        batches = list(chunked(keys, self.clear_batch_size))
        if not batches:
            return 0

        results = await asyncio.gather(
            *(self._delete_batch(identity_id, batch) for batch in batches),
            return_exceptions=True,
        )
        failures = [r for r in results if isinstance(r, BaseException)]
        if failures:
            logger.error(
                "%d of %d delete batches failed for %s",
                len(failures),
                len(batches),
                identity_id,
            )
            raise StoreError(
                f"{len(failures)} of {len(batches)} delete batches failed"
            ) from failures[0]

        logger.info(
            "Cleared %d messages for %s in %d batches",
            len(keys),
            identity_id,
            len(batches),
        )
        return len(keys)


# ---------------------------------------------------------------------------
# Comment store
# ---------------------------------------------------------------------------


class CommentStore(ABC):
    """Flat collection of comments with per-user likes."""

    @abstractmethod
    async def add(
        self,
        *,
        text: str,
        user_id: str,
        user_email: str | None,
        user_name: str,
        timestamp: datetime,
    ) -> StoredComment:
        """Persist a new comment with no likes."""

    @abstractmethod
    async def list_recent(self, limit: int) -> list[StoredComment]:
        """Return up to *limit* comments, newest first."""

    @abstractmethod
    async def toggle_like(self, comment_id: str, user_id: str) -> StoredComment | None:
        """Add or remove *user_id* from the comment's likes atomically.

        Returns ``None`` when the comment does not exist.
        """
