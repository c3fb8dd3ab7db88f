"""Plain records returned by the stores, independent of the backend."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class StoredMessage:
    """A persisted conversation turn."""

    id: str
    role: str
    content: str
    timestamp: datetime | None = None


@dataclass(frozen=True)
class StoredComment:
    """A persisted comment with its like set."""

    id: str
    text: str
    user_id: str
    user_name: str
    user_email: str | None = None
    timestamp: datetime | None = None
    likes: tuple[str, ...] = field(default_factory=tuple)

    @property
    def like_count(self) -> int:
        return len(self.likes)
