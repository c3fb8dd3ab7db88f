"""Shared constants for the persistence layer.

Imported by models, stores and converters so magic strings live in one
place.
"""

from typing import Literal

# Roles as stored in ``chat_messages.role`` and sent on the wire.
ROLE_SYSTEM: Literal["system"] = "system"
ROLE_USER: Literal["user"] = "user"
ROLE_ASSISTANT: Literal["assistant"] = "assistant"

Role = Literal["system", "user", "assistant"]

# Table names
TABLE_CHAT_MESSAGES = "chat_messages"
TABLE_USER_PROFILES = "user_profiles"
TABLE_COMMENTS = "comments"

# Defaults
DEFAULT_CLEAR_BATCH_SIZE = 500
