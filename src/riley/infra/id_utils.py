"""Prefixed ID generation for stored records.

Public-facing IDs use a ``{prefix}_{random}`` format so that any ID can
be visually identified by its origin:

- ``msg_kJ3pW7mD4bNx``: chat message (user or assistant turn)
- ``cmt_a8Kx3nQ9mP2r``: comment
"""

import secrets
import string

_ALPHABET = string.ascii_letters + string.digits  # a-z A-Z 0-9
_DEFAULT_LENGTH = 12  # ~71 bits of entropy

PREFIX_MESSAGE = "msg"
PREFIX_COMMENT = "cmt"


def generate_id(prefix: str, length: int = _DEFAULT_LENGTH) -> str:
    """Generate a prefixed random ID.

    Args:
        prefix: Short descriptor (e.g. ``"msg"``, ``"cmt"``).
        length: Number of random alphanumeric characters after the prefix.

    Returns:
        ``"{prefix}_{random}"`` string.
    """
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(length))
    return f"{prefix}_{suffix}"
