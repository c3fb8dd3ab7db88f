"""Error taxonomy for the request handlers.

Each class fixes an HTTP status and an error code; the API layer turns
any ``ChatError`` into ``{"error": message, "code": code}`` (plus
``"details"`` when set).
"""

from .constants import (
    CODE_BAD_REQUEST,
    CODE_INTERNAL_ERROR,
    CODE_NOT_FOUND,
    CODE_UNAUTHORIZED,
    CODE_UPSTREAM_ERROR,
    MSG_INTERNAL_ERROR,
)

__all__ = [
    "BadRequest",
    "ChatError",
    "InternalError",
    "NotFound",
    "Unauthorized",
    "UpstreamError",
]


class ChatError(Exception):
    status_code: int = 500
    code: str = CODE_INTERNAL_ERROR

    def __init__(self, message: str, detail: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail

    def to_body(self) -> dict[str, str]:
        body = {"error": self.message, "code": self.code}
        if self.detail:
            body["details"] = self.detail
        return body


class Unauthorized(ChatError):
    """Missing, malformed or rejected bearer credential."""

    status_code = 401
    code = CODE_UNAUTHORIZED


class BadRequest(ChatError):
    status_code = 400
    code = CODE_BAD_REQUEST


class NotFound(ChatError):
    status_code = 404
    code = CODE_NOT_FOUND


class UpstreamError(ChatError):
    """The completion engine failed or returned nothing usable."""

    status_code = 502
    code = CODE_UPSTREAM_ERROR


class InternalError(ChatError):
    """Store failure or any unexpected exception."""

    status_code = 500
    code = CODE_INTERNAL_ERROR

    def __init__(
        self, message: str = MSG_INTERNAL_ERROR, detail: str | None = None
    ) -> None:
        super().__init__(message, detail)
