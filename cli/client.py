"""API client for the Riley chat endpoints."""

import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from .config import CLIConfig

logger = logging.getLogger(__name__)

TokenProvider = Callable[[], Awaitable[str | None]]

# Send has no deadline; history/clear keep a finite one.
DEFAULT_TIMEOUT = 30.0


class ChatAPIError(Exception):
    """Any failed call: HTTP error status, network failure or bad payload."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.code = code


def _comment(data: dict[str, Any]) -> dict[str, Any]:
    comment = data.get("comment")
    if not isinstance(comment, dict):
        raise ChatAPIError("Response is missing the comment", 200)
    return comment


class ChatAPIClient:
    """Client for the chat history and comment board endpoints.

    ``token_provider`` returns the current ID token (or ``None`` when
    signed out) and is awaited before every call.
    """

    def __init__(
        self,
        config: CLIConfig,
        token_provider: TokenProvider,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.config = config
        self._token_provider = token_provider
        self.client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT, transport=transport)

    async def _headers(self) -> dict[str, str]:
        token = await self._token_provider()
        if not token:
            raise ChatAPIError("Not signed in", status_code=401, code="UNAUTHORIZED")
        return {"Authorization": f"Bearer {token}"}

    async def _request(
        self, method: str, url: str, *, auth: bool = True, **kwargs: Any
    ) -> dict[str, Any]:
        headers = await self._headers() if auth else {}
        logger.debug("%s %s", method, url)
        try:
            response = await self.client.request(method, url, headers=headers, **kwargs)
        except httpx.HTTPError as e:
            raise ChatAPIError(f"Connection error: {e}") from e

        try:
            data = response.json()
        except ValueError as e:
            raise ChatAPIError(
                f"Invalid response body (HTTP {response.status_code})",
                status_code=response.status_code,
            ) from e

        if response.status_code != 200:
            error = data.get("error") if isinstance(data, dict) else None
            raise ChatAPIError(
                error or f"HTTP {response.status_code}",
                status_code=response.status_code,
                code=data.get("code") if isinstance(data, dict) else None,
            )
        if not isinstance(data, dict) or not data.get("success"):
            raise ChatAPIError("Unexpected response payload", response.status_code)
        return data

    async def send_message(
        self, message: str, history: list[dict[str, str]]
    ) -> dict[str, Any]:
        """Return ``{"response", "timestamp"}`` for *message*.

        Waits for the reply indefinitely; the completion call on the
        server has its own deadline.
        """
        data = await self._request(
            "POST",
            self.config.chat_url,
            json={"message": message, "chatHistory": history},
            timeout=None,
        )
        if not isinstance(data.get("response"), str):
            raise ChatAPIError("Response is missing the assistant reply", 200)
        return {"response": data["response"], "timestamp": data.get("timestamp")}

    async def fetch_history(self) -> list[dict[str, Any]]:
        data = await self._request("GET", self.config.history_url)
        return list(data.get("messages") or [])

    async def clear_history(self) -> str:
        data = await self._request("POST", self.config.clear_url)
        return data.get("message", "")

    async def list_comments(self) -> list[dict[str, Any]]:
        """Newest first; works while signed out."""
        data = await self._request("GET", self.config.comments_url, auth=False)
        return list(data.get("comments") or [])

    async def add_comment(self, text: str) -> dict[str, Any]:
        data = await self._request(
            "POST", self.config.comments_url, json={"text": text}
        )
        return _comment(data)

    async def toggle_like(self, comment_id: str) -> dict[str, Any]:
        data = await self._request("POST", self.config.like_url(comment_id))
        return _comment(data)

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
