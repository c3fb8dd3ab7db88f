"""Chat session controller: the client-side state machine.

States:

- ``UNAUTHENTICATED``: nobody signed in; submitting only re-prompts sign-in.
- ``IDLE``: signed in, no request in flight.
- ``SENDING``: one send in flight; further submits are ignored.

Sign-in / sign-out arrive as notifications from ``AuthSession``; the
controller never polls.  Local history is the ``chatHistory`` sent with
the next message and is only extended with turns the server accepted.
"""

import enum
import logging
from typing import Any, Protocol

from riley.infra.time_utils import to_iso

from .auth import AuthError, AuthSession, AuthUser
from .client import ChatAPIClient, ChatAPIError

logger = logging.getLogger(__name__)

ROLE_USER = "user"
ROLE_ASSISTANT = "assistant"

FALLBACK_REPLY = (
    "Sorry, I'm having trouble connecting right now. Please try again in a moment."
)
CONFIRM_CLEAR = (
    "Are you sure you want to clear your chat history? This action cannot be undone."
)
TOAST_CLEARED = "Chat history cleared successfully"
TOAST_CLEAR_FAILED = "Error clearing chat history"

TOAST_SUCCESS = "success"
TOAST_ERROR = "error"


class SessionState(enum.Enum):
    UNAUTHENTICATED = "unauthenticated"
    IDLE = "authenticated-idle"
    SENDING = "authenticated-sending"


class SessionView(Protocol):
    """What the controller needs from a UI."""

    def show_auth_required(self) -> None: ...

    def show_chat(self, user: AuthUser) -> None: ...

    def prompt_auth(self) -> None: ...

    def render_greeting(self) -> None: ...

    def render_history(self, messages: list[dict[str, Any]]) -> None: ...

    def render_message(
        self, role: str, content: str, timestamp: str | None = None
    ) -> None: ...

    def clear_input(self) -> None: ...

    def show_typing(self) -> None: ...

    def hide_typing(self) -> None: ...

    def set_send_enabled(self, enabled: bool) -> None: ...

    async def confirm(self, question: str) -> bool: ...

    def toast(self, message: str, kind: str) -> None: ...


class ChatSessionController:
    def __init__(
        self,
        client: ChatAPIClient,
        auth: AuthSession,
        view: SessionView,
    ) -> None:
        self.client = client
        self.auth = auth
        self.view = view
        self.state = SessionState.UNAUTHENTICATED
        self.history: list[dict[str, Any]] = []
        self._unsubscribe = auth.on_auth_state_changed(self._on_auth_changed)

    async def start(self) -> None:
        """Sync with whoever is signed in already; later changes are pushed."""
        await self._on_auth_changed(self.auth.current_user)

    def close(self) -> None:
        self._unsubscribe()

    # ------------------------------------------------------------------
    # Identity transitions
    # ------------------------------------------------------------------

    async def _on_auth_changed(self, user: AuthUser | None) -> None:
        if user is None:
            self.state = SessionState.UNAUTHENTICATED
            self.history = []
            self.view.show_auth_required()
            return

        self.state = SessionState.IDLE
        self.view.show_chat(user)
        self.view.set_send_enabled(True)
        await self.load_history()

    async def load_history(self) -> None:
        """Fetch the stored conversation; failures only get logged."""
        try:
            messages = await self.client.fetch_history()
        except (ChatAPIError, AuthError) as exc:
            logger.warning("Error loading chat history: %s", exc)
            messages = []
        self.history = [
            dict(m)
            for m in messages
            if isinstance(m, dict) and "role" in m and "content" in m
        ]
        self.render_history()

    def render_history(self) -> None:
        if self.history:
            self.view.render_history(self.history)
        else:
            self.view.render_greeting()

    # ------------------------------------------------------------------
    # User actions
    # ------------------------------------------------------------------

    def _context(self) -> list[dict[str, str]]:
        return [{"role": m["role"], "content": m["content"]} for m in self.history]

    async def submit(self, text: str) -> bool:
        """Send *text*; returns whether the assistant replied.

        Blank input and submits while a send is in flight are ignored.
        Any failure is shown as the fallback reply and leaves local
        history as it was.
        """
        message = (text or "").strip()
        if not message:
            return False
        if self.state is SessionState.UNAUTHENTICATED:
            self.view.prompt_auth()
            return False
        if self.state is SessionState.SENDING:
            return False

        self.state = SessionState.SENDING
        self.view.set_send_enabled(False)
        self.view.render_message(ROLE_USER, message)
        self.view.clear_input()
        self.view.show_typing()
        context = self._context()
        sent_at = to_iso(None)

        try:
            reply = await self.client.send_message(message, context)
        except (ChatAPIError, AuthError) as exc:
            logger.error("Error sending message: %s", exc)
            self.view.hide_typing()
            self.view.render_message(ROLE_ASSISTANT, FALLBACK_REPLY)
            return False
        finally:
            # Sign-out during the send already moved us to UNAUTHENTICATED.
            if self.state is SessionState.SENDING:
                self.state = SessionState.IDLE
                self.view.set_send_enabled(True)

        self.view.hide_typing()
        if self.state is SessionState.IDLE:
            self.view.render_message(
                ROLE_ASSISTANT, reply["response"], reply["timestamp"]
            )
            self.history.extend(
                [
                    {"role": ROLE_USER, "content": message, "timestamp": sent_at},
                    {
                        "role": ROLE_ASSISTANT,
                        "content": reply["response"],
                        "timestamp": reply["timestamp"],
                    },
                ]
            )
        return True

    async def clear(self) -> bool:
        """Ask for confirmation, then erase the stored conversation."""
        if self.state is SessionState.UNAUTHENTICATED:
            self.view.prompt_auth()
            return False
        if not await self.view.confirm(CONFIRM_CLEAR):
            return False

        try:
            await self.client.clear_history()
        except (ChatAPIError, AuthError) as exc:
            logger.error("Error clearing chat: %s", exc)
            self.view.toast(TOAST_CLEAR_FAILED, TOAST_ERROR)
            return False

        self.history = []
        self.render_history()
        self.view.toast(TOAST_CLEARED, TOAST_SUCCESS)
        return True
