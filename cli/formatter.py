"""Terminal rendering of the chat session."""

import asyncio
from typing import Any, TextIO

from riley.infra.time_utils import JUST_NOW, format_relative, parse_iso

from .auth import AuthUser

ASSISTANT_NAME = "Riley"
DEFAULT_GREETING = (
    "Hi! I'm Riley, Moshy's photography assistant. Ask me about sessions, "
    "pricing or the best photo spots in Montreal."
)

_TOAST_ICONS = {"success": "✅", "error": "❌"}


def format_timestamp(timestamp: str | None, include_days: bool = False) -> str:
    """``Just now`` / ``5m ago`` / ``3h ago`` / local date for an ISO string.

    Comment board entries also get ``2d ago`` for the first month.
    """
    if not timestamp:
        return JUST_NOW
    parsed = parse_iso(timestamp)
    if parsed is None:
        return JUST_NOW
    return format_relative(parsed, include_days=include_days)


class TerminalView:
    """Writes the conversation to a text stream.

    The send-enabled flag and typing indicator have no widget to toggle
    in a terminal; they are tracked so the loop can refuse input while a
    reply is pending.
    """

    def __init__(
        self,
        output: TextIO,
        input_stream: TextIO | None = None,
        greeting: str = DEFAULT_GREETING,
    ):
        self.output = output
        self.input_stream = input_stream
        self.greeting = greeting
        self.send_enabled = False
        self.typing = False

    def show_auth_required(self) -> None:
        self._print("\n🔒 Sign in to chat with Riley (/login or /register).\n")

    def show_chat(self, user: AuthUser) -> None:
        self._print(f"\nSigned in as {user.email or user.uid}\n")

    def prompt_auth(self) -> None:
        self._print("Please sign in first: /login, /register or /token.\n")

    def render_greeting(self) -> None:
        self.render_message("assistant", self.greeting)

    def render_history(self, messages: list[dict[str, Any]]) -> None:
        for message in messages:
            self.render_message(
                message.get("role", "assistant"),
                message.get("content", ""),
                message.get("timestamp"),
            )

    def render_message(
        self, role: str, content: str, timestamp: str | None = None
    ) -> None:
        speaker = "You" if role == "user" else ASSISTANT_NAME
        self._print(f"\n{speaker} · {format_timestamp(timestamp)}\n{content}\n")

    def render_comments(self, comments: list[dict[str, Any]]) -> None:
        if not comments:
            self._print("\nNo comments yet. Be the first: /comment TEXT\n")
            return
        for comment in comments:
            self.render_comment(comment)

    def render_comment(self, comment: dict[str, Any]) -> None:
        when = format_timestamp(comment.get("timestamp"), include_days=True)
        self._print(
            f"\n[{comment.get('id', '?')}] {comment.get('userName', 'Anonymous')}"
            f" · {when} · ♥ {comment.get('likeCount', 0)}\n"
            f"{comment.get('text', '')}\n"
        )

    def clear_input(self) -> None:
        pass

    def show_typing(self) -> None:
        self.typing = True
        self._print(f"{ASSISTANT_NAME} is typing…\n")

    def hide_typing(self) -> None:
        self.typing = False

    def set_send_enabled(self, enabled: bool) -> None:
        self.send_enabled = enabled

    async def confirm(self, question: str) -> bool:
        if self.input_stream is None:
            return False
        self._print(f"{question} [y/N] ")
        answer = await asyncio.to_thread(self.input_stream.readline)
        return answer.strip().lower() in ("y", "yes")

    def toast(self, message: str, kind: str) -> None:
        self._print(f"{_TOAST_ICONS.get(kind, 'ℹ️')} {message}\n")

    def _print(self, text: str) -> None:
        """Print text to output."""
        self.output.write(text)
        self.output.flush()
