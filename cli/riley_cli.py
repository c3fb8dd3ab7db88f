"""Main CLI loop for interactive chat."""

import getpass
import logging
import sys
from typing import TextIO

from .auth import AuthError, AuthSession
from .client import ChatAPIClient, ChatAPIError
from .config import CLIConfig
from .formatter import TerminalView
from .session import ChatSessionController

logger = logging.getLogger(__name__)

HELP_TEXT = """Commands:
  /login             sign in with email and password
  /register          create an account
  /token TOKEN UID   use a pre-issued token (static provider)
  /logout            sign out
  /history           reload the stored conversation
  /clear             delete the stored conversation
  /comments          show the comment board
  /comment TEXT      post a comment
  /like ID           like or unlike a comment
  /help              show this help
  /quit              exit
Anything else is sent to Riley.
"""


class RileyCLI:
    """Interactive CLI for the Riley API."""

    def __init__(
        self,
        config: CLIConfig,
        input_stream: TextIO = sys.stdin,
        output_stream: TextIO = sys.stdout,
    ):
        """Initialize the CLI.

        Parameters
        ----------
        config
            CLI configuration.
        input_stream
            Input stream for user input (default: stdin).
        output_stream
            Output stream for responses (default: stdout).
        """
        self.config = config
        self.input_stream = input_stream
        self.output_stream = output_stream
        self.auth = AuthSession(config)
        self.client = ChatAPIClient(config, self.auth.get_id_token)
        self.view = TerminalView(output_stream, input_stream)
        self.controller = ChatSessionController(self.client, self.auth, self.view)

    async def run(self) -> None:
        """Run the interactive CLI loop."""
        try:
            self._print_welcome()
            await self.controller.start()
            while True:
                try:
                    line = self._get_user_input("> ")
                    if not line.strip():
                        continue
                    if not await self._dispatch(line.strip()):
                        self._print("Goodbye!\n")
                        break
                except KeyboardInterrupt:
                    self._print("\n\nInterrupted. Use /quit to exit.\n")
                except EOFError:
                    self._print("\nGoodbye!\n")
                    break
        finally:
            self.controller.close()
            await self.client.close()
            await self.auth.close()

    async def _dispatch(self, line: str) -> bool:
        """Handle one input line; returns False when the loop should stop."""
        if line.lower() in ("exit", "quit", "q", "/quit", "/exit"):
            return False

        command, _, rest = line.partition(" ")
        if command == "/help":
            self._print(HELP_TEXT)
        elif command == "/login":
            await self._login()
        elif command == "/register":
            await self._register()
        elif command == "/token":
            await self._use_token(rest.split())
        elif command == "/logout":
            await self.auth.sign_out()
            self.view.toast("Logged out successfully", "success")
        elif command == "/history":
            await self.controller.load_history()
        elif command == "/clear":
            await self.controller.clear()
        elif command == "/comments":
            await self._show_comments()
        elif command == "/comment":
            await self._add_comment(rest.strip())
        elif command == "/like":
            await self._toggle_like(rest.strip())
        else:
            await self.controller.submit(line)
        return True

    async def _login(self) -> None:
        email = self._get_user_input("Email: ").strip()
        password = self._get_secret("Password: ")
        try:
            await self.auth.sign_in(email, password)
        except AuthError as e:
            self.view.toast(e.message, "error")
            return
        self.view.toast("Welcome back!", "success")

    async def _register(self) -> None:
        email = self._get_user_input("Email: ").strip()
        password = self._get_secret("Password (min 6 characters): ")
        confirm = self._get_secret("Confirm Password: ")
        try:
            await self.auth.register(email, password, confirm)
        except AuthError as e:
            self.view.toast(e.message, "error")
            return
        self.view.toast("Account created successfully!", "success")

    async def _use_token(self, args: list[str]) -> None:
        if len(args) != 2:
            self._print("Usage: /token TOKEN UID\n")
            return
        token, uid = args
        await self.auth.use_token(token, uid)

    async def _show_comments(self) -> None:
        try:
            comments = await self.client.list_comments()
        except ChatAPIError as e:
            logger.error("Error loading comments: %s", e)
            self.view.toast("Failed to load comments", "error")
            return
        self.view.render_comments(comments)

    async def _add_comment(self, text: str) -> None:
        if not text:
            self._print("Usage: /comment TEXT\n")
            return
        if not self.auth.is_authenticated:
            self.view.prompt_auth()
            return
        try:
            comment = await self.client.add_comment(text)
        except (ChatAPIError, AuthError) as e:
            logger.error("Error posting comment: %s", e)
            self.view.toast(e.message, "error")
            return
        self.view.render_comment(comment)
        self.view.toast("Comment posted", "success")

    async def _toggle_like(self, comment_id: str) -> None:
        if not comment_id:
            self._print("Usage: /like ID\n")
            return
        if not self.auth.is_authenticated:
            self.view.prompt_auth()
            return
        try:
            comment = await self.client.toggle_like(comment_id)
        except (ChatAPIError, AuthError) as e:
            logger.error("Error liking comment %s: %s", comment_id, e)
            self.view.toast(e.message, "error")
            return
        self.view.render_comment(comment)

    def _get_user_input(self, prompt: str) -> str:
        """Get user input from the input stream."""
        self._print(prompt)
        line = self.input_stream.readline()
        if not line:
            raise EOFError
        return line.rstrip("\n\r")

    def _get_secret(self, prompt: str) -> str:
        if self.input_stream is sys.stdin and sys.stdin.isatty():
            return getpass.getpass(prompt)
        return self._get_user_input(prompt)

    def _print_welcome(self) -> None:
        """Print welcome message."""
        self._print("Riley CLI - chat with Moshy's photography assistant\n")
        self._print(f"Connected to: {self.config.base_url}{self.config.api_prefix}\n")
        self._print("Type /help for commands.\n")

    def _print(self, text: str) -> None:
        """Print text to output stream."""
        self.output_stream.write(text)
        self.output_stream.flush()


async def main(
    host: str = "localhost",
    port: int = 8080,
    api_prefix: str = "/api/v1",
    firebase_api_key: str = "",
    debug: bool = False,
) -> None:
    """Main entry point for the CLI.

    Parameters
    ----------
    host
        Server host.
    port
        Server port.
    api_prefix
        Route prefix of the chat API.
    firebase_api_key
        Web API key used for email/password sign-in.
    debug
        Enable debug logging.
    """
    log_level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    config = CLIConfig(
        host=host,
        port=port,
        api_prefix=api_prefix,
        firebase_api_key=firebase_api_key,
    )

    cli = RileyCLI(config)
    await cli.run()
