"""Configuration management for the CLI tool."""

from pydantic import BaseModel, Field

FIREBASE_IDENTITY_URL = "https://identitytoolkit.googleapis.com/v1"
FIREBASE_TOKEN_URL = "https://securetoken.googleapis.com/v1/token"


class CLIConfig(BaseModel):
    """CLI configuration settings."""

    host: str = Field(
        default="localhost",
        description="Server host",
    )
    port: int = Field(
        default=8080,
        description="Server port",
    )
    scheme: str = Field(default="http", description="http or https")
    api_prefix: str = Field(
        default="/api/v1",
        description="Route prefix of the chat API",
    )
    firebase_api_key: str = Field(
        default="",
        description="Web API key of the Firebase project used for sign-in",
    )
    identity_url: str = Field(
        default=FIREBASE_IDENTITY_URL,
        description="Base URL of the Firebase Auth REST API",
    )
    token_url: str = Field(
        default=FIREBASE_TOKEN_URL,
        description="Secure token endpoint used to refresh ID tokens",
    )

    @property
    def base_url(self) -> str:
        """Get the base URL for the API."""
        return f"{self.scheme}://{self.host}:{self.port}"

    @property
    def chat_url(self) -> str:
        return f"{self.base_url}{self.api_prefix}/chat"

    @property
    def history_url(self) -> str:
        return f"{self.base_url}{self.api_prefix}/chat/history"

    @property
    def clear_url(self) -> str:
        return f"{self.base_url}{self.api_prefix}/chat/history/clear"

    @property
    def comments_url(self) -> str:
        return f"{self.base_url}{self.api_prefix}/comments"

    def like_url(self, comment_id: str) -> str:
        return f"{self.comments_url}/{comment_id}/like"
