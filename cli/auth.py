"""Sign-in state for the terminal client.

``AuthSession`` talks to the Firebase Auth REST API (email/password
sign-in and registration, ID token refresh) and notifies subscribers
whenever the signed-in user changes.  Listeners may be plain functions
or coroutines; they receive the new ``AuthUser`` or ``None``.
"""

import inspect
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone
from typing import Any

import httpx

from .config import CLIConfig

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6
# Refresh this long before the ID token actually expires.
REFRESH_MARGIN = timedelta(minutes=5)

DEFAULT_ERROR_MESSAGE = "An error occurred. Please try again."
ERROR_MESSAGES = {
    "EMAIL_NOT_FOUND": "No account found with this email",
    "INVALID_PASSWORD": "Incorrect password",
    "INVALID_LOGIN_CREDENTIALS": "Incorrect email or password",
    "EMAIL_EXISTS": "Email already registered",
    "WEAK_PASSWORD": "Password should be at least 6 characters",
    "INVALID_EMAIL": "Invalid email address",
    "TOO_MANY_ATTEMPTS_TRY_LATER": "Too many attempts. Please try again later",
    "PASSWORD_MISMATCH": "Passwords do not match",
    "TOKEN_EXPIRED": "Your session has expired. Please sign in again",
}


def friendly_error(code: str) -> str:
    """Map a Firebase error code (``"WEAK_PASSWORD : ..."`` too) to user text."""
    key = code.split(":", 1)[0].strip()
    return ERROR_MESSAGES.get(key, DEFAULT_ERROR_MESSAGE)


class AuthError(Exception):
    def __init__(self, code: str) -> None:
        self.code = code
        self.message = friendly_error(code)
        super().__init__(self.message)


@dataclass(frozen=True)
class AuthUser:
    uid: str
    email: str | None
    id_token: str
    refresh_token: str | None = None
    expires_at: datetime | None = None
    display_name: str | None = None

    def needs_refresh(self, now: datetime) -> bool:
        if self.expires_at is None or self.refresh_token is None:
            return False
        return now >= self.expires_at - REFRESH_MARGIN


AuthListener = Callable[[AuthUser | None], Awaitable[None] | None]


def _expiry(expires_in: Any) -> datetime:
    return datetime.now(timezone.utc) + timedelta(seconds=int(expires_in or 3600))


class AuthSession:
    """Current user plus an observer registry for sign-in / sign-out."""

    def __init__(
        self,
        config: CLIConfig,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self.client = httpx.AsyncClient(timeout=30.0, transport=transport)
        self._user: AuthUser | None = None
        self._listeners: list[AuthListener] = []

    @property
    def current_user(self) -> AuthUser | None:
        return self._user

    @property
    def is_authenticated(self) -> bool:
        return self._user is not None

    def on_auth_state_changed(self, listener: AuthListener) -> Callable[[], None]:
        """Register *listener*; returns a callable that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    async def _set_user(self, user: AuthUser | None) -> None:
        changed = (self._user is None) != (user is None) or (
            user is not None and self._user is not None and user.uid != self._user.uid
        )
        self._user = user
        if not changed:
            return
        for listener in list(self._listeners):
            result = listener(user)
            if inspect.isawaitable(result):
                await result

    # ------------------------------------------------------------------
    # Firebase REST calls
    # ------------------------------------------------------------------

    async def _post(self, url: str, **kwargs: Any) -> dict[str, Any]:
        try:
            response = await self.client.post(
                url, params={"key": self.config.firebase_api_key}, **kwargs
            )
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Identity provider request failed: %s", e)
            raise AuthError("NETWORK_ERROR") from e

        if response.status_code != 200:
            error = data.get("error") if isinstance(data, dict) else None
            message = error.get("message", "") if isinstance(error, dict) else ""
            raise AuthError(message or f"HTTP_{response.status_code}")
        return data

    async def _password_call(self, endpoint: str, email: str, password: str) -> AuthUser:
        data = await self._post(
            f"{self.config.identity_url}/accounts:{endpoint}",
            json={"email": email, "password": password, "returnSecureToken": True},
        )
        return AuthUser(
            uid=data["localId"],
            email=data.get("email", email),
            id_token=data["idToken"],
            refresh_token=data.get("refreshToken"),
            expires_at=_expiry(data.get("expiresIn")),
            display_name=data.get("displayName") or None,
        )

    async def sign_in(self, email: str, password: str) -> AuthUser:
        user = await self._password_call("signInWithPassword", email, password)
        await self._set_user(user)
        logger.info("Signed in as %s", user.email)
        return user

    async def register(self, email: str, password: str, confirm: str) -> AuthUser:
        """Create an account, then sign in with it."""
        if password != confirm:
            raise AuthError("PASSWORD_MISMATCH")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError("WEAK_PASSWORD")
        user = await self._password_call("signUp", email, password)
        await self._set_user(user)
        logger.info("Registered %s", user.email)
        return user

    async def use_token(self, token: str, uid: str, email: str | None = None) -> AuthUser:
        """Sign in with a pre-issued token (e.g. the server's static provider)."""
        user = AuthUser(uid=uid, email=email, id_token=token)
        await self._set_user(user)
        return user

    async def sign_out(self) -> None:
        await self._set_user(None)

    async def _refresh(self, user: AuthUser) -> AuthUser:
        data = await self._post(
            self.config.token_url,
            data={"grant_type": "refresh_token", "refresh_token": user.refresh_token},
        )
        return replace(
            user,
            id_token=data["id_token"],
            refresh_token=data.get("refresh_token", user.refresh_token),
            expires_at=_expiry(data.get("expires_in")),
        )

    async def get_id_token(self) -> str | None:
        """Current ID token, refreshed when close to expiry; ``None`` if signed out.

        A failed refresh signs the user out and raises ``AuthError``.
        """
        user = self._user
        if user is None:
            return None
        if user.needs_refresh(datetime.now(timezone.utc)):
            try:
                user = await self._refresh(user)
            except AuthError as exc:
                await self._set_user(None)
                raise AuthError("TOKEN_EXPIRED") from exc
            await self._set_user(user)
        return user.id_token

    async def close(self) -> None:
        await self.client.aclose()
