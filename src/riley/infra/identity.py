"""Bearer credential verification.

An ``IdentityVerifier`` turns an opaque ID token into an ``Identity`` or
raises ``InvalidCredential``.  Two implementations:

- ``FirebaseIdentityVerifier``: checks signature, expiry, audience and
  issuer of a Firebase ID token with ``google-auth``.  The blocking
  certificate fetch runs in the threadpool.
- ``StaticTokenVerifier``: fixed ``token -> uid`` table from config, for
  local development and tests.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Annotated, Any

import google.auth.transport.requests
from fastapi import Depends
from google.auth import exceptions as google_exceptions
from google.oauth2 import id_token
from starlette.concurrency import run_in_threadpool

from riley.configs.config import get_auth_config
from riley.configs.system import AuthConfig
from riley.infra.singleton import singleton
from riley.infra.telemetry import SPAN_IDENTITY_VERIFY, tracer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Identity:
    """The caller extracted from a verified credential."""

    uid: str
    email: str | None = None
    name: str | None = None

    @property
    def display_name(self) -> str:
        """Display name, else the local part of the email, else the uid."""
        if self.name:
            return self.name
        if self.email:
            return self.email.split("@", 1)[0]
        return self.uid


class InvalidCredential(Exception):
    """The presented token is malformed, expired, or not ours."""


class IdentityVerifier(ABC):
    @abstractmethod
    async def verify(self, token: str) -> Identity:
        """Return the identity behind *token* or raise ``InvalidCredential``."""


# ---------------------------------------------------------------------------
# Firebase
# ---------------------------------------------------------------------------


@singleton
def _google_request() -> google.auth.transport.requests.Request:
    """Shared transport; reuses one ``requests.Session`` for cert fetches."""
    return google.auth.transport.requests.Request()


class FirebaseIdentityVerifier(IdentityVerifier):
    def __init__(self, project_id: str) -> None:
        if not project_id:
            raise ValueError("firebase_project_id must be configured")
        self.project_id = project_id

    def _verify_sync(self, token: str) -> dict[str, Any]:
        return id_token.verify_firebase_token(
            token, _google_request(), audience=self.project_id
        )

    async def verify(self, token: str) -> Identity:
        with tracer.start_as_current_span(SPAN_IDENTITY_VERIFY):
            try:
                claims = await run_in_threadpool(self._verify_sync, token)
            except (ValueError, google_exceptions.GoogleAuthError) as exc:
                logger.info("Rejected ID token: %s", exc)
                raise InvalidCredential(str(exc)) from exc

        uid = claims.get("sub") or claims.get("user_id")
        if not uid:
            raise InvalidCredential("token has no subject")
        return Identity(uid=uid, email=claims.get("email"), name=claims.get("name"))


# ---------------------------------------------------------------------------
# Static table
# ---------------------------------------------------------------------------


class StaticTokenVerifier(IdentityVerifier):
    """Maps known tokens to uids.  Email is synthesised as ``uid@local``."""

    def __init__(self, tokens: dict[str, str]) -> None:
        self._tokens = dict(tokens)

    async def verify(self, token: str) -> Identity:
        uid = self._tokens.get(token)
        if uid is None:
            raise InvalidCredential("unknown token")
        return Identity(uid=uid, email=f"{uid}@local")


def get_identity_verifier(
    config: Annotated[AuthConfig, Depends(get_auth_config)],
) -> IdentityVerifier:
    if config.provider == "static":
        return StaticTokenVerifier(config.static_tokens)
    return FirebaseIdentityVerifier(config.firebase_project_id)
