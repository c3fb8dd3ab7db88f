"""Authorization preamble shared by every authenticated route."""

import logging
from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from riley.core.service.models import MSG_INVALID_TOKEN, MSG_NO_TOKEN, Unauthorized
from riley.infra.identity import (
    Identity,
    IdentityVerifier,
    InvalidCredential,
    get_identity_verifier,
)

logger = logging.getLogger(__name__)

# auto_error=False: a missing or non-Bearer header yields None instead of 403.
bearer_scheme = HTTPBearer(auto_error=False)


async def get_identity(
    credentials: Annotated[
        HTTPAuthorizationCredentials | None, Depends(bearer_scheme)
    ],
    verifier: Annotated[IdentityVerifier, Depends(get_identity_verifier)],
) -> Identity:
    """Resolve the caller or raise ``Unauthorized``."""
    if credentials is None or not credentials.credentials.strip():
        raise Unauthorized(MSG_NO_TOKEN)
    try:
        return await verifier.verify(credentials.credentials.strip())
    except InvalidCredential as exc:
        raise Unauthorized(MSG_INVALID_TOKEN) from exc
