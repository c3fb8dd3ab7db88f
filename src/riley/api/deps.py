"""Centralized FastAPI dependency type aliases.

Import these ``*Dep`` aliases in route modules instead of manually
writing ``Annotated[T, Depends(get_xxx)]`` everywhere.  Each alias
corresponds to a single ``get_*`` factory and can be overridden in
tests via ``app.dependency_overrides[get_xxx] = ...``.
"""

from typing import Annotated

from fastapi import Depends

from riley.core.service.chat import ChatSessionService
from riley.core.service.comments import CommentService
from riley.core.service.deps import get_chat_service, get_comment_service
from riley.infra.identity import Identity

from .auth import get_identity

IdentityDep = Annotated[Identity, Depends(get_identity)]
ChatServiceDep = Annotated[ChatSessionService, Depends(get_chat_service)]
CommentServiceDep = Annotated[CommentService, Depends(get_comment_service)]
