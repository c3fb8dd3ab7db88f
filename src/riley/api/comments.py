"""Comment board endpoints."""

from fastapi import APIRouter

from riley.core.service.models import OP_ADD_COMMENT, OP_LIST_COMMENTS, OP_TOGGLE_LIKE

from .deps import CommentServiceDep, IdentityDep
from .exceptions import translate_errors
from .models import (
    CommentListResponse,
    CommentOut,
    CommentRequest,
    CommentResponse,
    ErrorResponse,
)

router = APIRouter(tags=["comments"])


@router.get("/comments", response_model=CommentListResponse)
async def list_comments(service: CommentServiceDep) -> CommentListResponse:
    """Newest comments first; readable without signing in."""
    with translate_errors(OP_LIST_COMMENTS):
        records = await service.list_recent()
    return CommentListResponse(comments=[CommentOut.from_record(r) for r in records])


@router.post(
    "/comments",
    response_model=CommentResponse,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
async def add_comment(
    body: CommentRequest,
    identity: IdentityDep,
    service: CommentServiceDep,
) -> CommentResponse:
    with translate_errors(OP_ADD_COMMENT):
        record = await service.add(identity, body.text)
    return CommentResponse(comment=CommentOut.from_record(record))


@router.post(
    "/comments/{comment_id}/like",
    response_model=CommentResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def toggle_like(
    comment_id: str,
    identity: IdentityDep,
    service: CommentServiceDep,
) -> CommentResponse:
    """Like the comment, or unlike it when the caller already did."""
    with translate_errors(OP_TOGGLE_LIKE):
        record = await service.toggle_like(identity, comment_id)
    return CommentResponse(comment=CommentOut.from_record(record))
