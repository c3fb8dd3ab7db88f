"""Chat API endpoints: send message, fetch history, clear history."""

from fastapi import APIRouter

from riley.core.service.models import (
    MSG_HISTORY_CLEARED,
    OP_CLEAR_HISTORY,
    OP_FETCH_HISTORY,
    OP_SEND_MESSAGE,
)
from riley.infra.time_utils import to_iso

from .deps import ChatServiceDep, IdentityDep
from .exceptions import translate_errors
from .models import (
    ClearHistoryResponse,
    ErrorResponse,
    HistoryResponse,
    MessageOut,
    SendMessageRequest,
    SendMessageResponse,
)

_ERRORS = {
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}

router = APIRouter(tags=["chat"], responses=_ERRORS)


@router.post(
    "/chat",
    response_model=SendMessageResponse,
    responses={502: {"model": ErrorResponse}},
)
async def send_message(
    body: SendMessageRequest,
    identity: IdentityDep,
    service: ChatServiceDep,
) -> SendMessageResponse:
    """Answer one user message and persist the exchange.

    ``chatHistory`` is the client's view of the conversation and is
    used only as model context; the store is not consulted.
    """
    with translate_errors(OP_SEND_MESSAGE):
        reply = await service.send_message(identity, body.message, body.chat_history)
    return SendMessageResponse(response=reply.response, timestamp=to_iso(reply.timestamp))


@router.get("/chat/history", response_model=HistoryResponse)
async def fetch_history(
    identity: IdentityDep,
    service: ChatServiceDep,
) -> HistoryResponse:
    with translate_errors(OP_FETCH_HISTORY):
        records = await service.fetch_history(identity)
    return HistoryResponse(messages=[MessageOut.from_record(r) for r in records])


@router.post("/chat/history/clear", response_model=ClearHistoryResponse)
async def clear_history(
    identity: IdentityDep,
    service: ChatServiceDep,
) -> ClearHistoryResponse:
    """Delete the caller's whole conversation; succeeds when already empty."""
    with translate_errors(OP_CLEAR_HISTORY):
        await service.clear_history(identity)
    return ClearHistoryResponse(message=MSG_HISTORY_CLEARED)
