"""Global exception handlers and the per-route error boundary."""

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from riley.core.service.models import (
    MSG_INTERNAL_ERROR,
    MSG_INVALID_REQUEST,
    BadRequest,
    ChatError,
    InternalError,
)

logger = logging.getLogger(__name__)


@contextmanager
def translate_errors(operation: str) -> Iterator[None]:
    """Re-raise ``ChatError`` as is; anything else becomes ``InternalError``.

    The original exception is logged with its traceback but only its
    message reaches the client.
    """
    try:
        yield
    except ChatError:
        raise
    except Exception as exc:
        logger.exception("Unhandled error in %s", operation)
        raise InternalError(MSG_INTERNAL_ERROR, detail=str(exc)) from exc


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers on ``app``."""

    @app.exception_handler(ChatError)
    async def handle_chat_error(request: Request, exc: ChatError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.warning(
                "%s %s failed with %s: %s",
                request.method,
                request.url.path,
                exc.code,
                exc.detail or exc.message,
            )
        return JSONResponse(status_code=exc.status_code, content=exc.to_body())

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        fields = ", ".join(
            ".".join(str(part) for part in err.get("loc", ())) for err in exc.errors()
        )
        error = BadRequest(MSG_INVALID_REQUEST, detail=fields or None)
        return JSONResponse(status_code=error.status_code, content=error.to_body())
