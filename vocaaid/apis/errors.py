"""Maps the error taxonomy onto the ``{success, error}`` response envelope."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from vocaaid.core.errors import TransportError, ValidationError, VocaAidError
from vocaaid.core.logging import get_logger

logger = get_logger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"success": False, "error": message}
    )


def install_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(VocaAidError)
    async def _vocaaid_error(request: Request, exc: VocaAidError) -> JSONResponse:
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def _malformed_body(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        return error_response(400, "Invalid data structure")


@asynccontextmanager
async def remote_call(failure_message: str) -> AsyncIterator[None]:
    """Run a remote-mirror call; anything but bad input becomes a logged 500."""
    try:
        yield
    except ValidationError:
        raise
    except Exception as e:
        logger.exception(failure_message)
        raise TransportError(failure_message) from e
