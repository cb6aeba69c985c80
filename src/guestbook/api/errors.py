from __future__ import annotations

import structlog
from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from guestbook.errors import GuestbookError, NotFoundError, StoreError, ValidationError

logger = structlog.get_logger()

_STATUS_BY_ERROR: dict[type[GuestbookError], int] = {
    ValidationError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    StoreError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


async def handle_guestbook_error(request: Request, exc: GuestbookError) -> JSONResponse:
    status_code = _STATUS_BY_ERROR.get(type(exc), status.HTTP_500_INTERNAL_SERVER_ERROR)
    if status_code >= 500:
        logger.error("request_failed", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=status_code, content={"detail": str(exc)})


async def handle_request_validation_error(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    """Undecodable bodies and ill-typed fields are a plain 400, like blank input."""
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"detail": "Invalid request data", "errors": jsonable_encoder(exc.errors())},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(GuestbookError, handle_guestbook_error)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
