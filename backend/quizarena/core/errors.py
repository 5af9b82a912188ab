"""
Error handling for QuizArena.

Every failure leaves the API as the JSON envelope
``{"success": false, "message": ..., "error"?: ...}``.
"""

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional, Type
import logging

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from starlette.exceptions import HTTPException


logger = logging.getLogger(__name__)


class APIError(Exception):
    """An error that maps directly to an HTTP status and envelope message."""

    def __init__(
        self,
        status_code: int,
        message: str,
        error: Any = None,
        headers: Optional[Dict[str, str]] = None
    ) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.message = message
        self.error = error
        self.headers = headers


def error_envelope(message: str, error: Any = None) -> Dict[str, Any]:
    body: Dict[str, Any] = {"success": False, "message": message}
    if error is not None:
        body["error"] = error
    return body


@contextmanager
def db_errors(
    db: Session,
    message: str,
    conflict_message: Optional[str] = None,
    conflict_status: int = status.HTTP_409_CONFLICT
) -> Iterator[None]:
    """
    Roll back and convert database failures into an APIError.

    Unique-constraint violations become ``conflict_status`` with
    ``conflict_message`` when one is given; everything else is a 500
    carrying ``message``.
    """
    try:
        yield
    except IntegrityError as exc:
        db.rollback()
        if conflict_message is None:
            logger.exception(message)
            raise APIError(
                status.HTTP_500_INTERNAL_SERVER_ERROR, message, error=str(exc.orig)
            ) from exc
        logger.info("%s: %s", conflict_message, exc.orig)
        raise APIError(conflict_status, conflict_message) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception(message)
        raise APIError(
            status.HTTP_500_INTERNAL_SERVER_ERROR, message, error=str(exc)
        ) from exc


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(error_envelope(exc.message, exc.error)),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    message = exc.detail if isinstance(exc.detail, str) else "Request failed"
    error = None if isinstance(exc.detail, str) else exc.detail
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(error_envelope(message, error)),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=jsonable_encoder(error_envelope("Invalid request data", exc.errors())),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_envelope("Internal server error", str(exc)),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Install the envelope handlers on an application."""
    handlers: Dict[Type[Exception], Any] = {
        APIError: api_error_handler,
        HTTPException: http_exception_handler,
        RequestValidationError: validation_exception_handler,
        Exception: unhandled_exception_handler,
    }
    for exc_class, handler in handlers.items():
        app.add_exception_handler(exc_class, handler)
