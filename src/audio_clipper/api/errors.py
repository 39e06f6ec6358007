"""Mapping of domain errors to HTTP responses.

Every error body has the shape ``{"message": ...}``. Request shape errors
additionally carry ``errors`` and use 400 instead of FastAPI's 422.
"""

from typing import Any

from fastapi import FastAPI, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError as RequestShapeError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from audio_clipper.domain.exceptions import (
    AudioClipperError,
    InvalidStateError,
    NotFoundError,
    RequestValidationError,
)
from audio_clipper.logging import get_logger

logger = get_logger(__name__)

STATUS_BY_ERROR: dict[type[AudioClipperError], int] = {
    RequestValidationError: status.HTTP_400_BAD_REQUEST,
    InvalidStateError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
}


def to_http_exception(error: Exception) -> HTTPException:
    """Translate any exception raised by a service into an HTTPException.

    Unknown errors become 500 with the error message only.
    """
    for error_type, status_code in STATUS_BY_ERROR.items():
        if isinstance(error, error_type):
            return HTTPException(status_code=status_code, detail=str(error))

    logger.error("request_failed", error_type=type(error).__name__, error=str(error))
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=str(error) or "Internal server error",
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def request_shape_handler(request: Request, exc: RequestShapeError) -> JSONResponse:
    errors: list[Any] = jsonable_encoder(exc.errors())
    first = errors[0] if errors else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = f"{location}: {first.get('msg')}" if location else str(first.get("msg", "Invalid request"))
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": message, "errors": errors},
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("unhandled_exception", path=request.url.path, error=str(exc))
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestShapeError, request_shape_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
