"""
Exception handlers - Translate errors into `{"error": str}` responses.

Routes translate use-case failures themselves (e.g. "user already
exists"). The handlers here cover what any route can raise: schema
violations, malformed ids, uniqueness collisions, framework HTTP
errors, and anything unexpected. Internal details are logged, never
returned to the client.
"""

import logging
from http import HTTPStatus

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from src.domain.exceptions import CastError, DuplicateKeyError, NotFoundError, ValidationError

logger = logging.getLogger(__name__)

# Messages for framework-raised errors that carry only the default reason phrase
_DEFAULT_MESSAGES = {
    status.HTTP_404_NOT_FOUND: "route not found",
    status.HTTP_405_METHOD_NOT_ALLOWED: "method not allowed",
}


def error_response(status_code: int, message: str, headers: dict[str, str] | None = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    message = str(exc.detail)
    if message == HTTPStatus(exc.status_code).phrase:
        message = _DEFAULT_MESSAGES.get(exc.status_code, message.lower())
    return error_response(exc.status_code, message, exc.headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    error = exc.errors()[0]
    field = ".".join(str(part) for part in error["loc"] if part not in ("body", "path", "query"))
    return error_response(status.HTTP_400_BAD_REQUEST, f"{field}: {error['msg']}")


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, exc.message)


async def cast_error_handler(request: Request, exc: CastError) -> JSONResponse:
    return error_response(status.HTTP_400_BAD_REQUEST, "invalid id")


async def duplicate_key_handler(request: Request, exc: DuplicateKeyError) -> JSONResponse:
    return error_response(status.HTTP_409_CONFLICT, str(exc))


async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return error_response(status.HTTP_404_NOT_FOUND, "record not found")


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "internal server error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(CastError, cast_error_handler)
    app.add_exception_handler(DuplicateKeyError, duplicate_key_handler)
    app.add_exception_handler(NotFoundError, not_found_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
