"""
HTTP middleware - Request gates applied before routing.
"""

from collections.abc import Awaitable, Callable

from fastapi import Request, Response, status
from fastapi.responses import JSONResponse

SUPPORTED_CONTENT_TYPES = frozenset({"application/json", "application/x-www-form-urlencoded"})


def media_type(request: Request) -> str:
    """Content-Type without parameters, lowercased."""
    return request.headers.get("content-type", "").split(";")[0].strip().lower()


def _has_body(request: Request) -> bool:
    length = request.headers.get("content-length")
    return (length is not None and length != "0") or "transfer-encoding" in request.headers


async def require_supported_content_type(
    request: Request, call_next: Callable[[Request], Awaitable[Response]]
) -> Response:
    """
    Reject non-GET requests whose body is neither JSON nor a url-encoded form.

    Requests without a body (e.g. most DELETEs) pass through.
    """
    if (
        request.method != "GET"
        and _has_body(request)
        and media_type(request) not in SUPPORTED_CONTENT_TYPES
    ):
        return JSONResponse(
            status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE,
            content={"error": "unsupported content type, use application/json"},
        )
    return await call_next(request)
