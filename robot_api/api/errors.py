"""Map domain errors to HTTP responses.

Every error body is ``{"error": str}`` (plus ``code`` where one exists).
Internal faults are logged in full and answered with a generic message.
"""
from __future__ import annotations

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from ..domain.errors import (
    AuthError,
    BadRequestError,
    CommandNotFoundError,
    InternalFaultError,
)
from ..logging_conf import get_logger

__all__ = ["register_exception_handlers"]

logger = get_logger("api.errors")

_INTERNAL_MESSAGE = "Internal server error"


def _error(
    status_code: int,
    message: str,
    *,
    code: str | None = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    content: dict[str, str] = {"error": message}
    if code:
        content["code"] = code
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def _describe_validation(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query")]
        where = ".".join(loc) or "body"
        parts.append(f"{where}: {err.get('msg', 'invalid')}")
    return "; ".join(parts) or "Malformed request"


async def _auth_error(request: Request, exc: AuthError) -> JSONResponse:
    logger.info(
        "auth.rejected",
        extra={"event": "auth_rejected", "reason": exc.code, "path": request.url.path},
    )
    return _error(
        status.HTTP_401_UNAUTHORIZED,
        str(exc) or "Unauthorized",
        code=exc.code,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def _not_found(request: Request, exc: CommandNotFoundError) -> JSONResponse:
    return _error(status.HTTP_404_NOT_FOUND, "Command not found", code=exc.code)


async def _bad_request(request: Request, exc: BadRequestError) -> JSONResponse:
    return _error(status.HTTP_400_BAD_REQUEST, exc.reason, code=exc.code)


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return await _bad_request(request, BadRequestError(_describe_validation(exc)))


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return _error(exc.status_code, str(exc.detail), headers=getattr(exc, "headers", None))


async def _internal_fault(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "request.internal_fault",
        exc_info=exc,
        extra={
            "event": "internal_fault",
            "path": request.url.path,
            "method": request.method,
            "request_id": getattr(request.state, "request_id", None),
        },
    )
    return _error(status.HTTP_500_INTERNAL_SERVER_ERROR, _INTERNAL_MESSAGE, code="internal_error")


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(AuthError, _auth_error)
    app.add_exception_handler(CommandNotFoundError, _not_found)
    app.add_exception_handler(BadRequestError, _bad_request)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(InternalFaultError, _internal_fault)
    # Anything else; Starlette still re-raises after sending this response
    app.add_exception_handler(Exception, _internal_fault)
