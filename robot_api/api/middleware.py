"""Request correlation and access logging."""
from __future__ import annotations

import time
from uuid import uuid4

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from ..logging_conf import get_logger

__all__ = ["REQUEST_ID_HEADER", "RequestLogMiddleware"]

REQUEST_ID_HEADER = "X-Request-ID"

logger = get_logger("api.access")


class RequestLogMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id and log when it is received and answered.

    An incoming X-Request-ID is kept, otherwise a uuid4 is minted. The id is
    stored on ``request.state`` for the error handlers and echoed back.
    """

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        rid = request.headers.get(REQUEST_ID_HEADER) or uuid4().hex
        request.state.request_id = rid
        fields = {"request_id": rid, "method": request.method, "path": request.url.path}

        logger.info("request.received", extra={"event": "request_received", **fields})
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request.failed", extra={"event": "request_failed", **fields})
            raise

        response.headers[REQUEST_ID_HEADER] = rid
        logger.info(
            "request.completed",
            extra={
                "event": "request_completed",
                "status_code": response.status_code,
                "duration_ms": round((time.perf_counter() - started) * 1000.0, 2),
                **fields,
            },
        )
        return response
