"""Access log for the auction API.

One line per request:
    INFO [POST] /api/v1/lots/LOT-1/bids → 201 (23ms) req_a1b2c3d4e5f6

A well-formed X-Request-ID from the caller (HttpLotStore sends one per call)
is reused so client and server logs line up; otherwise a fresh id is minted.
The id lands in request.state for handlers and is echoed in the response
header.

Levels: successful GETs at DEBUG (the storefront polls /lots every few
seconds), 5xx at WARNING, everything else at INFO.
"""

import logging
import re
import time

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response

from src.au_common.response import new_request_id

logger = logging.getLogger("au.request")

_REQUEST_ID_RE = re.compile(r"^[A-Za-z0-9_\-]{1,64}$")


def _request_id(request: Request) -> str:
    incoming = request.headers.get("x-request-id")
    if incoming and _REQUEST_ID_RE.match(incoming):
        return incoming
    return new_request_id()


def _level(method: str, status: int) -> int:
    if status >= 500:
        return logging.WARNING
    if method == "GET" and status < 400:
        return logging.DEBUG
    return logging.INFO


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        request_id = request.state.request_id = _request_id(request)

        start = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - start) * 1000

        logger.log(
            _level(request.method, response.status_code),
            "[%s] %s → %d (%.0fms) %s",
            request.method,
            request.url.path,
            response.status_code,
            elapsed_ms,
            request_id,
        )
        response.headers["X-Request-ID"] = request_id
        return response
