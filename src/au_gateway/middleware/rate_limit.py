"""Rate limiting middleware for bid submissions.

Fixed one-minute window per client IP, counted in Redis:
    count = INCR ratelimit:bids:{ip}
    EXPIRE key 60 on first hit
    count > BID_RATE_LIMIT_PER_MINUTE -> 429 (code 9001) with Retry-After

Only POST .../bids is limited; lot polling and pricing previews are not.
The client IP is the first X-Forwarded-For hop when behind a proxy.
When Redis is unreachable the limiter fails open and logs an error.
"""

import logging

from redis.exceptions import RedisError
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response

from config.settings import settings
from src.au_common.errors import RateLimitError
from src.au_common.redis_client import get_redis
from src.au_common.response import error_response

logger = logging.getLogger(__name__)

WINDOW_SECONDS = 60


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def is_bid_submission(request: Request) -> bool:
    return request.method == "POST" and request.url.path.rstrip("/").endswith("/bids")


class RateLimitMiddleware(BaseHTTPMiddleware):
    def __init__(self, app, limit: int | None = None) -> None:  # type: ignore[no-untyped-def]
        super().__init__(app)
        self._limit = settings.BID_RATE_LIMIT_PER_MINUTE if limit is None else limit

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        if not is_bid_submission(request):
            return await call_next(request)

        ip = client_ip(request)
        key = f"ratelimit:bids:{ip}"
        try:
            redis = await get_redis()
            count = await redis.incr(key)
            if count == 1:
                await redis.expire(key, WINDOW_SECONDS)
            ttl = await redis.ttl(key) if count > self._limit else WINDOW_SECONDS
        except RedisError as exc:
            # Fail open: bids stay serialized by the conditional UPDATE.
            logger.error("Bid rate limiter unavailable, not limiting %s: %s", ip, exc)
            return await call_next(request)

        if count > self._limit:
            logger.warning("Bid rate limit exceeded for %s (%d in window)", ip, count)
            err = RateLimitError()
            return JSONResponse(
                status_code=err.http_status,
                content=error_response(
                    err.code, err.message, getattr(request.state, "request_id", None)
                ).model_dump(),
                headers={"Retry-After": str(ttl if ttl > 0 else WINDOW_SECONDS)},
            )
        return await call_next(request)
