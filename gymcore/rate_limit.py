"""Request throttling with SlowAPI, keyed by client address."""
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from .config import get_settings
from .errors import error_response

settings = get_settings()


def client_address(request: Request) -> str:
    """Address to throttle on; the first forwarded hop when running behind a trusted proxy."""
    if settings.trust_proxy_headers:
        forwarded: Optional[str] = request.headers.get("x-forwarded-for")
        if forwarded:
            return forwarded.split(",")[0].strip()
    return get_remote_address(request)


limiter = Limiter(
    key_func=client_address,
    default_limits=[settings.default_rate_limit],
    enabled=settings.rate_limiting_enabled,
)


def too_many_requests(_: Request, exc: RateLimitExceeded) -> JSONResponse:
    response = error_response(429, f"Too many requests: {exc.detail}")
    response.headers["Retry-After"] = "60"
    return response


def apply_rate_limiter(app: FastAPI) -> None:
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, too_many_requests)
