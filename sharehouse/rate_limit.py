"""SlowAPI limits keyed on the calling resident.

Residents of one house usually share a single public address, so limiting by
IP alone would let one busy resident lock the whole house out of the booking
screens. Requests carrying a valid bearer token are counted per user id;
anonymous requests (register, login) fall back to the client address.
"""
from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address

from .auth import session_user_id
from .config import get_settings
from .errors import ErrorKind, SchedulerError


def resident_key(request: Request) -> str:
    scheme, _, token = request.headers.get("Authorization", "").partition(" ")
    if scheme.lower() == "bearer" and token:
        try:
            return f"user:{session_user_id(token)}"
        except HTTPException:
            pass
    return f"ip:{get_remote_address(request)}"


settings = get_settings()
limiter = Limiter(
    key_func=resident_key,
    default_limits=[settings.default_rate_limit],
    enabled=settings.rate_limiting_enabled,
)


def rate_limit_handler(_: Request, exc: RateLimitExceeded) -> JSONResponse:
    error = SchedulerError(ErrorKind.RATE_LIMITED, f"Too many requests, retry later ({exc.detail})")
    return JSONResponse(status_code=error.status_code, content=error.to_envelope())


def apply_rate_limiter(app: FastAPI) -> None:
    app.state.limiter = limiter
    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, rate_limit_handler)
