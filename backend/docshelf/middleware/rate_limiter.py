"""Per-client rate limiting using slowapi."""

from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.requests import Request
from starlette.responses import JSONResponse

from docshelf.config import settings
from docshelf.models.envelope import ApiError, error_response


def _get_user_or_ip(request: Request) -> str:
    """Key signed-in callers by user ID, everyone else by client IP."""
    auth = request.headers.get("authorization", "")
    if auth.startswith("Bearer "):
        try:
            from docshelf.api.dependencies import verify_token
            payload = verify_token(auth.split(" ", 1)[1])
            return payload["sub"]
        except Exception:
            pass
    return get_remote_address(request)


limiter = Limiter(key_func=_get_user_or_ip, enabled=settings.rate_limit_enabled)

EXPORT_LIMIT = f"{settings.rate_limit_export}/minute"
AUTH_LIMIT = f"{settings.rate_limit_auth}/minute"


def rate_limit_exceeded_handler(_request: Request, exc: RateLimitExceeded) -> JSONResponse:
    """Return a JSON envelope when rate limit is exceeded."""
    return JSONResponse(
        status_code=429,
        content=error_response([ApiError(code="RATE_LIMITED", message=str(exc.detail))]),
    )
