import sys
import uuid

from fastapi import Request
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from messaging_service.config import settings

from .logging_config import logger

# Rate limiting is disabled whenever pytest is driving the app
IS_TEST_MODE = "pytest" in sys.modules


def get_limiter_key(request: Request):
    if IS_TEST_MODE:
        # A unique key per request never accumulates hits
        return str(uuid.uuid4())
    return get_remote_address(request)


limiter = Limiter(
    key_func=get_limiter_key,
    default_limits=[settings.GENERAL_RATE_LIMIT],
    strategy="fixed-window",
)

if IS_TEST_MODE:

    def noop_limit(limit_string, key_func=None):
        def decorator(func):
            func.__slowapi_decorated__ = True
            return func

        return decorator

    limiter.limit = noop_limit
    logger.info("Rate limiting disabled for test environment")

SEND_MESSAGE_LIMIT = settings.SEND_MESSAGE_RATE_LIMIT


async def rate_limit_exceeded_handler(
    request: Request, exc: RateLimitExceeded
) -> JSONResponse:
    """Custom handler for rate limit exceeded exceptions"""
    logger.warning(f"Rate limit exceeded on {request.url.path}: {exc.detail}")
    return JSONResponse(
        status_code=429,
        content={"detail": "Rate limit exceeded"},
    )


def setup_rate_limiting(app):
    """Configure rate limiting for the FastAPI application"""
    app.state.limiter = limiter

    if IS_TEST_MODE:
        logger.info("Rate limiting is disabled in test mode")
    else:
        logger.info(
            f"Rate limiting is enabled: general={settings.GENERAL_RATE_LIMIT}, "
            f"send_message={SEND_MESSAGE_LIMIT}"
        )

    app.add_middleware(SlowAPIMiddleware)
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)
