import logging
import sys
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from .config import settings

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

logger = logging.getLogger("messaging_service")


def setup_logging() -> None:
    """Configure the root handler once and align library loggers with our level."""
    level = getattr(logging, settings.LOGGING_LEVEL.upper(), logging.INFO)

    root = logging.getLogger()
    if not any(getattr(h, "_messaging_service", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._messaging_service = True
        root.addHandler(handler)
    root.setLevel(level)

    logger.setLevel(level)
    # SQL echo is controlled by the engine; keep the driver chatter down
    logging.getLogger("sqlalchemy.engine").setLevel(
        logging.INFO if settings.LOGGING_LEVEL.upper() == "DEBUG" else logging.WARNING
    )
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request with status and latency."""

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - start) * 1000
            logger.error(
                f"{request.method} {request.url.path} failed after {elapsed_ms:.1f}ms",
                exc_info=True,
            )
            raise
        elapsed_ms = (time.perf_counter() - start) * 1000
        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)"
        )
        return response


def setup_middleware(app: FastAPI) -> None:
    app.add_middleware(LoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ALLOW_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
