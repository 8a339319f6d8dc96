import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .config import settings
from .db import dispose_engine
from .exceptions import MessagingError, NotFoundError
from .logging_config import setup_logging, setup_middleware
from .rate_limiting import setup_rate_limiting
from .routers import health_router, messages_router, ws_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.logger.info(f"'{settings.PROJECT_NAME}' startup sequence initiated.")
    app.startup_time = time.time()
    yield
    app.logger.info(f"'{settings.PROJECT_NAME}' shutdown sequence initiated.")
    await dispose_engine()


# Configure logging before app initialization
setup_logging()

app = FastAPI(
    title=settings.PROJECT_NAME,
    description=(
        "Adopter and shelter messaging: conversations, message history, "
        "read receipts, unread counters and real-time delivery."
    ),
    version="0.1.0",
    root_path=settings.ROOT_PATH,
    lifespan=lifespan,
    openapi_tags=[
        {"name": "Health", "description": "Service health endpoints"},
        {"name": "Messages", "description": "Conversations, messages and read state"},
        {"name": "WebSocket", "description": "Real-time message inserts per conversation"},
    ],
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    swagger_ui_parameters={"persistAuthorization": True},
)

# Initialize application logger
app.logger = logging.getLogger("messaging_service")

# Setup middleware
setup_middleware(app)
setup_rate_limiting(app)


# Exception handlers
@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=422, content={"detail": jsonable_encoder(exc.errors())})


@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError):
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(MessagingError)
async def messaging_exception_handler(request: Request, exc: MessagingError):
    app.logger.error(f"Messaging failure on {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content={"detail": str(exc)})


# Routers
app.include_router(health_router)
app.include_router(messages_router)
app.include_router(ws_router)
