from .health_router import health_router
from .messages_router import messages_router
from .ws_router import ws_router

__all__ = [
    "health_router",
    "messages_router",
    "ws_router",
]
