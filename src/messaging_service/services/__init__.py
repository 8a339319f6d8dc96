from .messaging import MessagingService
from .realtime import ConnectionManager, get_ws_manager

__all__ = ["ConnectionManager", "MessagingService", "get_ws_manager"]
