from __future__ import annotations

import json
from typing import Dict, List

from fastapi import WebSocket

from ..logging_config import logger
from ..models import Message
from ..schemas.conversation import MessageRead

INSERT_EVENT = "INSERT"
MESSAGES_TABLE = "messages"


def insert_event(message: Message) -> dict:
    """The realtime payload for a freshly inserted message: the raw row, no sender profile."""
    return {
        "type": INSERT_EVENT,
        "table": MESSAGES_TABLE,
        "record": MessageRead.model_validate(message).model_dump(mode="json"),
    }


class ConnectionManager:
    def __init__(self):
        # Map conversation_id -> list of websockets
        self.active_connections: Dict[str, List[WebSocket]] = {}

    async def connect(self, conversation_id: str, websocket: WebSocket) -> None:
        await websocket.accept()
        self.active_connections.setdefault(conversation_id, []).append(websocket)
        logger.debug(f"Subscriber joined conversation {conversation_id}")

    def disconnect(self, conversation_id: str, websocket: WebSocket) -> None:
        if conversation_id in self.active_connections:
            try:
                self.active_connections[conversation_id].remove(websocket)
            except ValueError:
                pass
            if not self.active_connections[conversation_id]:
                del self.active_connections[conversation_id]

    def subscriber_count(self, conversation_id: str) -> int:
        return len(self.active_connections.get(conversation_id, []))

    async def send_text(self, conversation_id: str, message: str) -> int:
        """Fan a frame out to one conversation; returns how many sockets took it."""
        delivered = 0
        for ws in list(self.active_connections.get(conversation_id, [])):
            try:
                await ws.send_text(message)
                delivered += 1
            except Exception as e:
                # Drop broken connections
                logger.warning(f"Dropping websocket for conversation {conversation_id}: {e}")
                self.disconnect(conversation_id, ws)
        return delivered

    async def publish_message_insert(self, message: Message) -> int:
        return await self.send_text(
            str(message.conversation_id), json.dumps(insert_event(message))
        )


_manager = ConnectionManager()


def get_ws_manager() -> ConnectionManager:
    return _manager
