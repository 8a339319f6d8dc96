import json
from uuid import UUID

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from pydantic import ValidationError

from shared.schemas.user_schemas import UserTokenData
from shared.security.jwt import AuthError

from ..db import get_session_factory
from ..dependencies import can_access
from ..logging_config import logger
from ..security import decode_user_jwt, extract_bearer_token_from_ws
from ..services.messaging import MessagingService
from ..services.realtime import get_ws_manager

ws_router = APIRouter(prefix="/ws", tags=["WebSocket"])


@ws_router.websocket("/conversations/{conversation_id}")
async def conversation_websocket(
    websocket: WebSocket,
    conversation_id: UUID,
):
    """
    Subscribe to inserts on one conversation's messages.

    Each frame is ``{"type": "INSERT", "table": "messages", "record": {...}}``
    carrying the raw row without the sender profile.
    """
    # Enforce JWT auth before accepting the connection
    token = extract_bearer_token_from_ws(websocket)
    if not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    try:
        user = UserTokenData.model_validate(decode_user_jwt(token))
    except (AuthError, ValidationError) as e:
        logger.warning(f"Rejected websocket for conversation {conversation_id}: {e}")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    # The session only lives for the participant check; an open socket holds no connection
    async with get_session_factory()() as db:
        conversation = await MessagingService(db).get_conversation(conversation_id)
    if conversation is None or not can_access(conversation, user):
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    manager = get_ws_manager()
    key = str(conversation_id)
    await manager.connect(key, websocket)
    try:
        await websocket.send_text(json.dumps({"type": "connected"}))
        while True:
            data = await websocket.receive_text()
            if data == "ping":
                await websocket.send_text(json.dumps({"type": "pong"}))
    except WebSocketDisconnect:
        logger.debug(f"Subscriber left conversation {key}")
    finally:
        manager.disconnect(key, websocket)
