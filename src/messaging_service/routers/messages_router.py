from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from shared.schemas.user_schemas import UserTokenData

from ..db import get_db
from ..dependencies import can_access, get_current_user, get_participant, require_adopter
from ..rate_limiting import SEND_MESSAGE_LIMIT, limiter
from ..schemas.conversation import (
    ConversationCreate,
    ConversationDetailResponse,
    ConversationListResponse,
    ConversationResponse,
    ConversationStatusUpdate,
    ConversationWithDetails,
    MarkReadRequest,
    MarkReadResponse,
    MessageCreate,
    MessageResponse,
    Participant,
    UnreadCountResponse,
)
from ..services.messaging import MessagingService
from ..services.realtime import get_ws_manager

messages_router = APIRouter(prefix="/messages", tags=["Messages"])


def get_messaging_service(db: AsyncSession = Depends(get_db)) -> MessagingService:
    return MessagingService(db, publisher=get_ws_manager())


async def _authorized_conversation(
    service: MessagingService, conversation_id: UUID, user: UserTokenData
) -> ConversationWithDetails:
    conversation = await service.get_conversation(conversation_id)
    if conversation is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Conversation not found")
    if not can_access(conversation, user):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
    return conversation


@messages_router.get("/conversations", response_model=ConversationListResponse)
async def list_conversations(
    participant: Participant = Depends(get_participant),
    service: MessagingService = Depends(get_messaging_service),
):
    conversations = await service.list_conversations(participant.participant_id, participant.role)
    return ConversationListResponse(conversations=conversations)


@messages_router.post(
    "/conversations",
    response_model=ConversationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_conversation(
    payload: ConversationCreate,
    user: UserTokenData = Depends(require_adopter),
    service: MessagingService = Depends(get_messaging_service),
):
    """Open (or reuse) the inquiry thread with a shelter and post the first message."""
    conversation = await service.create_conversation(
        adopter_id=user.user_id,
        shelter_id=payload.shelter_id,
        initial_message=payload.message,
        pet_id=payload.pet_id,
    )
    return ConversationResponse(conversation=conversation)


@messages_router.get("/conversations/{conversation_id}", response_model=ConversationDetailResponse)
async def get_conversation(
    conversation_id: UUID,
    limit: Optional[int] = Query(None, ge=1, le=200),
    user: UserTokenData = Depends(get_current_user),
    service: MessagingService = Depends(get_messaging_service),
):
    conversation = await _authorized_conversation(service, conversation_id, user)
    messages = await service.get_messages(conversation_id, limit)
    return ConversationDetailResponse(conversation=conversation, messages=messages)


@messages_router.patch("/conversations/{conversation_id}", response_model=ConversationResponse)
async def update_conversation(
    conversation_id: UUID,
    payload: ConversationStatusUpdate,
    user: UserTokenData = Depends(get_current_user),
    service: MessagingService = Depends(get_messaging_service),
):
    await _authorized_conversation(service, conversation_id, user)
    conversation = await service.update_conversation_status(conversation_id, payload.status)
    return ConversationResponse(conversation=conversation)


@messages_router.post(
    "/send",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(SEND_MESSAGE_LIMIT)
async def send_message(
    request: Request,
    payload: MessageCreate,
    user: UserTokenData = Depends(get_current_user),
    service: MessagingService = Depends(get_messaging_service),
):
    await _authorized_conversation(service, payload.conversation_id, user)
    message = await service.send_message(payload.conversation_id, user.user_id, payload.content)
    return MessageResponse(message=message)


@messages_router.post("/read", response_model=MarkReadResponse)
async def mark_read(
    payload: MarkReadRequest,
    user: UserTokenData = Depends(get_current_user),
    service: MessagingService = Depends(get_messaging_service),
):
    await _authorized_conversation(service, payload.conversation_id, user)
    updated = await service.mark_messages_as_read(payload.conversation_id, user.user_id)
    return MarkReadResponse(success=True, updated=updated)


@messages_router.get("/unread-count", response_model=UnreadCountResponse)
async def unread_count(
    participant: Participant = Depends(get_participant),
    service: MessagingService = Depends(get_messaging_service),
):
    count = await service.get_unread_message_count(participant.participant_id, participant.role)
    return UnreadCountResponse(unread_count=count)
