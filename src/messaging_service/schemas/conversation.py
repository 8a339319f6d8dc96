from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..models.conversation import ConversationStatus
from ..models.message import MessageStatus
from ..models.shelter import PetStatus
from shared.schemas.user_schemas import UserRole


class ParticipantRole(str, Enum):
    """Which side of a conversation a caller acts for."""

    ADOPTER = "adopter"
    SHELTER = "shelter"


class Participant(BaseModel):
    """The side of a conversation a request acts for, resolved from the caller's token."""

    participant_id: UUID
    role: ParticipantRole
    user_id: UUID


class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    first_name: str
    last_name: str
    city: Optional[str] = None
    role: UserRole


class ShelterRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    user_id: UUID
    name: str
    description: Optional[str] = None
    address: Optional[str] = None
    website: Optional[str] = None


class PetRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    shelter_id: UUID
    name: str
    type: str
    breed: Optional[str] = None
    images: Optional[List[Any]] = None
    status: PetStatus


class MessageRead(BaseModel):
    """The raw message row, as persisted and as pushed over the realtime channel."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    conversation_id: UUID
    sender_id: UUID
    content: str
    status: MessageStatus
    read_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class MessageWithSender(MessageRead):
    sender: UserRead


class ConversationRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    adopter_id: UUID
    shelter_id: UUID
    pet_id: Optional[UUID] = None
    status: ConversationStatus
    last_message_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ConversationWithDetails(ConversationRead):
    adopter: UserRead
    shelter: ShelterRead
    pet: Optional[PetRead] = None
    last_message: Optional[MessageRead] = None
    unread_count: int = 0


# --- Request bodies ---


def _reject_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


class ConversationCreate(BaseModel):
    shelter_id: UUID
    pet_id: Optional[UUID] = None
    message: str = Field(..., min_length=1)

    @field_validator("message")
    @classmethod
    def message_not_blank(cls, value: str) -> str:
        return _reject_blank(value)


class ConversationStatusUpdate(BaseModel):
    status: ConversationStatus


class MessageCreate(BaseModel):
    conversation_id: UUID
    content: str = Field(..., min_length=1)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        return _reject_blank(value)


class MarkReadRequest(BaseModel):
    conversation_id: UUID


# --- Response envelopes ---


class ConversationListResponse(BaseModel):
    conversations: List[ConversationWithDetails]


class ConversationResponse(BaseModel):
    conversation: ConversationWithDetails


class ConversationDetailResponse(BaseModel):
    conversation: ConversationWithDetails
    messages: List[MessageWithSender]


class MessageResponse(BaseModel):
    message: MessageWithSender


class MarkReadResponse(BaseModel):
    success: bool = True
    updated: int = 0


class UnreadCountResponse(BaseModel):
    unread_count: int
