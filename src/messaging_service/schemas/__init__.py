from .conversation import (
    ConversationCreate,
    ConversationDetailResponse,
    ConversationListResponse,
    ConversationRead,
    ConversationResponse,
    ConversationStatusUpdate,
    ConversationWithDetails,
    MarkReadRequest,
    MarkReadResponse,
    MessageCreate,
    MessageRead,
    MessageResponse,
    MessageWithSender,
    Participant,
    ParticipantRole,
    PetRead,
    ShelterRead,
    UnreadCountResponse,
    UserRead,
)

__all__ = [
    "ConversationCreate",
    "ConversationDetailResponse",
    "ConversationListResponse",
    "ConversationRead",
    "ConversationResponse",
    "ConversationStatusUpdate",
    "ConversationWithDetails",
    "MarkReadRequest",
    "MarkReadResponse",
    "MessageCreate",
    "MessageRead",
    "MessageResponse",
    "MessageWithSender",
    "Participant",
    "ParticipantRole",
    "PetRead",
    "ShelterRead",
    "UnreadCountResponse",
    "UserRead",
]
