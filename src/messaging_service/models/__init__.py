from shared.models.base import Base

from .conversation import Conversation, ConversationStatus
from .message import Message, MessageStatus
from .shelter import Pet, PetStatus, Shelter
from .user import User

__all__ = [
    "Base",
    "Conversation",
    "ConversationStatus",
    "Message",
    "MessageStatus",
    "Pet",
    "PetStatus",
    "Shelter",
    "User",
]
