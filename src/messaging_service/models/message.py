from enum import Enum

from sqlalchemy import Column, Enum as SQLAEnum, ForeignKey, Text
from sqlalchemy.dialects.postgresql import UUID as pgUUID
from sqlalchemy.orm import relationship

from shared.models.base import Base, TimestampMixin, UTCDateTime, UUIDMixin

from .user import enum_values


class MessageStatus(str, Enum):
    """Delivery state of a message. Only ever moves forward."""

    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"


class Message(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "messages"

    conversation_id = Column(
        pgUUID(as_uuid=True),
        ForeignKey("conversations.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    sender_id = Column(
        pgUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
    )
    content = Column(Text, nullable=False)
    status = Column(
        SQLAEnum(MessageStatus, name="message_status", values_callable=enum_values),
        nullable=False,
        default=MessageStatus.SENT,
        index=True,
    )
    # Set exactly when status becomes READ
    read_at = Column(UTCDateTime(), nullable=True)

    # Relationships
    conversation = relationship("Conversation", back_populates="messages")
    sender = relationship("User")
