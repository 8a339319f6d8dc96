from enum import Enum

from sqlalchemy import Column, Enum as SQLAEnum, ForeignKey, Index, text
from sqlalchemy.dialects.postgresql import UUID as pgUUID
from sqlalchemy.orm import relationship

from shared.models.base import Base, TimestampMixin, UTCDateTime, UUIDMixin

from .user import enum_values


class ConversationStatus(str, Enum):
    ACTIVE = "active"
    ARCHIVED = "archived"
    CLOSED = "closed"


class Conversation(UUIDMixin, TimestampMixin, Base):
    """
    One adopter talking to one shelter, optionally about one pet.

    At most one row exists per (adopter_id, shelter_id, pet_id), with a NULL
    pet_id forming its own bucket. Rows are archived through `status`, never
    deleted by the service.
    """

    __tablename__ = "conversations"
    __table_args__ = (
        # One conversation per participant triple; a NULL pet_id is its own bucket
        Index(
            "uq_conversations_adopter_shelter_pet",
            "adopter_id",
            "shelter_id",
            "pet_id",
            unique=True,
            postgresql_where=text("pet_id IS NOT NULL"),
            sqlite_where=text("pet_id IS NOT NULL"),
        ),
        Index(
            "uq_conversations_adopter_shelter_no_pet",
            "adopter_id",
            "shelter_id",
            unique=True,
            postgresql_where=text("pet_id IS NULL"),
            sqlite_where=text("pet_id IS NULL"),
        ),
    )

    adopter_id = Column(
        pgUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    shelter_id = Column(
        pgUUID(as_uuid=True),
        ForeignKey("shelters.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    pet_id = Column(
        pgUUID(as_uuid=True),
        ForeignKey("pets.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    status = Column(
        SQLAEnum(ConversationStatus, name="conversation_status", values_callable=enum_values),
        nullable=False,
        default=ConversationStatus.ACTIVE,
    )
    # Denormalized; written in the same transaction as every message insert
    last_message_at = Column(UTCDateTime(), nullable=True, index=True)

    # Relationships
    adopter = relationship("User")
    shelter = relationship("Shelter")
    pet = relationship("Pet")
    messages = relationship(
        "Message",
        back_populates="conversation",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
