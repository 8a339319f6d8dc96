from enum import Enum

from sqlalchemy import JSON, Column, Enum as SQLAEnum, ForeignKey, String, Text
from sqlalchemy.dialects.postgresql import UUID as pgUUID
from sqlalchemy.orm import relationship

from shared.models.base import Base, TimestampMixin, UUIDMixin

from .user import enum_values


class PetStatus(str, Enum):
    AVAILABLE = "available"
    PENDING = "pending"
    ADOPTED = "adopted"


class Shelter(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "shelters"

    # The account that operates this shelter and answers its conversations
    user_id = Column(
        pgUUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    address = Column(Text, nullable=True)
    website = Column(String(255), nullable=True)

    user = relationship("User")
    pets = relationship("Pet", back_populates="shelter")


class Pet(UUIDMixin, TimestampMixin, Base):
    __tablename__ = "pets"

    shelter_id = Column(
        pgUUID(as_uuid=True),
        ForeignKey("shelters.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    name = Column(String(255), nullable=False)
    type = Column(String(32), nullable=False)
    breed = Column(String(255), nullable=True)
    images = Column(JSON, nullable=True, default=list)
    status = Column(
        SQLAEnum(PetStatus, name="pet_status", values_callable=enum_values),
        nullable=False,
        default=PetStatus.AVAILABLE,
    )

    shelter = relationship("Shelter", back_populates="pets")
