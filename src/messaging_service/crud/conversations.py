"""
Query helpers for conversations.

Functions here only shape SQL and stage ORM objects; committing and error
translation belong to the messaging service.
"""

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import Row, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Conversation, Pet, Shelter, User
from ..schemas.conversation import ParticipantRole


def _details_query():
    # Adopter and shelter are required participants; rows missing either are
    # dropped by the inner joins. The pet is optional.
    return (
        select(Conversation, User, Shelter, Pet)
        .join(User, Conversation.adopter_id == User.id)
        .join(Shelter, Conversation.shelter_id == Shelter.id)
        .outerjoin(Pet, Conversation.pet_id == Pet.id)
    )


def participant_clause(participant_id: UUID, role: ParticipantRole):
    """Adopters are matched on their user id, shelters on their shelter id."""
    if role == ParticipantRole.ADOPTER:
        return Conversation.adopter_id == participant_id
    return Conversation.shelter_id == participant_id


async def list_conversation_rows(
    db: AsyncSession, participant_id: UUID, role: ParticipantRole
) -> Sequence[Row]:
    """
    Get (conversation, adopter, shelter, pet) rows for one participant.

    Conversations without messages have no last_message_at and fall back to
    their creation time for ordering.
    """
    query = (
        _details_query()
        .where(participant_clause(participant_id, role))
        .order_by(
            func.coalesce(Conversation.last_message_at, Conversation.created_at).desc()
        )
    )
    result = await db.execute(query)
    return result.all()


async def get_conversation_row(db: AsyncSession, conversation_id: UUID) -> Optional[Row]:
    result = await db.execute(
        _details_query().where(Conversation.id == conversation_id).limit(1)
    )
    return result.first()


async def find_conversation(
    db: AsyncSession,
    adopter_id: UUID,
    shelter_id: UUID,
    pet_id: Optional[UUID] = None,
) -> Optional[Conversation]:
    """Exact match on the participant triple; a missing pet only matches NULL."""
    pet_clause = Conversation.pet_id == pet_id if pet_id else Conversation.pet_id.is_(None)
    result = await db.execute(
        select(Conversation)
        .where(
            Conversation.adopter_id == adopter_id,
            Conversation.shelter_id == shelter_id,
            pet_clause,
        )
        .order_by(Conversation.created_at.asc())
        .limit(1)
    )
    return result.scalars().first()


async def add_conversation(
    db: AsyncSession,
    adopter_id: UUID,
    shelter_id: UUID,
    pet_id: Optional[UUID] = None,
) -> Conversation:
    conversation = Conversation(adopter_id=adopter_id, shelter_id=shelter_id, pet_id=pet_id)
    db.add(conversation)
    # Flush to get ID assigned
    await db.flush()
    return conversation


async def get_shelter_by_user(db: AsyncSession, user_id: UUID) -> Optional[Shelter]:
    """The shelter operated by an account, if any."""
    result = await db.execute(select(Shelter).where(Shelter.user_id == user_id).limit(1))
    return result.scalars().first()

