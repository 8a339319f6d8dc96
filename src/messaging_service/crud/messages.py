"""
Query helpers for messages and the unread/read bookkeeping.

A message is unread for a reader when its status is still SENT and someone
other than the reader sent it.
"""

from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from shared.models.base import utcnow

from ..models import Conversation, Message, MessageStatus, Shelter, User
from ..schemas.conversation import ParticipantRole
from .conversations import participant_clause


async def get_latest_message(db: AsyncSession, conversation_id: UUID) -> Optional[Message]:
    result = await db.execute(
        select(Message)
        .where(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.desc())
        .limit(1)
    )
    return result.scalars().first()


async def count_unread(db: AsyncSession, conversation_id: UUID, reader_id: UUID) -> int:
    """Unread messages in one conversation for the given reader (a user id)."""
    total = await db.scalar(
        select(func.count(Message.id)).where(
            Message.conversation_id == conversation_id,
            Message.status == MessageStatus.SENT,
            Message.sender_id != reader_id,
        )
    )
    return total or 0


async def count_unread_for_participant(
    db: AsyncSession, participant_id: UUID, role: ParticipantRole
) -> int:
    """
    Unread messages across every conversation of one participant.

    Shelters are addressed by shelter id but read through the account that
    operates them, so their own replies are excluded via shelters.user_id.
    """
    query = (
        select(func.count(Message.id))
        .join(Conversation, Message.conversation_id == Conversation.id)
        .where(
            participant_clause(participant_id, role),
            Message.status == MessageStatus.SENT,
        )
    )
    if role == ParticipantRole.ADOPTER:
        query = query.where(Message.sender_id != participant_id)
    else:
        query = query.join(Shelter, Conversation.shelter_id == Shelter.id).where(
            Message.sender_id != Shelter.user_id
        )
    total = await db.scalar(query)
    return total or 0


async def list_recent_messages(
    db: AsyncSession, conversation_id: UUID, limit: int = 50
) -> List[Tuple[Message, User]]:
    """Newest-first page of (message, sender) pairs; senders that no longer exist are skipped."""
    result = await db.execute(
        select(Message, User)
        .join(User, Message.sender_id == User.id)
        .where(Message.conversation_id == conversation_id)
        .order_by(Message.created_at.desc())
        .limit(limit)
    )
    return [(message, sender) for message, sender in result.all()]


async def add_message(
    db: AsyncSession, conversation_id: UUID, sender_id: UUID, content: str
) -> Message:
    message = Message(
        conversation_id=conversation_id,
        sender_id=sender_id,
        content=content,
        status=MessageStatus.SENT,
        read_at=None,
    )
    db.add(message)
    await db.flush()
    return message


async def mark_read(db: AsyncSession, conversation_id: UUID, reader_id: UUID) -> int:
    """
    Move the reader's unread messages to READ and stamp read_at.

    Only SENT rows match, so repeated calls are no-ops and the reader's own
    messages are never touched.
    """
    result = await db.execute(
        update(Message)
        .where(
            Message.conversation_id == conversation_id,
            Message.sender_id != reader_id,
            Message.status == MessageStatus.SENT,
        )
        .values(status=MessageStatus.READ, read_at=utcnow())
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount or 0
