from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from .. import crud
from ..config import settings
from ..exceptions import MessagingError, NotFoundError
from ..logging_config import logger
from ..models import Conversation, ConversationStatus, Message, Pet, Shelter, User
from ..schemas.conversation import (
    ConversationRead,
    ConversationWithDetails,
    MessageRead,
    MessageWithSender,
    ParticipantRole,
    PetRead,
    ShelterRead,
    UserRead,
)
from .realtime import ConnectionManager


def _with_details(
    conversation: Conversation,
    adopter: User,
    shelter: Shelter,
    pet: Optional[Pet],
    last_message: Optional[Message],
    unread_count: int = 0,
) -> ConversationWithDetails:
    return ConversationWithDetails(
        **ConversationRead.model_validate(conversation).model_dump(),
        adopter=UserRead.model_validate(adopter),
        shelter=ShelterRead.model_validate(shelter),
        pet=PetRead.model_validate(pet) if pet is not None else None,
        last_message=MessageRead.model_validate(last_message) if last_message is not None else None,
        unread_count=unread_count,
    )


def _with_sender(message: Message, sender: User) -> MessageWithSender:
    return MessageWithSender(
        **MessageRead.model_validate(message).model_dump(),
        sender=UserRead.model_validate(sender),
    )


class MessagingService:
    """
    Sole authority over conversation and message state.

    Every operation is a single attempt against the store. Failures are
    logged and re-raised as MessagingError (NotFoundError for missing rows),
    except get_unread_message_count, which degrades to 0.
    """

    def __init__(self, db: AsyncSession, publisher: Optional[ConnectionManager] = None) -> None:
        self._db = db
        self._publisher = publisher

    async def list_conversations(
        self, participant_id: UUID, role: ParticipantRole
    ) -> List[ConversationWithDetails]:
        """
        Every conversation of one participant, newest activity first.

        Adopters pass their user id, shelters their shelter id. Each entry
        carries the adopter, shelter, pet, newest message and the caller's
        unread count.
        """
        role = ParticipantRole(role)
        try:
            rows = await crud.list_conversation_rows(self._db, participant_id, role)
            conversations: List[ConversationWithDetails] = []
            for conversation, adopter, shelter, pet in rows:
                reader_id = adopter.id if role == ParticipantRole.ADOPTER else shelter.user_id
                last_message = await crud.get_latest_message(self._db, conversation.id)
                unread = await crud.count_unread(self._db, conversation.id, reader_id)
                conversations.append(
                    _with_details(conversation, adopter, shelter, pet, last_message, unread)
                )
            return conversations
        except SQLAlchemyError as e:
            logger.error(f"Error fetching conversations for {role.value} {participant_id}: {e}", exc_info=True)
            raise MessagingError("Failed to fetch conversations") from e

    async def get_conversation(self, conversation_id: UUID) -> Optional[ConversationWithDetails]:
        """The conversation with participants and newest message; unread_count is always 0."""
        try:
            row = await crud.get_conversation_row(self._db, conversation_id)
            if row is None:
                return None
            conversation, adopter, shelter, pet = row
            last_message = await crud.get_latest_message(self._db, conversation.id)
            return _with_details(conversation, adopter, shelter, pet, last_message)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching conversation {conversation_id}: {e}", exc_info=True)
            raise MessagingError("Failed to fetch conversation") from e

    async def get_messages(
        self, conversation_id: UUID, limit: Optional[int] = None
    ) -> List[MessageWithSender]:
        """The most recent `limit` messages, oldest first, each with its sender."""
        if limit is None:
            limit = settings.MESSAGE_HISTORY_LIMIT
        try:
            pairs = await crud.list_recent_messages(self._db, conversation_id, limit)
        except SQLAlchemyError as e:
            logger.error(f"Error fetching messages for {conversation_id}: {e}", exc_info=True)
            raise MessagingError("Failed to fetch messages") from e
        # Fetched newest-first to apply the limit; shown oldest-first
        return [_with_sender(message, sender) for message, sender in reversed(pairs)]

    async def create_conversation(
        self,
        adopter_id: UUID,
        shelter_id: UUID,
        initial_message: str,
        pet_id: Optional[UUID] = None,
    ) -> ConversationWithDetails:
        """
        Find-or-create the (adopter, shelter, pet) conversation and append
        `initial_message` from the adopter.

        Repeating the call reuses the conversation and adds another message.
        """
        try:
            conversation = await crud.find_conversation(self._db, adopter_id, shelter_id, pet_id)
            if conversation is None:
                conversation = await self._insert_conversation(adopter_id, shelter_id, pet_id)
            conversation_id = conversation.id
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error(f"Error creating conversation: {e}", exc_info=True)
            raise MessagingError("Failed to create conversation") from e

        await self.send_message(conversation_id, adopter_id, initial_message)

        details = await self.get_conversation(conversation_id)
        if details is None:
            raise MessagingError("Failed to retrieve created conversation")
        return details

    async def _insert_conversation(
        self, adopter_id: UUID, shelter_id: UUID, pet_id: Optional[UUID]
    ) -> Conversation:
        """
        Insert the conversation row. A unique-index violation means a
        concurrent request created the same triple first, and its row is
        reused; any other integrity failure is an unknown participant.
        """
        try:
            conversation = await crud.add_conversation(self._db, adopter_id, shelter_id, pet_id)
        except IntegrityError as e:
            await self._db.rollback()
            existing = await crud.find_conversation(self._db, adopter_id, shelter_id, pet_id)
            if existing is None:
                logger.error(f"Error creating conversation: {e}", exc_info=True)
                raise NotFoundError("Adopter, shelter or pet not found") from e
            logger.info(f"Reusing conversation {existing.id} created by a concurrent request")
            return existing
        logger.info(
            f"Created conversation {conversation.id} between adopter {adopter_id} "
            f"and shelter {shelter_id}"
        )
        return conversation

    async def send_message(
        self, conversation_id: UUID, sender_id: UUID, content: str
    ) -> MessageWithSender:
        """
        Insert a SENT message, stamp the conversation's last_message_at in the
        same transaction, then publish the raw row to realtime subscribers.
        """
        try:
            message = await crud.add_message(self._db, conversation_id, sender_id, content)
            sender = await self._db.get(User, sender_id)
            if sender is None:
                raise NotFoundError("Sender not found")
            conversation = await self._db.get(Conversation, conversation_id)
            if conversation is None:
                raise NotFoundError("Conversation not found")
            conversation.last_message_at = message.created_at
            await self._db.commit()
        except NotFoundError:
            await self._db.rollback()
            raise
        except IntegrityError as e:
            # Unknown sender or conversation violates a foreign key
            await self._db.rollback()
            logger.error(f"Error sending message to {conversation_id}: {e}", exc_info=True)
            raise NotFoundError("Conversation or sender not found") from e
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error(f"Error sending message to {conversation_id}: {e}", exc_info=True)
            raise MessagingError("Failed to send message") from e

        if self._publisher is not None:
            await self._publisher.publish_message_insert(message)
        return _with_sender(message, sender)

    async def mark_messages_as_read(self, conversation_id: UUID, user_id: UUID) -> int:
        """Mark everything the other side sent as read; returns how many rows changed."""
        try:
            updated = await crud.mark_read(self._db, conversation_id, user_id)
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error(f"Error marking messages as read in {conversation_id}: {e}", exc_info=True)
            raise MessagingError("Failed to mark messages as read") from e
        if updated:
            logger.debug(f"Marked {updated} messages read in {conversation_id} for {user_id}")
        return updated

    async def get_unread_message_count(self, participant_id: UUID, role: ParticipantRole) -> int:
        """
        Total unread messages across the participant's conversations.

        Best effort: a failed query is logged and reported as 0 so badge
        counters never break the page.
        """
        role = ParticipantRole(role)
        try:
            return await crud.count_unread_for_participant(self._db, participant_id, role)
        except Exception as e:
            logger.error(f"Error getting unread message count: {e}", exc_info=True)
            try:
                await self._db.rollback()
            except SQLAlchemyError:
                logger.warning("Rollback after unread count failure also failed")
            return 0

    async def update_conversation_status(
        self, conversation_id: UUID, status: ConversationStatus
    ) -> ConversationWithDetails:
        """Archive, close or reopen a conversation. Conversations are never deleted."""
        try:
            conversation = await self._db.get(Conversation, conversation_id)
            if conversation is None:
                raise NotFoundError("Conversation not found")
            conversation.status = ConversationStatus(status)
            await self._db.commit()
        except SQLAlchemyError as e:
            await self._db.rollback()
            logger.error(f"Error updating conversation {conversation_id}: {e}", exc_info=True)
            raise MessagingError("Failed to update conversation") from e
        logger.info(f"Conversation {conversation_id} is now {conversation.status.value}")

        details = await self.get_conversation(conversation_id)
        if details is None:
            raise NotFoundError("Conversation not found")
        return details
