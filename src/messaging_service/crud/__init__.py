from messaging_service.crud.conversations import (
    add_conversation,
    find_conversation,
    get_conversation_row,
    get_shelter_by_user,
    list_conversation_rows,
    participant_clause,
)
from messaging_service.crud.messages import (
    add_message,
    count_unread,
    count_unread_for_participant,
    get_latest_message,
    list_recent_messages,
    mark_read,
)

__all__ = [
    # Conversation queries
    "add_conversation",
    "find_conversation",
    "get_conversation_row",
    "get_shelter_by_user",
    "list_conversation_rows",
    "participant_clause",

    # Message queries
    "add_message",
    "count_unread",
    "count_unread_for_participant",
    "get_latest_message",
    "list_recent_messages",
    "mark_read",
]
