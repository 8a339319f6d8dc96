"""
Consumer-side merging of the two message streams a chat view receives.

A sender sees its own message twice: once from the send response and once
as the realtime echo, in either order. Realtime delivery is at-least-once and
unordered relative to REST, so the message id is the only reliable key.
Messages here are plain dicts as decoded from JSON (``id``, ``sender_id``,
``created_at`` as ISO strings).
"""

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

Message = Dict[str, Any]


def _sort_key(message: Message) -> str:
    return str(message.get("created_at") or "")


def merge_message(known: List[Message], incoming: Message) -> List[Message]:
    """
    Add or replace `incoming` by id and return the list ordered by created_at.

    A realtime row lacks the sender profile, so fields already known for the
    same id are kept and overlaid with the newer values.
    """
    merged: Dict[str, Message] = {str(m["id"]): m for m in known}
    key = str(incoming["id"])
    existing = merged.get(key)
    merged[key] = {**existing, **incoming} if existing else dict(incoming)
    return sorted(merged.values(), key=_sort_key)


def apply_to_summary(summary: Dict[str, Any], message: Message, viewer_id: str) -> Dict[str, Any]:
    """
    Fold one newly seen message into a conversation summary.

    The unread counter only moves for messages the viewer did not send, and
    only once per message id; ids already folded in are tracked under
    ``seen_message_ids``.
    """
    message_id = str(message["id"])
    seen = set(summary.get("seen_message_ids") or ())
    last = summary.get("last_message") or {}
    if message_id in seen or str(last.get("id")) == message_id:
        return dict(summary)

    updated = dict(summary)
    updated["seen_message_ids"] = seen | {message_id}
    updated["last_message"] = message
    updated["last_message_at"] = message.get("created_at")
    if str(message.get("sender_id")) != str(viewer_id):
        updated["unread_count"] = int(summary.get("unread_count") or 0) + 1
    return updated


class ConversationFeed:
    """
    The message list of one open conversation as a viewer sees it.

    Optimistic entries live under a client token until the send response
    confirms them (or the send fails and they are discarded); confirmed
    messages are keyed by id so echoes never duplicate.
    """

    def __init__(self, conversation_id: str, viewer_id: str, messages: Optional[List[Message]] = None):
        self.conversation_id = str(conversation_id)
        self.viewer_id = str(viewer_id)
        self.messages: List[Message] = []
        self._pending: Dict[str, Message] = {}
        for message in messages or []:
            self.receive(message)

    @property
    def entries(self) -> List[Message]:
        """Confirmed messages followed by pending optimistic ones."""
        return self.messages + list(self._pending.values())

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def known_ids(self) -> set:
        return {str(m["id"]) for m in self.messages}

    def add_pending(self, content: str) -> str:
        token = uuid.uuid4().hex
        self._pending[token] = {
            "client_token": token,
            "conversation_id": self.conversation_id,
            "sender_id": self.viewer_id,
            "content": content,
            "status": "pending",
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        return token

    def discard(self, token: str) -> Optional[Message]:
        """Roll back an optimistic entry; the caller restores its content to the input."""
        return self._pending.pop(token, None)

    def confirm(self, token: str, message: Message) -> bool:
        """Replace the optimistic entry with the stored message. Returns True if the id was new."""
        self._pending.pop(token, None)
        return self.receive(message)

    def receive(self, message: Message) -> bool:
        """Merge a message from any stream. Returns True if its id was not known yet."""
        if str(message.get("conversation_id")) != self.conversation_id:
            return False
        is_new = str(message["id"]) not in self.known_ids()
        self.messages = merge_message(self.messages, message)
        return is_new
