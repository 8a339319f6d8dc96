"""
Unit tests for the in-process realtime fan-out.
"""
import json
import uuid
from datetime import datetime, timezone

import pytest

from messaging_service.models import Message, MessageStatus
from messaging_service.services.realtime import ConnectionManager, insert_event


class RecordingWebSocket:
    def __init__(self):
        self.accepted = False
        self.frames = []

    async def accept(self):
        self.accepted = True

    async def send_text(self, data: str):
        self.frames.append(json.loads(data))


class BrokenWebSocket(RecordingWebSocket):
    async def send_text(self, data: str):
        raise RuntimeError("socket closed")


def build_message(conversation_id=None) -> Message:
    now = datetime.now(timezone.utc)
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id or uuid.uuid4(),
        sender_id=uuid.uuid4(),
        content="Hello there",
        status=MessageStatus.SENT,
        read_at=None,
        created_at=now,
        updated_at=now,
    )


def test_insert_event_shape():
    message = build_message()

    event = insert_event(message)

    assert event["type"] == "INSERT"
    assert event["table"] == "messages"
    assert event["record"]["conversation_id"] == str(message.conversation_id)
    assert event["record"]["content"] == "Hello there"
    assert event["record"]["read_at"] is None


@pytest.mark.asyncio
async def test_publish_reaches_only_that_conversation():
    manager = ConnectionManager()
    conversation_id = uuid.uuid4()
    subscriber, bystander = RecordingWebSocket(), RecordingWebSocket()
    await manager.connect(str(conversation_id), subscriber)
    await manager.connect(str(uuid.uuid4()), bystander)

    delivered = await manager.publish_message_insert(build_message(conversation_id))

    assert delivered == 1
    assert subscriber.accepted
    assert len(subscriber.frames) == 1
    assert bystander.frames == []


@pytest.mark.asyncio
async def test_broken_sockets_are_dropped():
    manager = ConnectionManager()
    key = str(uuid.uuid4())
    healthy, broken = RecordingWebSocket(), BrokenWebSocket()
    await manager.connect(key, healthy)
    await manager.connect(key, broken)

    delivered = await manager.send_text(key, json.dumps({"type": "ping"}))

    assert delivered == 1
    assert manager.subscriber_count(key) == 1


@pytest.mark.asyncio
async def test_disconnect_forgets_empty_conversations():
    manager = ConnectionManager()
    key = str(uuid.uuid4())
    socket = RecordingWebSocket()
    await manager.connect(key, socket)

    manager.disconnect(key, socket)
    manager.disconnect(key, socket)

    assert manager.subscriber_count(key) == 0
    assert key not in manager.active_connections
