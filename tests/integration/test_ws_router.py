"""
WebSocket subscription tests. Most cases stub the conversation lookup so the
socket handshake can run on the TestClient's own event loop; the pooled
database case runs it against a real file database.
"""
import asyncio
import importlib
import json
import uuid
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import AsyncAdaptedQueuePool
from starlette.websockets import WebSocketDisconnect

from messaging_service.db import get_db
from messaging_service.main import app as fastapi_app
from messaging_service.models import Base, Conversation, Shelter, User
from messaging_service.schemas.conversation import ConversationWithDetails
from shared.schemas.user_schemas import UserRole

# The package re-exports the router object under the module name
ws_module = importlib.import_module("messaging_service.routers.ws_router")

ADOPTER_ID = uuid.uuid4()
SHELTER_USER_ID = uuid.uuid4()
CONVERSATION_ID = uuid.uuid4()


def build_conversation() -> ConversationWithDetails:
    now = datetime.now(timezone.utc)
    shelter_id = uuid.uuid4()
    return ConversationWithDetails.model_validate(
        {
            "id": CONVERSATION_ID,
            "adopter_id": ADOPTER_ID,
            "shelter_id": shelter_id,
            "pet_id": None,
            "status": "active",
            "last_message_at": None,
            "created_at": now,
            "updated_at": now,
            "adopter": {
                "id": ADOPTER_ID,
                "email": "ada@example.com",
                "first_name": "Ada",
                "last_name": "Adopter",
                "role": "adopter",
            },
            "shelter": {"id": shelter_id, "user_id": SHELTER_USER_ID, "name": "Happy Paws"},
        }
    )


class StubMessagingService:
    def __init__(self, db, publisher=None):
        pass

    async def get_conversation(self, conversation_id):
        return build_conversation() if conversation_id == CONVERSATION_ID else None


@pytest.fixture
def ws_client(monkeypatch):
    monkeypatch.setattr(ws_module, "MessagingService", StubMessagingService)
    return TestClient(fastapi_app)


def test_rejects_missing_token(ws_client):
    with pytest.raises(WebSocketDisconnect) as excinfo:
        with ws_client.websocket_connect(f"/ws/conversations/{CONVERSATION_ID}"):
            pass
    assert excinfo.value.code == 1008


def test_rejects_invalid_token(ws_client):
    with pytest.raises(WebSocketDisconnect) as excinfo:
        with ws_client.websocket_connect(f"/ws/conversations/{CONVERSATION_ID}?token=garbage"):
            pass
    assert excinfo.value.code == 1008


def test_rejects_non_participant(ws_client, make_token):
    token = make_token(uuid.uuid4())
    with pytest.raises(WebSocketDisconnect) as excinfo:
        with ws_client.websocket_connect(f"/ws/conversations/{CONVERSATION_ID}?token={token}"):
            pass
    assert excinfo.value.code == 1008


def test_participant_subscribes_with_query_token(ws_client, make_token):
    token = make_token(SHELTER_USER_ID, "shelter")
    with ws_client.websocket_connect(f"/ws/conversations/{CONVERSATION_ID}?token={token}") as ws:
        assert ws.receive_json() == {"type": "connected"}
        ws.send_text("ping")
        assert ws.receive_json() == {"type": "pong"}


def test_participant_subscribes_with_header(ws_client, make_token):
    headers = {"Authorization": f"Bearer {make_token(ADOPTER_ID)}"}
    with ws_client.websocket_connect(
        f"/ws/conversations/{CONVERSATION_ID}", headers=headers
    ) as ws:
        assert json.loads(ws.receive_text())["type"] == "connected"


async def _seed_conversation(url: str) -> dict:
    engine = create_async_engine(url)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        adopter = User(
            email="ada@example.com", first_name="Ada", last_name="Adopter", role=UserRole.ADOPTER
        )
        staff = User(
            email="staff@happypaws.org", first_name="Sam", last_name="Staff", role=UserRole.SHELTER
        )
        session.add_all([adopter, staff])
        await session.flush()
        shelter = Shelter(user_id=staff.id, name="Happy Paws")
        session.add(shelter)
        await session.flush()
        conversation = Conversation(adopter_id=adopter.id, shelter_id=shelter.id)
        session.add(conversation)
        await session.commit()
        ids = {"adopter_id": adopter.id, "conversation_id": conversation.id}
    await engine.dispose()
    return ids


@pytest.fixture
def single_connection_db(tmp_path):
    """A seeded file database behind a pool of exactly one connection."""
    url = f"sqlite+aiosqlite:///{tmp_path / 'messaging.db'}"
    ids = asyncio.run(_seed_conversation(url))
    engine = create_async_engine(
        url,
        poolclass=AsyncAdaptedQueuePool,
        pool_size=1,
        max_overflow=0,
        pool_timeout=1,
    )
    factory = async_sessionmaker(bind=engine, class_=AsyncSession, expire_on_commit=False)
    return engine, factory, ids


def test_open_socket_holds_no_database_connection(single_connection_db, make_token, monkeypatch):
    engine, factory, ids = single_connection_db

    async def override_get_db():
        async with factory() as session:
            yield session

    monkeypatch.setattr(ws_module, "get_session_factory", lambda: factory)
    fastapi_app.dependency_overrides[get_db] = override_get_db
    token = make_token(ids["adopter_id"])
    try:
        with TestClient(fastapi_app) as client:
            url = f"/ws/conversations/{ids['conversation_id']}?token={token}"
            with client.websocket_connect(url) as ws:
                assert ws.receive_json() == {"type": "connected"}
                # The only pooled connection must be free while the socket is open
                response = client.get("/health")
                assert response.status_code == 200, response.text
            client.portal.call(engine.dispose)
    finally:
        fastapi_app.dependency_overrides.clear()


def test_real_lookup_rejects_non_participant(single_connection_db, make_token, monkeypatch):
    engine, factory, ids = single_connection_db
    monkeypatch.setattr(ws_module, "get_session_factory", lambda: factory)
    token = make_token(uuid.uuid4())

    with TestClient(fastapi_app) as client:
        with pytest.raises(WebSocketDisconnect) as excinfo:
            with client.websocket_connect(f"/ws/conversations/{ids['conversation_id']}?token={token}"):
                pass
        client.portal.call(engine.dispose)

    assert excinfo.value.code == 1008
