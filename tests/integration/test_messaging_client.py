"""
Tests for the httpx messaging client, run in-process against the app.
"""
import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport

from messaging_service.clients import MessagingClient, MessagingClientError
from messaging_service.db import get_db
from messaging_service.main import app as fastapi_app
from messaging_service.services.reconcile import ConversationFeed


@pytest_asyncio.fixture
async def app_transport(db_session):
    async def override_get_db():
        yield db_session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    yield ASGITransport(app=fastapi_app)
    fastapi_app.dependency_overrides.clear()


@pytest.mark.asyncio
async def test_client_round_trip(app_transport, seed_data, make_token):
    adopter_token = make_token(seed_data["adopter_id"])
    shelter_token = make_token(seed_data["shelter_user_id"], "shelter")

    async with MessagingClient("http://test", adopter_token, transport=app_transport) as adopter:
        conversation = await adopter.create_conversation(
            seed_data["shelter_id"], "Hello shelter", pet_id=seed_data["pet_id"]
        )
        listed = await adopter.list_conversations()
        assert [c["id"] for c in listed] == [conversation["id"]]

    async with MessagingClient("http://test", shelter_token, transport=app_transport) as shelter:
        assert await shelter.get_unread_count() == 1
        assert await shelter.mark_read(conversation["id"]) == 1
        assert await shelter.get_unread_count() == 0
        updated = await shelter.update_status(conversation["id"], "closed")
        assert updated["status"] == "closed"

        detail = await shelter.get_conversation(conversation["id"], limit=10)
        assert detail["messages"][0]["status"] == "read"


@pytest.mark.asyncio
async def test_optimistic_send_confirms_once(app_transport, seed_data, make_token):
    token = make_token(seed_data["adopter_id"])
    async with MessagingClient("http://test", token, transport=app_transport) as client:
        conversation = await client.create_conversation(seed_data["shelter_id"], "Hi")
        feed = ConversationFeed(conversation["id"], str(seed_data["adopter_id"]))

        stored = await client.send(feed, "Can I visit tomorrow?")
        # The realtime echo of the same row arrives afterwards
        is_new = feed.receive(dict(stored))

    assert is_new is False
    assert feed.pending_count == 0
    assert [m["content"] for m in feed.entries] == ["Can I visit tomorrow?"]


@pytest.mark.asyncio
async def test_failed_send_rolls_back(app_transport, seed_data, make_token):
    token = make_token(seed_data["other_adopter_id"])
    adopter_token = make_token(seed_data["adopter_id"])
    async with MessagingClient("http://test", adopter_token, transport=app_transport) as adopter:
        conversation = await adopter.create_conversation(seed_data["shelter_id"], "Hi")

    feed = ConversationFeed(conversation["id"], str(seed_data["other_adopter_id"]))
    async with MessagingClient("http://test", token, transport=app_transport) as stranger:
        with pytest.raises(MessagingClientError) as excinfo:
            await stranger.send(feed, "Not my conversation")

    assert excinfo.value.status_code == 403
    assert feed.entries == []


@pytest.mark.asyncio
async def test_unread_count_soft_fails():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(500, json={"detail": "boom"})

    async with MessagingClient("http://test", "token", transport=httpx.MockTransport(handler)) as client:
        assert await client.get_unread_count() == 0


@pytest.mark.asyncio
async def test_unread_count_soft_fails_when_unreachable():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    async with MessagingClient("http://test", "token", transport=httpx.MockTransport(handler)) as client:
        assert await client.get_unread_count() == 0


@pytest.mark.asyncio
async def test_unread_count_soft_fails_on_unexpected_body():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=[3])

    async with MessagingClient("http://test", "token", transport=httpx.MockTransport(handler)) as client:
        assert await client.get_unread_count() == 0


@pytest.mark.asyncio
async def test_other_calls_raise_on_error():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"detail": "Conversation not found"})

    async with MessagingClient("http://test", "token", transport=httpx.MockTransport(handler)) as client:
        with pytest.raises(MessagingClientError) as excinfo:
            await client.get_conversation("00000000-0000-0000-0000-000000000000")

    assert excinfo.value.status_code == 404
