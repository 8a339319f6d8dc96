import os

from dotenv import load_dotenv

# Explicitly load the test environment variables before importing any app modules
dotenv_path = os.path.join(os.path.dirname(__file__), "..", ".env.test")
if os.path.exists(dotenv_path):
    load_dotenv(dotenv_path=dotenv_path, override=True)
else:
    print(f"Warning: .env.test file not found at {dotenv_path}")

import uuid
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Callable, Dict

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from jose import jwt
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from messaging_service.config import settings
from messaging_service.db import get_db
from messaging_service.models import Base, Pet, Shelter, User
from shared.schemas.user_schemas import UserRole

# Create a test-specific app instance
from messaging_service.main import app as fastapi_app

# Ensure the root_path is set to empty string for tests
fastapi_app.root_path = ""


@pytest_asyncio.fixture
async def engine():
    """A fresh in-memory database per test, with foreign keys enforced."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(test_engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield test_engine
    await test_engine.dispose()


@pytest_asyncio.fixture
async def db_session(engine) -> AsyncGenerator[AsyncSession, None]:
    factory = async_sessionmaker(
        bind=engine, class_=AsyncSession, autoflush=False, expire_on_commit=False
    )
    async with factory() as session:
        yield session


@pytest_asyncio.fixture
async def seed_data(db_session: AsyncSession) -> Dict[str, uuid.UUID]:
    """
    Two adopters, one shelter with its operating account and a pet, plus a
    shelter-role account that operates no shelter.

    Only ids are returned: a rollback inside the service expires loaded rows.
    """
    adopter = User(
        email="ada@example.com", first_name="Ada", last_name="Adopter", role=UserRole.ADOPTER
    )
    other_adopter = User(
        email="otto@example.com", first_name="Otto", last_name="Other", role=UserRole.ADOPTER
    )
    shelter_user = User(
        email="staff@happypaws.org", first_name="Sam", last_name="Staff", role=UserRole.SHELTER
    )
    orphan_shelter_user = User(
        email="nobody@example.org", first_name="No", last_name="Shelter", role=UserRole.SHELTER
    )
    db_session.add_all([adopter, other_adopter, shelter_user, orphan_shelter_user])
    await db_session.flush()

    shelter = Shelter(user_id=shelter_user.id, name="Happy Paws", address="1 Bark Street")
    db_session.add(shelter)
    await db_session.flush()

    pet = Pet(shelter_id=shelter.id, name="Biscuit", type="dog", breed="Beagle")
    db_session.add(pet)
    await db_session.commit()

    return {
        "adopter_id": adopter.id,
        "other_adopter_id": other_adopter.id,
        "shelter_user_id": shelter_user.id,
        "orphan_shelter_user_id": orphan_shelter_user.id,
        "shelter_id": shelter.id,
        "pet_id": pet.id,
    }


@pytest.fixture
def make_token() -> Callable[..., str]:
    """Sign a user token the way the auth service does."""

    def _make(user_id, role: str = "adopter", expires_in: int = 3600, secret: str = None) -> str:
        claims = {
            "sub": str(user_id),
            "role": role,
            "iss": settings.USER_JWT_ISSUER,
            "aud": settings.USER_JWT_AUDIENCE,
            "exp": datetime.now(timezone.utc) + timedelta(seconds=expires_in),
        }
        return jwt.encode(
            claims, secret or settings.USER_JWT_SECRET_KEY, algorithm=settings.USER_JWT_ALGORITHM
        )

    return _make


@pytest.fixture
def auth_headers(make_token) -> Callable[..., Dict[str, str]]:
    def _headers(user_id, role: str = "adopter") -> Dict[str, str]:
        return {"Authorization": f"Bearer {make_token(user_id, role)}"}

    return _headers


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client against the app with `get_db` bound to the test session.
    """

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    fastapi_app.dependency_overrides[get_db] = override_get_db
    transport = ASGITransport(app=fastapi_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
    fastapi_app.dependency_overrides.clear()
