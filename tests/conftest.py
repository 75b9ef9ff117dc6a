import os

os.environ.setdefault("JWT_SECRET", "test-signing-key")
os.environ.setdefault("DB_URL", "sqlite+aiosqlite:///:memory:")
os.environ["GCP_BUCKET_NAME"] = ""
os.environ["GOOGLE_API_KEY"] = ""

import httpx
import pytest

from app.core.db.engine import build_engine, build_session_factory, get_db_util, init_models
from app.core.llm import get_fast_reasoning_client, get_reasoning_client
from app.core.maps import get_maps_client
from app.core.vision import get_vision_client
from app.main import app
from app.modules.users.auth import AuthService
from app.modules.users.models import User
from tests.fakes import FakeMapsClient, FakeReasoningClient, FakeVisionClient


@pytest.fixture
async def engine(tmp_path):
    test_engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'movex-test.db'}")
    await init_models(test_engine)
    yield test_engine
    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return build_session_factory(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
async def owner_id(db):
    user = User(email="owner@example.com", password="x", first_name="Owner")
    db.add(user)
    await db.flush()
    return user.id


@pytest.fixture
async def other_owner_id(db):
    user = User(email="other@example.com", password="x", first_name="Other")
    db.add(user)
    await db.flush()
    return user.id


@pytest.fixture
def fake_llm():
    return FakeReasoningClient()


@pytest.fixture
def fake_maps():
    return FakeMapsClient()


@pytest.fixture
def fake_vision():
    return FakeVisionClient()


@pytest.fixture
async def client(session_factory, fake_llm, fake_maps, fake_vision):
    async def override_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_util] = override_db
    app.dependency_overrides[get_reasoning_client] = lambda: fake_llm
    app.dependency_overrides[get_fast_reasoning_client] = lambda: fake_llm
    app.dependency_overrides[get_maps_client] = lambda: fake_maps
    app.dependency_overrides[get_vision_client] = lambda: fake_vision

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http:
        yield http
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session_factory):
    async def _make(email: str, first_name: str = "Test"):
        async with session_factory() as session:
            user = User(
                email=email,
                password=AuthService.get_password_hash("secret123"),
                first_name=first_name,
            )
            session.add(user)
            await session.commit()
            await session.refresh(user)
        token = AuthService.create_access_token({"sub": user.id, "email": user.email})
        return user.id, {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture
async def alice(make_user):
    return await make_user("alice@example.com", "Alice")


@pytest.fixture
async def bob(make_user):
    return await make_user("bob@example.com", "Bob")
