from uuid import uuid4

import pytest
from beanie import init_beanie
from httpx import AsyncClient, ASGITransport
from mongomock_motor import AsyncMongoMockClient

from wayfarer_app.db import MODELS
from wayfarer_app.main import app
from wayfarer_app.core.realtime.connection_manager import get_publisher
from wayfarer_app.users.models.user_models import UserModel
from wayfarer_app.users.utils.get_current_user import get_current_user


class FakePublisher:
    """Records every publish call instead of pushing to sockets."""

    def __init__(self):
        self.events = []

    async def publish(self, room, event, payload):
        self.events.append((room, event, payload))

    def events_named(self, event):
        return [e for e in self.events if e[1] == event]


@pytest.fixture(autouse=True)
async def db():
    client = AsyncMongoMockClient(uuidRepresentation="standard")
    database = client.get_database(f"wayfarer_test_{uuid4().hex[:8]}")
    await init_beanie(database=database, document_models=MODELS)
    yield database


@pytest.fixture
def publisher():
    return FakePublisher()


@pytest.fixture
def make_user():
    async def _make(**fields):
        handle = uuid4().hex[:8]
        fields.setdefault("full_name", f"User {handle}")
        fields.setdefault("user_name", handle)
        user = UserModel(email=f"{handle}@example.com", **fields)
        await user.insert()
        return user

    return _make


@pytest.fixture
def client_as(publisher):
    """Build an HTTP client authenticated as the given user."""

    def _client(user):
        app.dependency_overrides[get_current_user] = lambda: user
        app.dependency_overrides[get_publisher] = lambda: publisher
        return AsyncClient(transport=ASGITransport(app=app), base_url="http://test")

    yield _client
    app.dependency_overrides.clear()
