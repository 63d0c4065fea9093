"""
Student Records - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, Callable, Dict

import pytest
from httpx import AsyncClient, ASGITransport
from faker import Faker

# Set testing environment (read once when app.core.config is imported)
os.environ['ENVIRONMENT'] = 'testing'
os.environ['LOG_FILE'] = ''
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['SESSION_PRUNE_INTERVAL_MINUTES'] = '0'

from app.core.config import Settings
from app.core.database import Database
from app.main import create_app
from app.services.credential_store import CredentialStore
from app.services.session_store import SessionStore
from app.services.student_store import StudentStore

fake = Faker()

ADMIN_CREDENTIALS = {"username": "admin", "password": "pass123"}


def fake_phone() -> str:
    return fake.numerify("(###) ###-####")


@pytest.fixture
def settings(tmp_path) -> Settings:
    """Settings pointing at a fresh SQLite file per test"""
    return Settings(
        ENVIRONMENT="testing",
        DATABASE_URL=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        SESSION_SECRET="test-session-secret",
        BCRYPT_ROUNDS=4,
        SESSION_PRUNE_INTERVAL_MINUTES=0,
        LOG_FILE="",
    )


@pytest.fixture
async def database(settings: Settings) -> AsyncGenerator[Database, None]:
    db = Database(settings)
    await db.create_all()
    yield db
    await db.dispose()


@pytest.fixture
def credential_store(database: Database, settings: Settings) -> CredentialStore:
    return CredentialStore(database, settings)


@pytest.fixture
def session_store(database: Database, settings: Settings) -> SessionStore:
    return SessionStore(database, settings)


@pytest.fixture
def student_store(database: Database) -> StudentStore:
    return StudentStore(database)


@pytest.fixture
async def app(settings: Settings):
    """App with its lifespan running (stores built, admin seeded)"""
    application = create_app(settings)
    async with application.router.lifespan_context(application):
        yield application


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac


@pytest.fixture
async def auth_client(client: AsyncClient) -> AsyncClient:
    """Client holding a session cookie for the default admin"""
    response = await client.post("/api/login", json=ADMIN_CREDENTIALS)
    assert response.status_code == 200
    return client


@pytest.fixture
def student_payload() -> Callable[..., Dict[str, str]]:
    """Factory for valid student request bodies"""
    def make(**overrides) -> Dict[str, str]:
        payload = {
            "name": fake.name()[:100],
            "class": fake.random_element(["Grade 1", "Grade 2", "Grade 3", "Grade 4", "Grade 5"]),
            "address": fake.address().replace("\n", ", ")[:500],
            "phone": fake_phone(),
            "rank": fake.random_element(["excellent", "good", "average", "needs-improvement"]),
        }
        payload.update(overrides)
        return payload
    return make
