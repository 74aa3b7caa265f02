"""Shared fixtures.

Environment variables are set before any application module is imported,
because settings objects are built at import time.
"""

import os

os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///./pytest-unused.db"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["SCHEDULER_ENABLED"] = "false"
os.environ["LOG_FILE"] = ""
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["PASSWORD_HASH_ROUNDS"] = "4"
os.environ["JWT_ACCESS_SECRET"] = "test-access-secret-0123456789abcdefghij"
os.environ["JWT_REFRESH_SECRET"] = "test-refresh-secret-0123456789abcdefghij"
os.environ["RATE_LIMIT_ENABLED"] = "true"
os.environ["SENTRY_DSN"] = ""

import asyncio
from dataclasses import dataclass, field
from typing import Optional

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from auth_api.db import Base, get_db
import auth_api.models  # noqa: F401
from auth_api.services.email import EmailResult, get_mailer
from auth_api.services.google import GoogleAuthResponse, GoogleUser, get_google_client
from auth_api.services.s3 import get_storage

STRONG_PASSWORD = "Abcd123!"
USER_AGENT = "pytest-agent/1.0"


@dataclass
class SentEmail:
    kind: str
    to_email: str
    token: str


class FakeMailer:
    """Records mails instead of sending them."""

    def __init__(self):
        self.sent: list[SentEmail] = []

    async def send_verification_email(self, to_email: str, token: str) -> EmailResult:
        self.sent.append(SentEmail("verification", to_email, token))
        return EmailResult(success=True, message_id=f"fake-{len(self.sent)}")

    async def send_password_reset_email(self, to_email: str, token: str) -> EmailResult:
        self.sent.append(SentEmail("reset", to_email, token))
        return EmailResult(success=True, message_id=f"fake-{len(self.sent)}")

    def last_token(self, kind: str, to_email: str) -> Optional[str]:
        for email in reversed(self.sent):
            if email.kind == kind and email.to_email == to_email:
                return email.token
        return None


@dataclass
class FakeGoogleClient:
    """Maps authorization codes to Google identities."""

    users: dict[str, GoogleUser] = field(default_factory=dict)

    def authorization_url(self, state: Optional[str] = None) -> str:
        return f"https://accounts.google.com/o/oauth2/v2/auth?state={state or ''}"

    async def exchange_code(self, code: str) -> GoogleAuthResponse:
        user = self.users.get(code)
        if user is None:
            return GoogleAuthResponse(success=False, error="invalid_grant")
        return GoogleAuthResponse(success=True, user=user)


class FakeStorage:
    def __init__(self):
        self.uploads: list[tuple[str, bytes, Optional[str]]] = []

    @staticmethod
    def avatar_key(user_id) -> str:
        return f"avatars/{user_id}/avatar"

    async def upload_fileobj(self, file_obj, s3_key: str, content_type: Optional[str] = None) -> str:
        self.uploads.append((s3_key, file_obj.read(), content_type))
        return f"https://cdn.test/{s3_key}"


async def _create_tables(engine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'test.db'}"


@pytest.fixture
def session_factory(database_url):
    """Session factory on a fresh file database (for TestClient tests)."""
    engine = create_async_engine(database_url, poolclass=NullPool)
    asyncio.run(_create_tables(engine))
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    asyncio.run(engine.dispose())


@pytest_asyncio.fixture
async def db(database_url):
    """Async session on a fresh file database (for service-level tests)."""
    engine = create_async_engine(database_url, poolclass=NullPool)
    await _create_tables(engine)
    factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with factory() as session:
        yield session
    await engine.dispose()


@pytest.fixture
def mailer():
    return FakeMailer()


@pytest.fixture
def google_client():
    return FakeGoogleClient()


@pytest.fixture
def storage():
    return FakeStorage()


@pytest.fixture
def client(session_factory, mailer, google_client, storage):
    """TestClient with a fresh lifespan, so every test gets a new rate limiter."""
    from main import app

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.dependency_overrides[get_google_client] = lambda: google_client
    app.dependency_overrides[get_storage] = lambda: storage

    with TestClient(app, headers={"User-Agent": USER_AGENT}) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def run(coro):
    """Run a coroutine from a synchronous test."""
    return asyncio.run(coro)


def signup(client, email="a@b.com", password=STRONG_PASSWORD, first_name="A", last_name="B"):
    return client.post(
        "/api/v1/auth/signup",
        json={
            "email": email,
            "password": password,
            "confirmPassword": password,
            "firstName": first_name,
            "lastName": last_name,
        },
    )


def create_verified_user(client, mailer, email="a@b.com", password=STRONG_PASSWORD) -> dict:
    """Sign up and verify; costs two auth-policy requests."""
    response = signup(client, email=email, password=password)
    assert response.status_code == 201, response.json()
    token = mailer.last_token("verification", email)
    verify = client.post("/api/v1/auth/verify-email", json={"token": token})
    assert verify.status_code == 200, verify.json()
    return response.json()["data"]


def bearer(access_token: str) -> dict:
    return {"Authorization": f"Bearer {access_token}"}
