"""
Test configuration and fixtures.

Provides:
- Fresh in-memory SQLite schema per test
- Users per role with bearer tokens minted like the session provider's
- HTTPX AsyncClient with the database dependency overridden
"""
import os
import uuid
from dataclasses import dataclass
from typing import AsyncGenerator, Callable, Generator

# Must be set before the app (and its settings) are imported
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("AUTH_JWT_SECRET", "test-secret-with-at-least-32-bytes!!")
os.environ["TESTING"] = "1"

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.orm import Session

from crm.core.deps import get_db
from crm.core.security import create_access_token
from crm.db.base import Base
from crm.db.enums import Role
from crm.db.models import Pipeline, User
from crm.db.session import SessionLocal, engine
from crm.main import app
from crm.services import pipeline_service


# =============================================================================
# Database Fixtures
# =============================================================================

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Session over a freshly created schema.

    App code commits freely; the schema is dropped after each test.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(bind=engine)


def create_test_user(db: Session, role: Role = Role.ADMIN) -> User:
    suffix = uuid.uuid4().hex[:8]
    user = User(
        id=f"user-{suffix}",
        email=f"{role.value}-{suffix}@test.com",
        first_name="Test",
        last_name=role.value.title(),
        role=role.value,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture(scope="function")
def test_user(db: Session) -> User:
    """Admin user."""
    return create_test_user(db, Role.ADMIN)


@pytest.fixture(scope="function")
def pipeline(db: Session) -> Pipeline:
    """Pipeline "Sales" with stages Prospecting (0) and Proposal (1)."""
    return pipeline_service.create_pipeline(
        db,
        name="Sales",
        stages=[{"title": "Prospecting"}, {"title": "Proposal"}],
    )


# =============================================================================
# Auth Fixtures
# =============================================================================

@dataclass
class TestAuth:
    """Test authentication context."""
    user: User
    token: str

    @property
    def headers(self) -> dict[str, str]:
        return {"Authorization": f"Bearer {self.token}"}


def auth_for(user: User) -> TestAuth:
    return TestAuth(user=user, token=create_access_token(user.id, email=user.email))


@pytest.fixture(scope="function")
def test_auth(test_user: User) -> TestAuth:
    """Bearer token for the admin test user."""
    return auth_for(test_user)


# =============================================================================
# Client Fixtures
# =============================================================================

@pytest.fixture(scope="function")
async def client(db: Session) -> AsyncGenerator[AsyncClient, None]:
    """
    Create unauthenticated AsyncClient for testing public endpoints.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def authed_client(
    db: Session,
    test_auth: TestAuth,
) -> AsyncGenerator[AsyncClient, None]:
    """
    Create AsyncClient authenticated as the admin test user.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
        headers=test_auth.headers,
    ) as c:
        yield c

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
async def client_for_role(
    db: Session,
) -> AsyncGenerator[Callable[[Role], tuple[AsyncClient, User]], None]:
    """
    Factory: `client, user = client_for_role(Role.VENDEDOR)`.

    Each call creates a new user with that role.
    """
    def override_get_db():
        yield db

    app.dependency_overrides[get_db] = override_get_db
    clients: list[AsyncClient] = []

    def make(role: Role) -> tuple[AsyncClient, User]:
        user = create_test_user(db, role)
        c = AsyncClient(
            transport=ASGITransport(app=app),
            base_url="http://test",
            headers=auth_for(user).headers,
        )
        clients.append(c)
        return c, user

    yield make

    for c in clients:
        await c.aclose()
    app.dependency_overrides.clear()
