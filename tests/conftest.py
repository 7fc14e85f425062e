"""
Test configuration and fixtures for pytest.

This module provides shared fixtures used across all tests:
- Test database (SQLite in-memory for speed)
- Test client (FastAPI TestClient) wired to mock providers
- Authentication helpers for personal and corporate users
- Mock provider adapters (no network calls, no token costs)
"""

import pytest
from datetime import datetime, timezone
from typing import Dict, Generator, Optional
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, Session
from sqlalchemy.pool import StaticPool

from medisage.main import app
from medisage.ai.providers.base import AIProvider, AIResponse, ProviderType, TokenUsage
from medisage.ai.router import TierRouter
from medisage.core.security import hash_password, create_access_token
from medisage.db.base import Base
from medisage.db.session import get_db
from medisage.models.user import User
from medisage.services.history_gateway import HistoryGateway, get_history_gateway
from medisage.services.query_orchestrator import QueryOrchestrator, get_orchestrator


# ---------------------------------------------------------------------------
# TEST DATABASE SETUP
# ---------------------------------------------------------------------------
# SQLite in-memory; StaticPool keeps one connection so every session
# (request sessions and the gateway's own) sees the same database

SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},  # History writes run in a worker thread
    poolclass=StaticPool,
)

TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ---------------------------------------------------------------------------
# PROVIDER HELPERS
# ---------------------------------------------------------------------------

def make_response(
    content: str = "",
    provider: ProviderType = ProviderType.TOGETHER,
    model: str = "test-model",
    data: Optional[dict] = None,
) -> AIResponse:
    """Build a successful AIResponse as an adapter would return it."""
    return AIResponse(
        content=content,
        provider=provider,
        model=model,
        usage=TokenUsage(prompt_tokens=10, completion_tokens=20),
        latency_ms=12.5,
        data=data,
    )


def make_mock_provider(provider_type: ProviderType) -> MagicMock:
    """A provider whose three public calls are AsyncMocks."""
    provider = MagicMock(spec=AIProvider)
    provider.provider_type = provider_type
    provider.generate_text = AsyncMock(
        return_value=make_response("Mock answer", provider=provider_type)
    )
    provider.generate_json = AsyncMock(
        return_value=make_response("{}", provider=provider_type, data={})
    )
    provider.analyze_image = AsyncMock(
        return_value=make_response("{}", provider=provider_type, data={})
    )
    return provider


# ---------------------------------------------------------------------------
# DATABASE FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """
    Create a fresh database for each test function.

    - Creates all tables
    - Yields a session for the test
    - Drops all tables after test (clean slate)
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def gateway(db: Session) -> HistoryGateway:
    """History gateway bound to the test database."""
    return HistoryGateway(session_factory=TestingSessionLocal)


# ---------------------------------------------------------------------------
# ORCHESTRATOR FIXTURES
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_providers() -> Dict[ProviderType, MagicMock]:
    """One mock adapter per provider type."""
    return {provider_type: make_mock_provider(provider_type) for provider_type in ProviderType}


@pytest.fixture
def orchestrator(mock_providers, gateway: HistoryGateway) -> QueryOrchestrator:
    """
    Orchestrator on the real registry and router, mock providers and the test database.
    """
    return QueryOrchestrator(
        router=TierRouter(),
        provider_resolver=mock_providers.__getitem__,
        gateway=gateway,
    )


@pytest.fixture(scope="function")
def client(
    db: Session, gateway: HistoryGateway, orchestrator: QueryOrchestrator
) -> Generator[TestClient, None, None]:
    """
    Create a test client with the test database and mock providers.
    """
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_history_gateway] = lambda: gateway
    app.dependency_overrides[get_orchestrator] = lambda: orchestrator

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# USER FIXTURES
# ---------------------------------------------------------------------------

def _create_user(db: Session, username: str, tier: str) -> User:
    user = User(
        id=uuid4(),
        username=username,
        email=f"{username}@example.com",
        hashed_password=hash_password("testpassword"),
        name=username.title(),
        tier=tier,
        is_active=True,
        created_at=datetime.now(timezone.utc),
        updated_at=datetime.now(timezone.utc),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def test_user(db: Session) -> User:
    """
    Create a personal-tier test user.

    Returns:
        User "testuser" with password "testpassword"
    """
    return _create_user(db, "testuser", "personal")


@pytest.fixture
def corporate_user(db: Session) -> User:
    """Create a corporate-tier test user."""
    return _create_user(db, "corpuser", "corporate")


@pytest.fixture
def other_user(db: Session) -> User:
    """A second personal user, for ownership checks."""
    return _create_user(db, "otheruser", "personal")


@pytest.fixture
def auth_headers(test_user: User) -> dict:
    """Authorization headers for the personal test user."""
    return {"Authorization": f"Bearer {create_access_token(subject=str(test_user.id))}"}


@pytest.fixture
def corporate_headers(corporate_user: User) -> dict:
    """Authorization headers for the corporate test user."""
    return {"Authorization": f"Bearer {create_access_token(subject=str(corporate_user.id))}"}
