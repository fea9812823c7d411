"""Pytest configuration and fixtures."""

import os

# Settings are read at import time, so the test environment must exist first.
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET", "test-access-secret")
os.environ.setdefault("JWT_REFRESH_SECRET", "test-refresh-secret")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("APP_ENV", "development")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from fixcity.config import Settings, get_settings  # noqa: E402
from fixcity.database import Base, get_db  # noqa: E402
from fixcity.models.user import User  # noqa: E402,F401
from fixcity.services.auth import AuthService  # noqa: E402
from fixcity.services.jwt import TokenService  # noqa: E402

TEST_PASSWORD = "Passw0rd!"


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="settings")
def settings_fixture() -> Settings:
    return get_settings()


@pytest.fixture(name="token_service")
def token_service_fixture(settings: Settings) -> TokenService:
    return TokenService(settings)


@pytest.fixture(name="auth_service")
def auth_service_fixture(settings: Settings, token_service: TokenService) -> AuthService:
    return AuthService(settings, token_service)


@pytest.fixture(name="client")
def client_fixture(db_session: Session):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    from fixcity.rate_limit import limiter
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture(name="test_user")
def test_user_fixture(db_session: Session, auth_service: AuthService):
    """Register a test user and return its public data and tokens."""
    result = auth_service.register(db_session, "Ana", "ana@x.com", "+15551234567", TEST_PASSWORD)
    return {
        "user_id": result.user.id,
        "email": result.user.email,
        "phone": result.user.phone,
        "password": TEST_PASSWORD,
        "token": result.access_token,
        "refresh_token": result.refresh_token,
    }
