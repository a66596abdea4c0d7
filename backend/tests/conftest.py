import os

# Must be set before app.main is imported: the module-level app reads them.
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("AUTH_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from app.auth.security import hash_password  # noqa: E402
from app.config import Settings  # noqa: E402
from app.database import get_session  # noqa: E402
from app.main import create_app  # noqa: E402
from app.models.user import User  # noqa: E402
from tests.helpers import DEFAULT_PASSWORD  # noqa: E402

TEST_DATABASE_URL = "sqlite:///:memory:"
TEST_SECRET = "test-secret"

# ============================================================================
# Test Database Setup with StaticPool
# ============================================================================
# 1. Use sqlite:///:memory: with StaticPool so ALL sessions share same DB
# 2. check_same_thread=False required for TestClient/threaded access
# 3. App dependency overridden to use test_engine (see client fixtures)
# 4. Tables dropped and recreated per test; tests share one DB and run serially
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


def override_get_session():
    """Override session to use test engine"""
    with Session(test_engine) as session:
        yield session


def make_settings(environment: str = "test") -> Settings:
    return Settings(environment=environment, auth_secret=TEST_SECRET)


@pytest.fixture(name="session", scope="function")
def session_fixture():
    """Provide a test database session on a fresh schema"""
    SQLModel.metadata.drop_all(test_engine)
    SQLModel.metadata.create_all(test_engine)

    with Session(test_engine) as session:
        yield session


def _client_for(settings: Settings):
    app = create_app(settings)
    # Override dependency BEFORE creating TestClient (prevents production engine use)
    app.dependency_overrides[get_session] = override_get_session
    return app


@pytest.fixture(name="app")
def app_fixture(session: Session):
    """App in test mode: same-user check bypassed"""
    return _client_for(make_settings("test"))


@pytest.fixture(name="client")
def client_fixture(app):
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="prod_app")
def prod_app_fixture(session: Session):
    """App in production mode: same-user check enforced"""
    return _client_for(make_settings("production"))


@pytest.fixture(name="prod_client")
def prod_client_fixture(prod_app):
    with TestClient(prod_app) as client:
        yield client
    prod_app.dependency_overrides.clear()


@pytest.fixture(name="make_user")
def make_user_fixture(session: Session):
    """Factory: insert a user with a hashed password"""
    counter = {"n": 0}

    def _make(email=None, password=DEFAULT_PASSWORD, **fields):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=email or f"user{n}@example.com",
            password=hash_password(password),
            name=fields.pop("name", f"First{n}"),
            surnames=fields.pop("surnames", f"Last{n}"),
            **fields,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make

