import os

os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, create_engine
from sqlmodel.pool import StaticPool

from devhub.core.config import settings
from devhub.db.base import SQLModel
from devhub.db.session import get_session
from devhub.main import app
from devhub.schemas.compound import CompoundRead
from devhub.services.auth_service import AuthService


@pytest.fixture(name="session")
def session_fixture():
    """Create a test database session."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    """Create a test client with database session dependency override."""
    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    settings.testing = True
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()
    settings.testing = False


@pytest.fixture(name="auth_session")
def auth_session_fixture():
    """A signed-in session for a test user."""
    return AuthService().issue_session("chemist@example.com")


@pytest.fixture(name="auth_headers")
def auth_headers_fixture(auth_session):
    """Get authentication headers for the test user."""
    return {"Authorization": f"Bearer {auth_session.access_token}"}


@pytest.fixture(name="compounds")
def compounds_fixture():
    """A small compound list as the dashboard would receive it."""
    return [
        CompoundRead(id=1, name="P4-t-Bu", formula="C32H60N4P",
                     properties={"pKa": 42.0, "energy_eV": 0.85,
                                 "geometry": "bulky phosphazene, superbasic", "is_superbase": True},
                     synthesis_notes="Handle under inert atmosphere."),
        CompoundRead(id=2, name="DBU", formula="C9H16N2",
                     properties={"pKa": 24.3, "energy_eV": 1.2, "is_superbase": False}),
        CompoundRead(id=3, name="TBD", properties={"pKa": 26.0, "is_superbase": True}),
        CompoundRead(id=4, name="Mystery", properties={}),
    ]
