"""
Shared fixtures: in-memory SQLite schema, sessions, an API client wired to the same engine, tokens.
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite:///:memory:")
os.environ.setdefault("JWT_SECRET", "test-secret")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import courtbook.models  # noqa: F401  (registers tables on Base.metadata)
from courtbook.core.constants import ADMIN_ROLE, GameMode
from courtbook.core.security import create_access_token
from courtbook.core.slot_template import CourtTemplate, SlotTemplate
from courtbook.db.base import Base
from courtbook.db.session import get_db, get_session_factory
from courtbook.main import app
from courtbook.services.window_registry import create_windows


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def future_start():
    """A start instant safely in the future, on a whole minute."""
    return datetime.now(timezone.utc).replace(second=0, microsecond=0) + timedelta(days=1)


@pytest.fixture
def singles_only_template():
    """One singles court of capacity 2."""
    return SlotTemplate(duration=timedelta(minutes=45), courts=(CourtTemplate(1, 2, GameMode.SINGLES),))


@pytest.fixture
def make_window(db):
    """Create a window at `start` (default court set unless a template is given) and return it."""

    def _make(start, template=None):
        result = create_windows(db, [start], template=template)
        assert result.ok, result.duplicates
        return result.created[0]

    return _make


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_headers():
    def _headers(requester_id: str, admin: bool = False) -> dict[str, str]:
        token = create_access_token(requester_id, role=ADMIN_ROLE if admin else "student")
        return {"Authorization": f"Bearer {token}"}

    return _headers
