import os
import tempfile
from datetime import datetime

# Point the app at a throwaway database before anything imports frontdesk.
_db_dir = tempfile.mkdtemp(prefix="frontdesk-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_db_dir, 'frontdesk.db')}"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key"

import pytest
from fastapi.testclient import TestClient

from frontdesk.config import settings
from frontdesk.db import Base, SessionLocal, engine, init_db
from frontdesk.main import app
from frontdesk.models import User, UserRole
from frontdesk.security import session_token
from frontdesk.services.store import FrontDeskStore

CHECK_IN = datetime(2025, 3, 1, 10, 0)


class FakeClock:
    """Settable stand-in for datetime.now."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture(autouse=True)
def fresh_schema():
    init_db()
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FakeClock(CHECK_IN)


@pytest.fixture
def store(db, clock):
    return FrontDeskStore(db, clock=clock)


@pytest.fixture
def user(db):
    u = User(email="desk@example.com", hashed_password="unused", role=UserRole.STAFF.value)
    db.add(u)
    db.commit()
    db.refresh(u)
    return u


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def auth_client(user):
    return TestClient(app, cookies={settings.SESSION_COOKIE_NAME: session_token(user.id)})
