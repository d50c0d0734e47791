"""
Shared test fixtures for JobBoard tests.

The API runs against an in-memory SQLite database and a recording email
sender, so nothing touches disk or the network.
"""
from datetime import datetime, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jobboard import models  # noqa: F401
from jobboard.database import Base, get_db
from jobboard.dependencies import get_email_sender
from jobboard.main import app
from jobboard.rate_limit import limiter
from jobboard.services.email_rate_limit import email_rate_limiter
from jobboard.services.email_service import EmailSender

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


class RecordingEmailSender(EmailSender):
    """Keeps every message instead of delivering it."""

    def __init__(self, result=True):
        self.result = result
        self.sent = []

    async def send(self, message):
        self.sent.append(message)
        return self.result


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now=NOW):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, delta):
        self.now = self.now + delta


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def email_sender():
    return RecordingEmailSender()


@pytest.fixture
def client(session_factory, email_sender):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_sender] = lambda: email_sender
    limiter.reset()
    email_rate_limiter.reset()

    yield TestClient(app)

    app.dependency_overrides.clear()
