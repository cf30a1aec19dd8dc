import os
import tempfile

# Point the service at a scratch data directory before config.py is imported.
os.environ["DATA_DIR"] = tempfile.mkdtemp(prefix="handoff-tests-")
os.environ["HANDOFF_SECRET_KEY"] = "test-secret"

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

import timeutil
from auth import create_session_token
from database import Base, engine
from main import app


class FrozenClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


@pytest.fixture(autouse=True)
def clean_tables():
    yield
    with engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())


@pytest.fixture
def clock(monkeypatch):
    frozen = FrozenClock(datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc))
    monkeypatch.setattr(timeutil, "utcnow", frozen)
    return frozen


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def auth_headers(user_id: str) -> dict:
    return {"X-Session-Token": create_session_token(user_id)}
