"""
Shared pytest fixtures.

Every test gets a fresh in-memory SQLite database inside an app context and
a FrozenClock, so window and backoff arithmetic is exact.
"""
import os
from datetime import datetime

import pytest

# Never touch a real database during the test run
os.environ.pop("DATABASE_URL", None)

from app import create_app
from models import db
from models.user import User
from security.bruteforce import AttemptRecorder, LockoutGate
from security.lockout_policy import LockoutPolicy
from security.lockout_store import LockoutStore
from utils.clock import FrozenClock

START = datetime(2026, 1, 15, 12, 0, 0)


def make_user(email="player@example.com") -> User:
    user = User(email=email)
    db.session.add(user)
    db.session.commit()
    return user


def fail(recorder, user, times=1, ip="203.0.113.7"):
    for _ in range(times):
        recorder.record(user.id, False, ip)


# ---------------------------------------------------------------------------
# pytest fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def clock():
    return FrozenClock(START)


@pytest.fixture
def policy():
    return LockoutPolicy()


@pytest.fixture
def store(app):
    return LockoutStore()


@pytest.fixture
def recorder(store, policy, clock):
    return AttemptRecorder(store, policy, clock)


@pytest.fixture
def gate(store, policy, clock):
    return LockoutGate(store, policy, clock)


@pytest.fixture
def user(app):
    return make_user()
