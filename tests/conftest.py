"""Shared fixtures: in-memory SQLite store, fake caller verifier, API client."""

import fnmatch
import os
import tempfile

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_ENABLED"] = "false"
os.environ["CELERY_BEAT_ENABLED"] = "false"
os.environ["SUPABASE_URL"] = "https://auth.test"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-key"
os.environ.setdefault("LOG_DIR", os.path.join(tempfile.gettempdir(), "portfolio_tracker_test_logs"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import portfolio_tracker.models  # noqa: F401
from portfolio_tracker.api.dependencies import get_caller_verifier
from portfolio_tracker.core.db import Base, get_db
from portfolio_tracker.core.security import Caller
from portfolio_tracker.repositories.factory import RepositoryFactory

ALICE = Caller(id="user-alice", email="alice@example.com")
BOB = Caller(id="user-bob", email="bob@example.com")


class FakeVerifier:
    """Token -> caller lookup standing in for the identity provider."""

    def __init__(self, tokens):
        self.tokens = tokens
        self.seen = []

    def verify(self, token):
        self.seen.append(token)
        return self.tokens.get(token)


class DictRedis:
    """In-memory stand-in for the redis client calls CacheManager makes."""

    def __init__(self):
        self.store = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, ex=None):
        self.store[key] = value

    def scan_iter(self, pattern):
        return [k for k in list(self.store) if fnmatch.fnmatchcase(k, pattern)]

    def delete(self, key):
        self.store.pop(key, None)


def auth(token: str = "alice-token") -> dict:
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def factory(db_session):
    return RepositoryFactory(db_session)


@pytest.fixture
def dict_redis():
    return DictRedis()


@pytest.fixture
def verifier():
    return FakeVerifier({"alice-token": ALICE, "bob-token": BOB})


@pytest.fixture
def app():
    from portfolio_tracker.main import app
    yield app
    app.dependency_overrides.clear()


@pytest.fixture
def client(app, db_session, verifier):
    """TestClient backed by the SQLite session and the fake verifier."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_caller_verifier] = lambda: verifier

    with TestClient(app) as c:
        yield c


@pytest.fixture
def symbol_rows():
    return [
        {"symbol": "RELIANCE", "name": "Reliance Industries Ltd", "exchange": "EQ", "isin": "INE002A01018"},
        {"symbol": "RELINFRA", "name": "Reliance Infrastructure Ltd", "exchange": "EQ", "isin": None},
        {"symbol": "RPOWER", "name": "Reliance Power Ltd", "exchange": "BE", "isin": None},
        {"symbol": "RELIANCEPP", "name": "Partly Paid Shares Ltd", "exchange": None, "isin": None},
        {"symbol": "RELAXO", "name": "Relaxo Footwears Ltd", "exchange": "EQ", "isin": None},
        {"symbol": "TCS", "name": "Tata Consultancy Services Ltd", "exchange": "EQ", "isin": "INE467B01029"},
        {"symbol": "INFY", "name": "Infosys Ltd", "exchange": "EQ", "isin": "INE009A01021"},
    ]
