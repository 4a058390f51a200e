# tests/conftest.py
import os
import time
from datetime import timedelta

# Point settings at throwaway backends before the package is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CACHE_REDIS_URL"] = ""
os.environ["LOG_DIR"] = ""
os.environ["FEDERATED_CLIENT_ID"] = "test-client-id"

import jwt
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from event_analytics.db.base import Base
import event_analytics.db.models  # noqa: F401  registers models on Base.metadata
from event_analytics.core.dependencies import get_cache, get_db, get_verifier
from event_analytics.services.analytics_service import AnalyticsService
from event_analytics.services.api_key_service import APIKeyService
from event_analytics.services.event_service import EventService
from event_analytics.services.federated_identity_service import FederatedTokenVerifier
from event_analytics.utils.timeutils import utcnow

FEDERATED_SECRET = "federated-test-signing-secret-0123456789abcdef"
FEDERATED_ISSUER = "https://accounts.google.com"
FEDERATED_AUDIENCE = "test-client-id"


class InMemoryCache:
    """Dict-backed cache double recording TTLs; expiry is not simulated."""

    def __init__(self):
        self.store = {}
        self.ttls = {}

    def get(self, key):
        return self.store.get(key)

    def set(self, key, value, ttl):
        self.store[key] = value
        self.ttls[key] = ttl
        return True

    def close(self):
        self.store.clear()


class StaticKeyVerifier(FederatedTokenVerifier):
    """Verifier that checks HS256 tokens against a shared secret instead of a JWKS."""

    def _signing_key(self, token):
        return FEDERATED_SECRET


@pytest.fixture(scope="function")
def db_engine():
    """Create an in-memory test database engine shared across threads."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a test database session."""
    Session = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    session = Session()

    yield session

    session.close()


@pytest.fixture(scope="function")
def memory_cache():
    return InMemoryCache()


@pytest.fixture(scope="function")
def federated_verifier():
    return StaticKeyVerifier(
        audience=FEDERATED_AUDIENCE,
        issuers=[FEDERATED_ISSUER],
        jwks_url="",
        algorithms=["HS256"],
    )


@pytest.fixture(scope="function")
def make_federated_token():
    """Build a signed ID token; claims can be overridden per test."""
    def _make(**overrides):
        claims = {
            "sub": "federated-user-123",
            "aud": FEDERATED_AUDIENCE,
            "iss": FEDERATED_ISSUER,
            "exp": int(time.time()) + 600,
        }
        claims.update(overrides)
        return jwt.encode(claims, FEDERATED_SECRET, algorithm="HS256")
    return _make


@pytest.fixture(scope="function")
def api_key_service(db_session, federated_verifier):
    """Create an API key service for testing."""
    return APIKeyService(db_session, verifier=federated_verifier)


@pytest.fixture(scope="function")
def event_service(db_session):
    """Create an event ingestion service for testing."""
    return EventService(db_session)


@pytest.fixture(scope="function")
def analytics_service(db_session, memory_cache):
    """Create an analytics service backed by the in-memory cache."""
    return AnalyticsService(db_session, cache=memory_cache)


@pytest.fixture(scope="function")
def registered_app(api_key_service):
    """An application with a non-expiring key."""
    return api_key_service.register(name="Analytics Test App", owner_email="owner@example.com")


@pytest.fixture(scope="function")
def expired_app(api_key_service, db_session):
    """An application whose key expired yesterday."""
    application = api_key_service.register(name="Expired App", expires_in_days=1)
    application.expires_at = utcnow() - timedelta(days=1)
    db_session.commit()
    return application


@pytest.fixture(scope="function")
def client(db_session, memory_cache, federated_verifier):
    """FastAPI test client wired to the test database and cache."""
    from event_analytics.api.web_app import app

    def _get_db():
        yield db_session

    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_cache] = lambda: memory_cache
    app.dependency_overrides[get_verifier] = lambda: federated_verifier

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
