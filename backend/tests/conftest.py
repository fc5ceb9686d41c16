"""Pytest fixtures for the auth service.

Unit tests wire the orchestrator to in-memory doubles; integration tests build
the Flask app against an in-memory SQLite database and a fakeredis client.
"""

from __future__ import annotations

from datetime import timedelta

import fakeredis
import pytest
from auth_service.core.config import TestingConfig
from auth_service.core.extensions import REDIS_EXTENSION_KEY, db as _db
from auth_service.factory import create_app
from auth_service.infra.jwt.pyjwt_claims_codec import JWTClaimsCodec
from auth_service.infra.redis.redis_session_store import RedisSessionStore
from auth_service.services._shared.ports import (
    InMemoryCredentialVerifier,
    InMemorySessionStore,
)
from auth_service.services.auth.dto import AuthTokenConfig
from auth_service.services.auth.issuer import TokenIssuer
from auth_service.services.auth.service import AuthOrchestrator

SECRET = "unit-test-secret-key-of-at-least-32-bytes"
PASSWORD = "Passw0rd!"


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - No Redis URL: the ``app`` fixture installs a fakeredis client.
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    ACCESS_TOKEN_TTL_SECONDS = 15 * 60
    REFRESH_TOKEN_TTL_SECONDS = 7 * 24 * 60 * 60
    LOG_LEVEL = "WARNING"


# ------------------------------ Unit doubles ------------------------------ #


@pytest.fixture()
def codec() -> JWTClaimsCodec:
    """JWT codec signing with a fixed test secret."""
    return JWTClaimsCodec(secret=SECRET)


@pytest.fixture()
def token_cfg() -> AuthTokenConfig:
    return AuthTokenConfig(access_expires=timedelta(minutes=15), refresh_expires=timedelta(days=7))


@pytest.fixture()
def issuer(codec, token_cfg) -> TokenIssuer:
    return TokenIssuer(codec=codec, cfg=token_cfg)


@pytest.fixture()
def memory_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture()
def credentials() -> InMemoryCredentialVerifier:
    """Credential double holding a single account ``a@b.com``."""
    verifier = InMemoryCredentialVerifier()
    verifier.add("a@b.com", PASSWORD)
    return verifier


@pytest.fixture()
def orchestrator(codec, issuer, memory_store, credentials) -> AuthOrchestrator:
    """Build an AuthOrchestrator wired to in-memory doubles."""
    return AuthOrchestrator(
        codec=codec,
        issuer=issuer,
        store=memory_store,
        credentials=credentials,
    )


# ------------------------------ Redis doubles ----------------------------- #


@pytest.fixture()
def fake_redis():
    """Provide a fresh FakeRedis instance for each test."""
    r = fakeredis.FakeRedis(decode_responses=True)
    # ensure a clean starting point
    r.flushall()
    yield r
    r.flushall()


@pytest.fixture()
def redis_store(fake_redis) -> RedisSessionStore:
    """Provide a RedisSessionStore backed by FakeRedis."""
    return RedisSessionStore(r=fake_redis)


# ------------------------------- Flask app -------------------------------- #


@pytest.fixture()
def app(fake_redis):
    """Create a Flask application with fresh tables and a fakeredis store.

    Yields
    ------
    flask.Flask
        Application with an active app context.
    """
    application = create_app(TestConfig)
    application.extensions[REDIS_EXTENSION_KEY] = fake_redis
    with application.app_context():
        _db.create_all()
        yield application
        _db.session.remove()
        _db.drop_all()


@pytest.fixture()
def session(app):
    """Flask-scoped SQLAlchemy session bound to the test app."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(_db.session)
    return _db.session


@pytest.fixture()
def client(app):
    """Return a Flask test client."""
    return app.test_client()
