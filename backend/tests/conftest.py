"""Pytest fixtures configuring an isolated transactional database layer.

Each test runs inside a SAVEPOINT-backed transaction against an in-memory
SQLite database so data changes never leak between cases, even when the code
under test commits.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta

import pytest
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from storerate.core.config import TestingConfig
from storerate.core.extensions import (
    AGGREGATE_CACHE_KEY,
    MAILER_KEY,
    RATING_BROADCASTER_KEY,
)
from storerate.core.extensions import db as _db  # Flask-SQLAlchemy instance
from storerate.factory import create_app  # application factory under test


class TestConfig(TestingConfig):
    """Testing configuration for creating the Flask app.

    Notes
    -----
    - Uses an in-memory SQLite database for speed.
    - In-memory cache, broadcaster and null mailer (no Redis, no SMTP).
    """

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    LOG_LEVEL = "WARNING"
    STORES_CACHE_TTL_SECONDS = 60
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(minutes=15)
    JWT_REFRESH_TOKEN_EXPIRES = timedelta(days=7)


def _enable_sqlite_savepoints(engine) -> None:
    """Let SQLAlchemy own BEGIN so SAVEPOINT/RELEASE nest inside the outer transaction.

    pysqlite otherwise defers BEGIN until the first DML statement, and a
    released outermost SAVEPOINT would commit for real.
    """

    @event.listens_for(engine, "connect")
    def _do_connect(dbapi_connection, connection_record):  # pragma: no cover - driver hook
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _do_begin(conn):  # pragma: no cover - driver hook
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="session")
def app():
    """Create a Flask application configured for testing."""
    # Ensure env-based config does not leak into tests
    os.environ.pop("DATABASE_URL", None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Create database tables once per test session."""
    with app.app_context():
        _enable_sqlite_savepoints(_db.engine)
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    """Keep a dedicated connection open for the whole session."""
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture(scope="function")
def session(db, connection):
    """Provide a scoped session joined to an outer transaction.

    ``join_transaction_mode="create_savepoint"`` turns every session-level
    commit into a RELEASE SAVEPOINT, so services and endpoints may commit
    freely; the outer transaction is rolled back after each test.
    """
    top_trans = connection.begin()

    SessionFactory = sessionmaker(
        bind=connection,
        join_transaction_mode="create_savepoint",
        autoflush=False,
    )
    scoped = scoped_session(SessionFactory)

    # Monkey-patch db.session so app code uses this scoped session
    original_session = db.session
    db.session.remove()
    db.session = scoped

    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = original_session
        top_trans.rollback()


@pytest.fixture(scope="session")
def faker():
    """Provide a :class:`faker.Faker` instance seeded for deterministic tests."""
    from faker import Faker

    fk = Faker()
    Faker.seed(1337)
    return fk


@pytest.fixture()
def client(app, session):
    """Return a Flask test client sharing the transactional session."""
    return app.test_client()


@pytest.fixture()
def aggregate_cache(app):
    return app.extensions[AGGREGATE_CACHE_KEY]


@pytest.fixture()
def broadcaster(app):
    return app.extensions[RATING_BROADCASTER_KEY]


@pytest.fixture()
def mailer(app):
    return app.extensions[MAILER_KEY]


@pytest.fixture(autouse=True)
def _reset_side_channels(app):
    """Start every test with an empty cache, event log and outbox."""
    for key in (AGGREGATE_CACHE_KEY, RATING_BROADCASTER_KEY, MAILER_KEY):
        app.extensions[key].clear()
    yield


# -- Hook up Factory Boy to pytest SQLAlchemy session --------------------------
@pytest.fixture(autouse=True)
def _factories_session(session):
    """Wire Factory Boy's session helper to the transactional session fixture."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(session)
    yield


# -- Authenticated callers for endpoint tests ----------------------------------
@dataclass(frozen=True)
class Actor:
    """A committed user plus a bearer token, captured before any request runs."""

    id: int
    email: str
    token: str

    @property
    def headers(self) -> dict[str, str]:
        from tests.helpers.http import json_headers

        return json_headers(self.token)


@pytest.fixture()
def make_actor(session):
    """Return a builder committing a user (any factory) and issuing its token."""
    from tests.factories.user import UserFactory
    from tests.helpers.auth import issue_token

    def _make(factory=UserFactory, **kwargs) -> Actor:
        user = factory(**kwargs)
        session.commit()
        return Actor(id=user.id, email=user.email, token=issue_token(user))

    return _make


@pytest.fixture()
def admin(make_actor):
    from tests.factories.user import AdminFactory

    return make_actor(AdminFactory, name="Alice Administrator")


@pytest.fixture()
def member(make_actor):
    return make_actor(name="Bob Regular Member", password="Secret@123")


@pytest.fixture()
def owner(make_actor):
    from tests.factories.user import OwnerFactory

    return make_actor(OwnerFactory, name="Olivia Store Owner")
