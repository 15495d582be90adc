"""Shared fixtures.

Every test asking for ``app`` gets a new application on a private in-memory
SQLite database with the auth tables created, and a fresh limiter store.
"""

from __future__ import annotations

import pytest
from auth_service.core.config import TestingConfig
from auth_service.core.extensions import db as _db
from auth_service.factory import create_app


@pytest.fixture
def app(monkeypatch):
    # A DATABASE_URL from the developer's shell must not redirect the suite
    monkeypatch.delenv("DATABASE_URL", raising=False)
    application = create_app(TestingConfig)
    with application.app_context():
        _db.create_all()
        yield application
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    """The app's session, also registered as the factories' session."""
    from tests.factories import SQLAlchemySession

    SQLAlchemySession.set(_db.session)
    yield _db.session
    SQLAlchemySession.set(None)


@pytest.fixture
def exchange(app):
    """The :class:`TokenExchangeService` wired by ``create_app``."""
    return app.extensions["token_exchange"]


@pytest.fixture(scope="session")
def faker():
    from faker import Faker

    Faker.seed(1337)
    return Faker()
