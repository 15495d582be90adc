"""Factory Boy factories persisting through the test database session."""

from __future__ import annotations

import factory


class SQLAlchemySession:
    """Holder the ``session`` fixture fills in before factories are used."""

    _session = None

    @classmethod
    def set(cls, session):
        cls._session = session

    @classmethod
    def get(cls):
        if cls._session is None:
            raise RuntimeError("No factory session: request the 'session' fixture in this test.")
        return cls._session


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    class Meta:
        abstract = True
        sqlalchemy_session_factory = SQLAlchemySession.get
        # Credential lookups open their own read-only scope, so rows must be committed
        sqlalchemy_session_persistence = "commit"


from tests.factories.principal import PrincipalFactory  # noqa: E402

__all__ = ["BaseFactory", "PrincipalFactory", "SQLAlchemySession"]
