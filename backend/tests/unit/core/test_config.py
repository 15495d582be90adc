"""Startup configuration checks: token settings and factory fail-fast."""

from __future__ import annotations

from datetime import timedelta

import pytest
from auth_service.core.config import (
    DEFAULT_JWT_SECRET,
    CONFIG_MAP,
    DevelopmentConfig,
    ProductionConfig,
    TestingConfig,
    database_url,
    get_config,
)
from auth_service.factory import create_app
from auth_service.infra.sql import SQLRefreshTokenLedger
from auth_service.services._shared.errors import ConfigurationError
from auth_service.services.token_exchange import AuthTokenConfig, TokenExchangeService

STRONG_SECRET = "x" * 32


class TestAuthTokenConfig:
    def test_defaults(self):
        cfg = AuthTokenConfig.from_mapping({"JWT_SECRET_KEY": STRONG_SECRET, "APP_ENV": "production"})
        assert cfg.access_expires == timedelta(hours=24)
        assert cfg.refresh_expires == timedelta(days=7)
        assert cfg.algorithm == "HS256"

    def test_ttls_are_read_in_seconds(self):
        cfg = AuthTokenConfig.from_mapping(
            {
                "JWT_SECRET_KEY": STRONG_SECRET,
                "ACCESS_TOKEN_TTL_SECONDS": 900,
                "REFRESH_TOKEN_TTL_SECONDS": "3600",
            }
        )
        assert cfg.access_expires == timedelta(minutes=15)
        assert cfg.refresh_expires == timedelta(hours=1)

    def test_is_immutable(self):
        cfg = AuthTokenConfig(secret_key=STRONG_SECRET)
        with pytest.raises(AttributeError):
            cfg.secret_key = "other"  # type: ignore[misc]

    def test_secret_hidden_from_repr(self):
        assert STRONG_SECRET not in repr(AuthTokenConfig(secret_key=STRONG_SECRET))

    @pytest.mark.parametrize("secret", [None, "", "   "])
    def test_missing_secret(self, secret):
        with pytest.raises(ConfigurationError):
            AuthTokenConfig.from_mapping({"JWT_SECRET_KEY": secret})

    def test_placeholder_secret_rejected_in_production(self):
        with pytest.raises(ConfigurationError, match="placeholder"):
            AuthTokenConfig.from_mapping({"JWT_SECRET_KEY": DEFAULT_JWT_SECRET, "APP_ENV": "production"})

    def test_placeholder_secret_tolerated_in_development(self):
        cfg = AuthTokenConfig.from_mapping({"JWT_SECRET_KEY": DEFAULT_JWT_SECRET, "APP_ENV": "development"})
        assert cfg.secret_key == DEFAULT_JWT_SECRET

    def test_short_secret_rejected_in_production(self):
        with pytest.raises(ConfigurationError, match="32 bytes"):
            AuthTokenConfig.from_mapping({"JWT_SECRET_KEY": "short", "APP_ENV": "production"})

    @pytest.mark.parametrize("value", [0, -5, "abc", None])
    def test_invalid_ttl(self, value):
        with pytest.raises(ConfigurationError):
            AuthTokenConfig.from_mapping({"JWT_SECRET_KEY": STRONG_SECRET, "ACCESS_TOKEN_TTL_SECONDS": value})

    def test_asymmetric_algorithm_rejected(self):
        with pytest.raises(ConfigurationError):
            AuthTokenConfig.from_mapping({"JWT_SECRET_KEY": STRONG_SECRET, "JWT_ALGORITHM": "RS256"})


class TestConfigSelection:
    def test_get_config_by_env(self, monkeypatch):
        monkeypatch.setenv("APP_ENV", "testing")
        assert get_config() is TestingConfig
        monkeypatch.setenv("APP_ENV", "nonsense")
        assert get_config() is DevelopmentConfig

    def test_config_map_covers_environments(self):
        assert CONFIG_MAP["production"] is ProductionConfig

    def test_database_url_precedence(self, monkeypatch):
        monkeypatch.setenv("DATABASE_URL", "sqlite:///explicit.db")
        assert database_url() == "sqlite:///explicit.db"

        monkeypatch.delenv("DATABASE_URL")
        monkeypatch.setenv("DB_HOST", "db")
        monkeypatch.setenv("DB_USER", "svc")
        monkeypatch.setenv("DB_PASSWORD", "pw")
        monkeypatch.setenv("DB_NAME", "users")
        assert database_url() == "postgresql+psycopg://svc:pw@db:5432/users"

        monkeypatch.delenv("DB_HOST")
        assert database_url().startswith("sqlite:///")


class TestFactoryFailFast:
    def test_factory_builds_service_with_sql_ledger(self):
        app = create_app(TestingConfig)
        assert isinstance(app.extensions["token_exchange"], TokenExchangeService)
        assert isinstance(app.extensions["refresh_ledger"], SQLRefreshTokenLedger)

    def test_placeholder_secret_in_production_aborts_startup(self):
        class Cfg(TestingConfig):
            APP_ENV = "production"
            TESTING = False
            JWT_SECRET_KEY = DEFAULT_JWT_SECRET

        with pytest.raises(ConfigurationError):
            create_app(Cfg)

    def test_unknown_ledger_backend_aborts_startup(self):
        class Cfg(TestingConfig):
            REFRESH_LEDGER_BACKEND = "memcached"

        with pytest.raises(ConfigurationError, match="memcached"):
            create_app(Cfg)

    def test_redis_ledger_without_url_aborts_startup(self):
        class Cfg(TestingConfig):
            REFRESH_LEDGER_BACKEND = "redis"
            REDIS_URL = None

        with pytest.raises(ConfigurationError, match="REDIS_URL"):
            create_app(Cfg)
