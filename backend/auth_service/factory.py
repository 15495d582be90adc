"""Application factory wiring Flask extensions, adapters and blueprints."""

from __future__ import annotations

from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from auth_service.core.config import BaseConfig, get_config
from auth_service.core.logger import configure_logging, init_app as init_logging
from auth_service.services._shared.errors import ConfigurationError
from auth_service.services._shared.ports import RefreshTokenLedger

LEDGER_BACKENDS = ("sql", "redis")


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :raises ConfigurationError: If the token settings or the refresh ledger
        backend are invalid. The process must not start serving in that case.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Trust a single proxy hop for X-Forwarded-* headers
    if app.config.get("USE_PROXYFIX", True):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_prefix=1)

    from auth_service.core import extensions

    extensions.init_app(app)

    _init_token_exchange(app)

    init_logging(app)

    from auth_service.api import init_app as init_api

    init_api(app)

    from auth_service.core import errors

    errors.init_app(app)

    from auth_service import cli as app_cli

    app_cli.init_app(app)

    return app


def _init_token_exchange(app: Flask) -> None:
    """Build the token exchange service once and park it on ``app.extensions``."""

    from auth_service.infra.jwt import PyJWTTokenSigner
    from auth_service.infra.sql import SQLCredentialStore
    from auth_service.services.token_exchange import AuthTokenConfig, TokenExchangeService

    token_cfg = AuthTokenConfig.from_mapping(app.config)
    ledger = build_ledger(app)
    app.extensions["refresh_ledger"] = ledger
    app.extensions["token_exchange"] = TokenExchangeService(
        credentials=SQLCredentialStore(hash_method=app.config.get("PASSWORD_HASH_METHOD", "scrypt")),
        signer=PyJWTTokenSigner(token_cfg),
        ledger=ledger,
        token_cfg=token_cfg,
    )
    app.logger.info(
        "token_exchange.ready",
        extra={"event": "startup", "reason": f"ledger={app.config.get('REFRESH_LEDGER_BACKEND')}"},
    )


def build_ledger(app: Flask) -> RefreshTokenLedger:
    """Select the refresh token ledger named by ``REFRESH_LEDGER_BACKEND``."""

    backend = str(app.config.get("REFRESH_LEDGER_BACKEND", "sql")).strip().lower()
    if backend not in LEDGER_BACKENDS:
        raise ConfigurationError(f"Unknown refresh ledger backend: {backend!r}")

    if backend == "redis":
        from auth_service.core.extensions import get_redis
        from auth_service.infra.redis import RedisRefreshTokenLedger

        try:
            client = get_redis(app)
        except RuntimeError as exc:
            raise ConfigurationError("The redis ledger requires REDIS_URL.") from exc
        return RedisRefreshTokenLedger(client)

    from auth_service.infra.sql import SQLRefreshTokenLedger

    return SQLRefreshTokenLedger()
