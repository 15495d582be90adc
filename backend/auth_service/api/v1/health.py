"""Liveness probe reporting database reachability and the active ledger backend."""

from __future__ import annotations

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from auth_service.api.deps import json_response, timing
from auth_service.core.extensions import db

bp = Blueprint("health", __name__)


def _database_ok() -> bool:
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        current_app.logger.exception("health.database_unreachable")
        return False
    return True


@bp.get("/health")
@timing
def healthcheck():
    # Always 200: orchestrators restart on failure, and a database blip
    # should not bounce every replica at once
    cfg = current_app.config
    return json_response(
        {
            "status": "ok",
            "db": "ok" if _database_ok() else "fail",
            "ledger": cfg.get("REFRESH_LEDGER_BACKEND", "sql"),
            "version": cfg.get("APP_VERSION", "dev"),
        }
    )
