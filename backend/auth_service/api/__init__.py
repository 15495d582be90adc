"""HTTP surface: versioned blueprints mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def _join(*parts: str) -> str:
    return "/" + "/".join(p.strip("/") for p in parts if p.strip("/"))


def register_blueprint_group(
    app: Flask,
    *,
    base_prefix: str,
    entries: Iterable[tuple[Blueprint, str]],
) -> None:
    """Mount each ``(blueprint, relative_prefix)`` pair beneath ``base_prefix``.

    An empty relative prefix mounts the blueprint at the version root, e.g.
    ``health`` answers on ``/api/v1/health`` while ``auth`` lives under
    ``/api/v1/auth``.
    """
    for bp, rel_prefix in entries:
        app.register_blueprint(bp, url_prefix=_join(base_prefix, rel_prefix))


def init_app(app: Flask) -> None:
    """Register every API version the service exposes."""
    from auth_service.api import v1

    register_blueprint_group(
        app,
        base_prefix=_join(app.config.get("API_BASE_PREFIX", "/api"), v1.API_VERSION),
        entries=v1.REGISTRY,
    )


__all__ = ["init_app", "register_blueprint_group"]
