"""Version 1 of the auth HTTP API."""

from __future__ import annotations

from flask import Blueprint

from .auth import bp as auth_bp
from .health import bp as health_bp

API_VERSION = "v1"

# (blueprint, prefix below /api/v1); health sits at the version root
REGISTRY: list[tuple[Blueprint, str]] = [
    (health_bp, ""),
    (auth_bp, "/auth"),
]
