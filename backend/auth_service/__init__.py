"""Auth service: credential-to-token exchange with rotating refresh tokens.

``gunicorn`` and ``flask --app auth_service`` both start from :func:`create_app`.
"""

from __future__ import annotations

from .factory import create_app

__all__ = ["create_app"]
