"""Principal credential record."""

from __future__ import annotations

from typing import NoReturn

from flask import current_app, has_app_context
from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, validates
from werkzeug.security import check_password_hash, generate_password_hash

from auth_service.core.extensions import db

from .base import CreatedAtMixin, ReprMixin, UUIDPKMixin

DEFAULT_HASH_METHOD = "scrypt"


def _hash_method() -> str:
    if not has_app_context():
        return DEFAULT_HASH_METHOD
    return str(current_app.config.get("PASSWORD_HASH_METHOD", DEFAULT_HASH_METHOD))


class Principal(UUIDPKMixin, ReprMixin, CreatedAtMixin, db.Model):
    """
    A login identity: unique username plus salted password hash.

    Rows are provisioned with ``flask principals create``; the token
    exchange only reads them. Hashes are Werkzeug formats (scrypt or pbkdf2).
    """

    __tablename__ = "users"
    __table_args__ = (UniqueConstraint("username", name="uq_users_username"),)

    username: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    @property
    def password(self) -> NoReturn:  # pragma: no cover - write-only
        raise AttributeError("Password is write-only.")

    @password.setter
    def password(self, raw: str) -> None:
        """Hash ``raw`` with ``PASSWORD_HASH_METHOD`` (scrypt outside an app)."""
        if not raw or not isinstance(raw, str):
            raise ValueError("Password must be a non-empty string.")
        self.password_hash = generate_password_hash(raw, method=_hash_method())

    def verify_password(self, raw: str) -> bool:
        """Constant-time check of ``raw`` against the stored hash."""
        return bool(self.password_hash) and check_password_hash(self.password_hash, raw)

    @validates("username")
    def _strip_username(self, _key: str, value: str) -> str:
        username = value.strip() if isinstance(value, str) else ""
        if not username:
            raise ValueError("Username is required.")
        return username
