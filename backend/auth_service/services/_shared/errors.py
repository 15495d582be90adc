"""
Domain-level exceptions used within the service layer.

These exceptions are **framework-agnostic** and should never import or depend
on Flask or HTTP. They carry the *detailed* failure reason for internal
logging; :class:`~auth_service.services.token_exchange.service.TokenExchangeService`
collapses them into the coarse :class:`ErrorKind` exposed to callers.
"""

from __future__ import annotations

from enum import Enum

from sqlalchemy.exc import IntegrityError


def violates(exc: IntegrityError, constraint_name: str) -> bool:
    """
    Check whether an IntegrityError originates from a specific constraint.

    Parameters
    ----------
    exc : IntegrityError
        The exception raised by SQLAlchemy during flush/commit.
    constraint_name : str
        The name of the database constraint to match (e.g., 'uq_refresh_tokens_token').

    Returns
    -------
    bool
        True if the IntegrityError matches the given constraint.

    Notes
    -----
    PostgreSQL reports the constraint name; SQLite reports the column list
    (``UNIQUE constraint failed: refresh_tokens.token``), so the bare column
    suffix of the constraint is accepted as well.
    """
    message = str(exc.orig).lower() if exc.orig else ""
    name = constraint_name.lower()
    if name in message:
        return True
    _, _, column = name.rpartition("_")
    table = name.removeprefix("uq_").removesuffix(f"_{column}")
    return f"{table}.{column}" in message


# --------------------------------------------------------------------------- #
# Public error kinds
# --------------------------------------------------------------------------- #


class ErrorKind(str, Enum):
    """Coarse failure kinds visible outside the service boundary."""

    INVALID_CREDENTIALS = "invalid_credentials"
    INVALID_TOKEN = "invalid_token"
    INVALID_REFRESH_TOKEN = "invalid_refresh_token"
    STORAGE_UNAVAILABLE = "storage_unavailable"


class TokenFailure(str, Enum):
    """Why an access token was rejected (internal only)."""

    MALFORMED = "malformed"
    ALGORITHM_MISMATCH = "algorithm_mismatch"
    SIGNATURE_MISMATCH = "signature_mismatch"
    EXPIRED = "expired"
    MISSING_CLAIMS = "missing_claims"


class RefreshFailure(str, Enum):
    """Why a refresh token lookup missed (internal only)."""

    UNKNOWN = "unknown"
    EXPIRED = "expired"
    ORPHANED = "orphaned"


# --------------------------------------------------------------------------- #
# Base types
# --------------------------------------------------------------------------- #


class ServiceError(Exception):
    """
    Base class for all service-level errors.

    Notes
    -----
    - These are *not* HTTP errors.
    - They can be safely raised from adapters or domain logic.
    """

    pass


class ConfigurationError(ServiceError):
    """Missing or invalid startup configuration. Fatal: the process must not serve."""


# --------------------------------------------------------------------------- #
# Expected outcomes
# --------------------------------------------------------------------------- #


class InvalidCredentialsError(ServiceError):
    """Unknown username or wrong password (deliberately indistinguishable)."""

    def __init__(self) -> None:
        super().__init__("Invalid credentials")


class TokenValidationError(ServiceError):
    """
    Raised by the token signer when an access token cannot be trusted.

    :param reason: Detailed cause, for logs only.
    :type reason: TokenFailure
    """

    def __init__(self, reason: TokenFailure) -> None:
        super().__init__(f"Invalid token ({reason.value})")
        self.reason = reason


class RefreshTokenNotFoundError(ServiceError):
    """
    Raised by the ledger when a refresh token is absent, expired or consumed.

    :param reason: Detailed cause, for logs only.
    :type reason: RefreshFailure
    """

    def __init__(self, reason: RefreshFailure = RefreshFailure.UNKNOWN) -> None:
        super().__init__(f"Refresh token not found ({reason.value})")
        self.reason = reason


# --------------------------------------------------------------------------- #
# Infrastructure faults
# --------------------------------------------------------------------------- #


class StorageError(ServiceError):
    """Base class for persistence failures."""


class StorageUnavailableError(StorageError):
    """The backing store could not be reached. Retryable by the caller."""

    def __init__(self, message: str = "Storage unavailable") -> None:
        super().__init__(message)


class RefreshTokenCollisionError(StorageError):
    """A refresh token string already exists; the ledger refuses to overwrite it."""

    def __init__(self) -> None:
        super().__init__("Refresh token collision")
