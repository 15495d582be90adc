from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass(frozen=True, slots=True)
class SignedToken:
    """
    A freshly minted access token.

    :ivar token: Compact serialized token.
    :ivar expires_at: Absolute expiry (UTC), identical to the embedded claim.
    :ivar jti: Random unique identifier embedded in the token.
    """

    token: str
    expires_at: datetime
    jti: str


@dataclass(frozen=True, slots=True)
class Claims:
    """Verified claims extracted from an access token."""

    principal_id: str
    username: str
    issued_at: datetime
    expires_at: datetime
    jti: str


class TokenSigner(Protocol):
    """Port for minting and verifying signed access tokens."""

    def generate(self, principal_id: str, username: str) -> SignedToken:
        """Sign a new access token for the principal."""
        ...

    def validate(self, token: str) -> Claims:
        """
        Verify algorithm, signature and expiry, then return the claims.

        :raises TokenValidationError: On any failed check.
        """
        ...
