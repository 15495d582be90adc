"""
auth_service.services._shared.ports
===================================

Collection of *ports* (hexagonal interfaces) that define the contracts the
token exchange service depends on.

Modules
-------
- :mod:`credential_store`:
    Defines :class:`~.CredentialStore`: read-only password verification and
    principal lookup.

- :mod:`token_signer`:
    Defines :class:`~.TokenSigner`: minting and verifying signed access tokens.

- :mod:`refresh_token_ledger`:
    Defines :class:`~.RefreshTokenLedger`: persistence of opaque refresh
    tokens with atomic single-use consumption.

Concrete adapters (SQL, Redis, PyJWT) live under ``auth_service.infra``; the
in-memory doubles kept beside each port back the unit tests.
"""

from __future__ import annotations

from .credential_store import CredentialStore, InMemoryCredentialStore, PrincipalRef
from .refresh_token_ledger import (
    InMemoryRefreshTokenLedger,
    RefreshTokenLedger,
    generate_refresh_token,
)
from .token_signer import Claims, SignedToken, TokenSigner

__all__ = [
    "Claims",
    "CredentialStore",
    "InMemoryCredentialStore",
    "InMemoryRefreshTokenLedger",
    "PrincipalRef",
    "RefreshTokenLedger",
    "SignedToken",
    "TokenSigner",
    "generate_refresh_token",
]
