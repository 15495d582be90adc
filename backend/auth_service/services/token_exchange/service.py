# auth_service/services/token_exchange/service.py
from __future__ import annotations

from auth_service.services._shared.base import BaseService
from auth_service.services._shared.errors import (
    ErrorKind,
    InvalidCredentialsError,
    RefreshFailure,
    RefreshTokenNotFoundError,
    StorageError,
    TokenValidationError,
)
from auth_service.services._shared.ports import (
    CredentialStore,
    PrincipalRef,
    RefreshTokenLedger,
    TokenSigner,
)
from auth_service.services.token_exchange.dto import (
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    LogoutOut,
    RefreshIn,
    TokenPairOut,
    TokenPairResult,
    ValidateIn,
    ValidateOut,
)


class TokenExchangeService(BaseService):
    """
    Credential-to-token exchange (login / validate / refresh / logout).

    Credentials are checked through a :class:`CredentialStore`, access tokens
    are minted and verified by a :class:`TokenSigner`, and opaque refresh
    tokens live in a :class:`RefreshTokenLedger` whose ``consume`` is atomic.

    Every expected failure (bad credentials, bad tokens, storage faults) is
    returned as a typed result carrying one coarse :class:`ErrorKind`; the
    detailed reason is only logged. The service keeps no mutable state, so a
    single instance serves concurrent requests.
    """

    def __init__(
        self,
        *,
        credentials: CredentialStore,
        signer: TokenSigner,
        ledger: RefreshTokenLedger,
        token_cfg: AuthTokenConfig,
    ) -> None:
        """
        Initialize the service with its dependencies.

        :param credentials: Read-only credential verification.
        :param signer: Access token signer.
        :param ledger: Refresh token persistence.
        :param token_cfg: Immutable TTL/secret configuration, shared with the signer.
        """
        super().__init__()
        self.credentials = credentials
        self.signer = signer
        self.ledger = ledger
        self.cfg = token_cfg

    # ------------------------------------------------------------------ #
    # Login
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> TokenPairResult:
        """
        Authenticate credentials and issue a fresh token pair.

        The refresh token is persisted before anything is returned; if that
        fails the whole login fails and no access token leaves the service.
        """
        try:
            principal = self.credentials.validate_credentials(dto.username, dto.password)
        except InvalidCredentialsError:
            self.log.info("auth.login.rejected", extra={"event": "login", "reason": "credentials"})
            return TokenPairResult(error=ErrorKind.INVALID_CREDENTIALS)
        except StorageError as exc:
            return self._storage_failure("login", exc)

        try:
            pair = self._issue_pair(principal)
        except StorageError as exc:
            return self._storage_failure("login", exc, principal_id=principal.principal_id)

        self.log.info(
            "auth.login.ok",
            extra={"event": "login", "principal_id": principal.principal_id},
        )
        return TokenPairResult(pair=pair)

    # ------------------------------------------------------------------ #
    # Validate
    # ------------------------------------------------------------------ #

    def validate(self, dto: ValidateIn) -> ValidateOut:
        """Verify an access token. Callers never learn why a token failed."""
        try:
            claims = self.signer.validate(dto.access_token)
        except TokenValidationError as exc:
            self.log.debug(
                "auth.validate.rejected",
                extra={"event": "validate", "reason": exc.reason.value},
            )
            return ValidateOut(valid=False)
        return ValidateOut(valid=True, principal_id=claims.principal_id, username=claims.username)

    # ------------------------------------------------------------------ #
    # Refresh with single-use rotation
    # ------------------------------------------------------------------ #

    def refresh(self, dto: RefreshIn) -> TokenPairResult:
        """
        Rotate a refresh token and emit a new token pair.

        Security
        --------
        - ``ledger.consume`` deletes the presented token atomically, so a
          token can be exchanged at most once, even under concurrency.
        - Unknown, expired and consumed tokens are indistinguishable.
        - The username is resolved fresh from the credential store.
        - If storing the replacement fails after the consume, the session
          lineage ends and the client must log in again.
        """
        try:
            principal_id = self.ledger.consume(dto.refresh_token)
        except RefreshTokenNotFoundError as exc:
            self.log.info(
                "auth.refresh.rejected",
                extra={"event": "refresh", "reason": exc.reason.value},
            )
            return TokenPairResult(error=ErrorKind.INVALID_REFRESH_TOKEN)
        except StorageError as exc:
            return self._storage_failure("refresh", exc)

        try:
            principal = self.credentials.get_principal(principal_id)
        except StorageError as exc:
            return self._storage_failure("refresh", exc, principal_id=principal_id, lockout=True)
        if principal is None:
            self.log.info(
                "auth.refresh.rejected",
                extra={
                    "event": "refresh",
                    "reason": RefreshFailure.ORPHANED.value,
                    "principal_id": principal_id,
                },
            )
            return TokenPairResult(error=ErrorKind.INVALID_REFRESH_TOKEN)

        try:
            pair = self._issue_pair(principal)
        except StorageError as exc:
            return self._storage_failure("refresh", exc, principal_id=principal_id, lockout=True)

        self.log.info("auth.refresh.ok", extra={"event": "refresh", "principal_id": principal_id})
        return TokenPairResult(pair=pair)

    # ------------------------------------------------------------------ #
    # Logout
    # ------------------------------------------------------------------ #

    def logout(self, dto: LogoutIn) -> LogoutOut:
        """
        Confirm the caller holds a live session.

        No token is revoked: the access token and any refresh tokens stay
        usable until they expire.
        """
        try:
            claims = self.signer.validate(dto.access_token)
        except TokenValidationError as exc:
            self.log.info(
                "auth.logout.rejected",
                extra={"event": "logout", "reason": exc.reason.value},
            )
            return LogoutOut(success=False, error=ErrorKind.INVALID_TOKEN)
        self.log.info(
            "auth.logout.ok",
            extra={"event": "logout", "principal_id": claims.principal_id, "jti": claims.jti},
        )
        return LogoutOut(success=True)

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _issue_pair(self, principal: PrincipalRef) -> TokenPairOut:
        """Store a new refresh token, then sign the access token."""
        refresh_token = self.ledger.new_token()
        self.ledger.store(
            principal.principal_id,
            refresh_token,
            self.now_utc() + self.cfg.refresh_expires,
        )
        access = self.signer.generate(principal.principal_id, principal.username)
        return TokenPairOut(
            access_token=access.token,
            refresh_token=refresh_token,
            expires_at=access.expires_at,
        )

    def _storage_failure(
        self,
        event: str,
        exc: StorageError,
        *,
        principal_id: str | None = None,
        lockout: bool = False,
    ) -> TokenPairResult:
        log = self.log.warning if lockout else self.log.error
        log(
            "auth.%s.storage_error: %s",
            event,
            exc,
            extra={
                "event": event,
                "principal_id": principal_id,
                "reason": type(exc).__name__,
            },
        )
        return TokenPairResult(error=ErrorKind.STORAGE_UNAVAILABLE)
