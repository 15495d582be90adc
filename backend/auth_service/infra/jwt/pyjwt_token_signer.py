# auth_service/infra/jwt/pyjwt_token_signer.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any, cast
from uuid import uuid4

import jwt

from auth_service.services._shared.errors import TokenFailure, TokenValidationError
from auth_service.services._shared.ports import Claims, SignedToken, TokenSigner
from auth_service.services.token_exchange.dto import AuthTokenConfig

REQUIRED_CLAIMS = ("sub", "username", "iat", "exp", "jti")


@dataclass(frozen=True, slots=True)
class PyJWTTokenSigner(TokenSigner):
    """
    HMAC access-token signer built on PyJWT.

    The signer is stateless: every result depends only on the input, the
    configured secret and the current time.

    :param cfg: Immutable token configuration (secret, TTL, algorithm).
    """

    cfg: AuthTokenConfig

    def generate(self, principal_id: str, username: str) -> SignedToken:
        # Whole seconds so the returned expiry equals the embedded ``exp``
        issued_at = datetime.now(UTC).replace(microsecond=0)
        expires_at = issued_at + self.cfg.access_expires
        jti = str(uuid4())
        payload: dict[str, Any] = {
            "sub": principal_id,
            "username": username,
            "iat": issued_at,
            "exp": expires_at,
            "jti": jti,
        }
        token = jwt.encode(payload, self.cfg.secret_key, algorithm=self.cfg.algorithm)
        return SignedToken(token=token, expires_at=expires_at, jti=jti)

    def validate(self, token: str) -> Claims:
        # Reject algorithm confusion before any key material is used
        try:
            header = jwt.get_unverified_header(token)
        except jwt.DecodeError as exc:
            raise TokenValidationError(TokenFailure.MALFORMED) from exc
        if header.get("alg") != self.cfg.algorithm:
            raise TokenValidationError(TokenFailure.ALGORITHM_MISMATCH)

        try:
            payload = cast(
                dict[str, Any],
                jwt.decode(
                    token,
                    self.cfg.secret_key,
                    algorithms=[self.cfg.algorithm],
                    options={"require": list(REQUIRED_CLAIMS)},
                ),
            )
        except jwt.ExpiredSignatureError as exc:
            raise TokenValidationError(TokenFailure.EXPIRED) from exc
        except jwt.InvalidSignatureError as exc:
            raise TokenValidationError(TokenFailure.SIGNATURE_MISMATCH) from exc
        except jwt.InvalidAlgorithmError as exc:
            raise TokenValidationError(TokenFailure.ALGORITHM_MISMATCH) from exc
        except jwt.MissingRequiredClaimError as exc:
            raise TokenValidationError(TokenFailure.MISSING_CLAIMS) from exc
        except jwt.InvalidTokenError as exc:
            raise TokenValidationError(TokenFailure.MALFORMED) from exc

        principal_id = payload["sub"]
        username = payload["username"]
        if not isinstance(principal_id, str) or not isinstance(username, str):
            raise TokenValidationError(TokenFailure.MALFORMED)

        return Claims(
            principal_id=principal_id,
            username=username,
            issued_at=datetime.fromtimestamp(int(payload["iat"]), tz=UTC),
            expires_at=datetime.fromtimestamp(int(payload["exp"]), tz=UTC),
            jti=str(payload["jti"]),
        )
