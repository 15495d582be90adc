"""Unit tests for :class:`PyJWTTokenSigner`."""

from __future__ import annotations

import base64
import json
from datetime import UTC, datetime, timedelta

import jwt
import pytest
from auth_service.infra.jwt import PyJWTTokenSigner
from auth_service.services._shared.errors import TokenFailure, TokenValidationError
from auth_service.services.token_exchange import AuthTokenConfig
from freezegun import freeze_time

SECRET = "unit-test-secret-key-with-32-bytes-min"


@pytest.fixture
def cfg() -> AuthTokenConfig:
    return AuthTokenConfig(secret_key=SECRET)


@pytest.fixture
def signer(cfg) -> PyJWTTokenSigner:
    return PyJWTTokenSigner(cfg)


def _b64(data: dict) -> str:
    raw = json.dumps(data, separators=(",", ":")).encode()
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode()


def _reason(signer: PyJWTTokenSigner, token: str) -> TokenFailure:
    with pytest.raises(TokenValidationError) as exc_info:
        signer.validate(token)
    return exc_info.value.reason


def test_generate_then_validate_round_trip(signer):
    signed = signer.generate("p-1", "alice")

    claims = signer.validate(signed.token)

    assert claims.principal_id == "p-1"
    assert claims.username == "alice"
    assert claims.jti == signed.jti
    assert claims.expires_at == signed.expires_at


def test_expiry_is_issue_time_plus_ttl():
    signer = PyJWTTokenSigner(AuthTokenConfig(secret_key=SECRET, access_expires=timedelta(minutes=5)))

    signed = signer.generate("p-1", "alice")
    claims = signer.validate(signed.token)

    assert claims.expires_at - claims.issued_at == timedelta(minutes=5)
    assert signed.expires_at.tzinfo is not None


def test_each_token_gets_a_distinct_jti(signer):
    first = signer.generate("p-1", "alice")
    second = signer.generate("p-1", "alice")
    assert first.jti != second.jti
    assert first.token != second.token


def test_token_is_rejected_once_expired(signer):
    with freeze_time("2026-01-01 12:00:00"):
        signed = signer.generate("p-1", "alice")

    with freeze_time("2026-01-02 11:59:59"):
        assert signer.validate(signed.token).principal_id == "p-1"

    with freeze_time("2026-01-02 12:00:01"):
        assert _reason(signer, signed.token) is TokenFailure.EXPIRED


@pytest.mark.parametrize("index", [0, 10, -10])
def test_tampered_signature_is_rejected(signer, index):
    token = signer.generate("p-1", "alice").token
    header, payload, signature = token.split(".")
    # The final character only carries base64 padding bits, so avoid it
    pos = index % (len(signature) - 1)
    swapped = "A" if signature[pos] != "A" else "B"
    forged = ".".join([header, payload, signature[:pos] + swapped + signature[pos + 1 :]])

    assert _reason(signer, forged) is TokenFailure.SIGNATURE_MISMATCH


def test_tampered_payload_is_rejected(signer):
    token = signer.generate("p-1", "alice").token
    header, _, signature = token.split(".")
    payload = _b64(
        {
            "sub": "p-2",
            "username": "mallory",
            "iat": 1,
            "exp": 4_102_444_800,
            "jti": "x",
        }
    )

    assert _reason(signer, f"{header}.{payload}.{signature}") is TokenFailure.SIGNATURE_MISMATCH


def test_token_signed_with_another_secret_is_rejected(signer):
    other = PyJWTTokenSigner(AuthTokenConfig(secret_key="another-secret-key-with-32-bytes-min!!"))
    token = other.generate("p-1", "alice").token

    assert _reason(signer, token) is TokenFailure.SIGNATURE_MISMATCH


def test_token_with_other_hmac_algorithm_is_rejected(signer):
    now = datetime.now(UTC)
    token = jwt.encode(
        {"sub": "p-1", "username": "alice", "iat": now, "exp": now + timedelta(hours=1), "jti": "j"},
        SECRET,
        algorithm="HS512",
    )

    assert _reason(signer, token) is TokenFailure.ALGORITHM_MISMATCH


def test_unsigned_token_is_rejected(signer):
    header = _b64({"alg": "none", "typ": "JWT"})
    payload = _b64({"sub": "p-1", "username": "alice", "iat": 1, "exp": 4_102_444_800, "jti": "j"})

    assert _reason(signer, f"{header}.{payload}.") is TokenFailure.ALGORITHM_MISMATCH


def test_missing_claims_are_rejected(signer):
    now = datetime.now(UTC)
    token = jwt.encode({"sub": "p-1", "exp": now + timedelta(hours=1)}, SECRET, algorithm="HS256")

    assert _reason(signer, token) is TokenFailure.MISSING_CLAIMS


@pytest.mark.parametrize("garbage", ["", "not-a-jwt", "a.b.c", "....."])
def test_garbage_is_malformed(signer, garbage):
    assert _reason(signer, garbage) is TokenFailure.MALFORMED


def test_repr_never_exposes_the_secret(signer):
    assert SECRET not in repr(signer)
