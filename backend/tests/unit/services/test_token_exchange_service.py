"""Unit tests for :class:`TokenExchangeService` over in-memory adapters."""

from __future__ import annotations

import logging
import threading
from datetime import UTC, datetime, timedelta

import pytest
from auth_service.infra.jwt import PyJWTTokenSigner
from auth_service.services._shared.errors import (
    ErrorKind,
    RefreshTokenCollisionError,
    StorageUnavailableError,
)
from auth_service.services._shared.ports import (
    InMemoryCredentialStore,
    InMemoryRefreshTokenLedger,
)
from auth_service.services.token_exchange import (
    AuthTokenConfig,
    LoginIn,
    LogoutIn,
    RefreshIn,
    TokenExchangeService,
    ValidateIn,
)
from freezegun import freeze_time

SECRET = "service-test-secret-key-with-32-bytes!"


class FlakyLedger(InMemoryRefreshTokenLedger):
    """In-memory ledger whose ``store`` can be switched to fail."""

    def __init__(self) -> None:
        super().__init__()
        self.store_error: Exception | None = None

    def store(self, principal_id, token, expires_at):
        if self.store_error is not None:
            raise self.store_error
        super().store(principal_id, token, expires_at)


@pytest.fixture
def cfg() -> AuthTokenConfig:
    return AuthTokenConfig(secret_key=SECRET)


@pytest.fixture
def credentials() -> InMemoryCredentialStore:
    store = InMemoryCredentialStore()
    store.add("alice", "secret", principal_id="p-alice")
    return store


@pytest.fixture
def ledger() -> FlakyLedger:
    return FlakyLedger()


@pytest.fixture
def service(credentials, ledger, cfg) -> TokenExchangeService:
    return TokenExchangeService(
        credentials=credentials,
        signer=PyJWTTokenSigner(cfg),
        ledger=ledger,
        token_cfg=cfg,
    )


# ----------------------------- login --------------------------------------- #


def test_login_issues_a_usable_pair(service, ledger):
    result = service.login(LoginIn("alice", "secret"))

    assert result.ok and result.error is None
    assert service.validate(ValidateIn(result.pair.access_token)).valid
    assert ledger.lookup(result.pair.refresh_token) == "p-alice"


def test_login_expiry_tracks_access_ttl(service):
    with freeze_time("2026-05-01 08:00:00"):
        result = service.login(LoginIn("alice", "secret"))

    assert result.pair.expires_at == datetime(2026, 5, 2, 8, 0, tzinfo=UTC)


def test_login_stores_refresh_token_with_refresh_ttl(service, ledger):
    with freeze_time("2026-05-01 08:00:00"):
        result = service.login(LoginIn("alice", "secret"))

    with freeze_time("2026-05-08 07:59:59"):
        assert ledger.lookup(result.pair.refresh_token) == "p-alice"
    with freeze_time("2026-05-08 08:00:00"):
        assert len(ledger) == 1
        assert ledger.purge_expired() == 1


@pytest.mark.parametrize(("username", "password"), [("alice", "wrong"), ("bob", "secret")])
def test_login_failures_are_indistinguishable(service, ledger, username, password):
    result = service.login(LoginIn(username, password))

    assert result.pair is None
    assert result.error is ErrorKind.INVALID_CREDENTIALS
    assert len(ledger) == 0


def test_login_fails_closed_when_ledger_is_down(service, ledger):
    ledger.store_error = StorageUnavailableError()

    result = service.login(LoginIn("alice", "secret"))

    assert result.pair is None
    assert result.error is ErrorKind.STORAGE_UNAVAILABLE


def test_login_reports_token_collision_as_storage_failure(service, ledger):
    ledger.store_error = RefreshTokenCollisionError()

    result = service.login(LoginIn("alice", "secret"))

    assert result.error is ErrorKind.STORAGE_UNAVAILABLE


# ----------------------------- validate ------------------------------------ #


def test_validate_returns_identity(service):
    pair = service.login(LoginIn("alice", "secret")).pair

    out = service.validate(ValidateIn(pair.access_token))

    assert (out.valid, out.principal_id, out.username) == (True, "p-alice", "alice")


@pytest.mark.parametrize("token", ["", "garbage", "a.b.c"])
def test_validate_rejects_without_detail(service, token):
    out = service.validate(ValidateIn(token))
    assert out.valid is False
    assert out.principal_id is None and out.username is None


def test_validate_rejects_expired_access_token(service):
    with freeze_time("2026-05-01 08:00:00"):
        pair = service.login(LoginIn("alice", "secret")).pair

    with freeze_time("2026-05-02 08:00:01"):
        assert service.validate(ValidateIn(pair.access_token)).valid is False


# ----------------------------- refresh ------------------------------------- #


def test_refresh_rotates_the_refresh_token(service, ledger):
    first = service.login(LoginIn("alice", "secret")).pair

    second = service.refresh(RefreshIn(first.refresh_token))

    assert second.ok
    assert second.pair.refresh_token != first.refresh_token
    assert service.validate(ValidateIn(second.pair.access_token)).principal_id == "p-alice"
    assert len(ledger) == 1


def test_refresh_token_is_single_use(service):
    pair = service.login(LoginIn("alice", "secret")).pair
    assert service.refresh(RefreshIn(pair.refresh_token)).ok

    replay = service.refresh(RefreshIn(pair.refresh_token))

    assert replay.pair is None
    assert replay.error is ErrorKind.INVALID_REFRESH_TOKEN


def test_refresh_with_unknown_token(service):
    result = service.refresh(RefreshIn("never-issued"))
    assert result.error is ErrorKind.INVALID_REFRESH_TOKEN


def test_refresh_with_expired_token(service):
    with freeze_time("2026-05-01 08:00:00"):
        pair = service.login(LoginIn("alice", "secret")).pair

    with freeze_time("2026-05-08 08:00:01"):
        result = service.refresh(RefreshIn(pair.refresh_token))

    assert result.error is ErrorKind.INVALID_REFRESH_TOKEN


def test_refresh_picks_up_renamed_username(service, credentials):
    pair = service.login(LoginIn("alice", "secret")).pair
    credentials.rename("p-alice", "alicia")

    result = service.refresh(RefreshIn(pair.refresh_token))

    assert service.validate(ValidateIn(result.pair.access_token)).username == "alicia"


def test_refresh_for_removed_principal_is_rejected(service, credentials):
    pair = service.login(LoginIn("alice", "secret")).pair
    credentials.remove("alice")

    result = service.refresh(RefreshIn(pair.refresh_token))

    assert result.error is ErrorKind.INVALID_REFRESH_TOKEN


def test_refresh_store_failure_ends_the_session_lineage(service, ledger, caplog):
    pair = service.login(LoginIn("alice", "secret")).pair
    ledger.store_error = StorageUnavailableError()

    with caplog.at_level(logging.WARNING):
        result = service.refresh(RefreshIn(pair.refresh_token))

    assert result.error is ErrorKind.STORAGE_UNAVAILABLE
    assert any(r.levelno == logging.WARNING and getattr(r, "event", None) == "refresh" for r in caplog.records)

    # The presented token was consumed, so a retry cannot succeed
    ledger.store_error = None
    assert service.refresh(RefreshIn(pair.refresh_token)).error is ErrorKind.INVALID_REFRESH_TOKEN


def test_concurrent_refresh_has_a_single_winner(service):
    pair = service.login(LoginIn("alice", "secret")).pair
    barrier = threading.Barrier(8)
    outcomes = []
    lock = threading.Lock()

    def worker() -> None:
        barrier.wait()
        result = service.refresh(RefreshIn(pair.refresh_token))
        with lock:
            outcomes.append(result)

    threads = [threading.Thread(target=worker) for _ in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert sum(1 for r in outcomes if r.ok) == 1
    assert all(r.error is ErrorKind.INVALID_REFRESH_TOKEN for r in outcomes if not r.ok)


# ----------------------------- logout -------------------------------------- #


def test_logout_acknowledges_a_valid_token_without_revoking(service):
    pair = service.login(LoginIn("alice", "secret")).pair

    out = service.logout(LogoutIn(pair.access_token))

    assert out.success is True and out.error is None
    assert service.validate(ValidateIn(pair.access_token)).valid
    assert service.refresh(RefreshIn(pair.refresh_token)).ok


def test_logout_with_invalid_token(service):
    out = service.logout(LogoutIn("garbage"))
    assert out.success is False
    assert out.error is ErrorKind.INVALID_TOKEN


# ----------------------------- logging ------------------------------------- #


def test_logs_never_contain_secrets_or_tokens(service, caplog):
    with caplog.at_level(logging.DEBUG):
        pair = service.login(LoginIn("alice", "secret")).pair
        service.login(LoginIn("alice", "wrong-password"))
        service.refresh(RefreshIn(pair.refresh_token))
        service.validate(ValidateIn("garbage"))

    text = " ".join(r.getMessage() + repr(r.__dict__) for r in caplog.records)
    assert caplog.records
    assert "wrong-password" not in text
    assert pair.access_token not in text
    assert pair.refresh_token not in text
    assert SECRET not in text
