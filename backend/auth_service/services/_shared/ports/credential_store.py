from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol
from uuid import uuid4

from werkzeug.security import check_password_hash, generate_password_hash

from auth_service.services._shared.errors import InvalidCredentialsError


@dataclass(frozen=True, slots=True)
class PrincipalRef:
    """Identity resolved from a credential record. Never carries the hash."""

    principal_id: str
    username: str


class CredentialStore(Protocol):
    """Read-only access to principal credential records."""

    def validate_credentials(self, username: str, password: str) -> PrincipalRef:
        """
        Verify ``password`` against the stored hash for ``username``.

        :raises InvalidCredentialsError: Unknown username or wrong password.
        :raises StorageUnavailableError: If the backend cannot be reached.
        """
        ...

    def get_principal(self, principal_id: str) -> PrincipalRef | None:
        """Resolve the current username of a principal, or ``None`` if gone."""
        ...


class InMemoryCredentialStore(CredentialStore):
    """Dictionary-backed credential store used in unit tests."""

    def __init__(self, *, method: str = "pbkdf2:sha256:1000") -> None:
        self._method = method
        self._by_username: dict[str, tuple[str, str]] = {}
        self._dummy_hash = generate_password_hash(uuid4().hex, method=method)

    def add(self, username: str, password: str, *, principal_id: str | None = None) -> PrincipalRef:
        """Provision a principal and return its reference."""
        pid = principal_id or str(uuid4())
        self._by_username[username] = (pid, generate_password_hash(password, method=self._method))
        return PrincipalRef(principal_id=pid, username=username)

    def rename(self, principal_id: str, new_username: str) -> None:
        for username, (pid, pw_hash) in list(self._by_username.items()):
            if pid == principal_id:
                del self._by_username[username]
                self._by_username[new_username] = (pid, pw_hash)
                return

    def remove(self, username: str) -> None:
        self._by_username.pop(username, None)

    def validate_credentials(self, username: str, password: str) -> PrincipalRef:
        entry = self._by_username.get(username)
        if entry is None:
            # Same work as a real check so timing does not reveal unknown users
            check_password_hash(self._dummy_hash, password)
            raise InvalidCredentialsError()
        pid, pw_hash = entry
        if not check_password_hash(pw_hash, password):
            raise InvalidCredentialsError()
        return PrincipalRef(principal_id=pid, username=username)

    def get_principal(self, principal_id: str) -> PrincipalRef | None:
        for username, (pid, _) in self._by_username.items():
            if pid == principal_id:
                return PrincipalRef(principal_id=pid, username=username)
        return None
