# auth_service/infra/sql/sql_credential_store.py
from __future__ import annotations

from uuid import uuid4

from sqlalchemy.exc import SQLAlchemyError
from werkzeug.security import check_password_hash, generate_password_hash

from auth_service.models import Principal
from auth_service.services._shared.base import BaseService
from auth_service.services._shared.errors import InvalidCredentialsError, StorageUnavailableError
from auth_service.services._shared.ports import CredentialStore, PrincipalRef


class SQLCredentialStore(BaseService, CredentialStore):
    """
    Credential store over the ``users`` table.

    Reads happen inside a read-only unit of work; the password hash never
    leaves this adapter. A stored hash in a format Werkzeug cannot parse is
    logged and treated as a failed password check.

    :param hash_method: Werkzeug method used for the dummy hash that equalizes
        timing between unknown usernames and wrong passwords.
    """

    def __init__(self, *, hash_method: str = "scrypt") -> None:
        super().__init__()
        self._dummy_hash = generate_password_hash(uuid4().hex, method=hash_method)

    def validate_credentials(self, username: str, password: str) -> PrincipalRef:
        try:
            with self.ro_uow() as uow:
                principal = uow.principals.get_by_username(username)
                if principal is None:
                    check_password_hash(self._dummy_hash, password)
                    raise InvalidCredentialsError()
                if not self._password_matches(principal, password):
                    raise InvalidCredentialsError()
                return PrincipalRef(principal_id=principal.id, username=principal.username)
        except SQLAlchemyError as exc:
            raise StorageUnavailableError("Credential store unavailable") from exc

    def get_principal(self, principal_id: str) -> PrincipalRef | None:
        try:
            with self.ro_uow() as uow:
                principal = uow.principals.get(principal_id)
                if principal is None:
                    return None
                return PrincipalRef(principal_id=principal.id, username=principal.username)
        except SQLAlchemyError as exc:
            raise StorageUnavailableError("Credential store unavailable") from exc

    def _password_matches(self, principal: Principal, password: str) -> bool:
        try:
            return principal.verify_password(password)
        except ValueError:
            # Hash in a format Werkzeug does not know (e.g. bcrypt "$2a$...")
            self.log.warning(
                "auth.credentials.unreadable_hash",
                extra={"event": "login", "principal_id": principal.id, "reason": "hash_format"},
            )
            return False
