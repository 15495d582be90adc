from .sql_credential_store import SQLCredentialStore
from .sql_refresh_token_ledger import SQLRefreshTokenLedger

__all__ = ["SQLCredentialStore", "SQLRefreshTokenLedger"]
