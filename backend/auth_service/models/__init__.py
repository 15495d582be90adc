from auth_service.models.principal import Principal
from auth_service.models.refresh_token import RefreshToken

__all__ = ["Principal", "RefreshToken"]
