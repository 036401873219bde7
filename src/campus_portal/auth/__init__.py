from .service import AuthService, LoginResult, public_user
from .settings import AuthSettings, get_auth_settings

__all__ = [
    "AuthService",
    "LoginResult",
    "public_user",
    "AuthSettings",
    "get_auth_settings",
]
