from __future__ import annotations

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_JWT_SECRET = "secretkey"


class AuthSettings(BaseSettings):
    jwt_secret: SecretStr = SecretStr(DEFAULT_JWT_SECRET)
    jwt_algorithm: str = "HS256"
    jwt_lifetime_seconds: int = Field(default=60 * 60, gt=0)

    model_config = SettingsConfigDict(env_prefix="AUTH_", env_file=".env", extra="ignore")


_settings: AuthSettings | None = None


def get_auth_settings() -> AuthSettings:
    global _settings
    if _settings is None:
        _settings = AuthSettings()
    return _settings
