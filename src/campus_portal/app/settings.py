from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class PortalSettings(BaseSettings):
    # flat = easy env overrides
    name: str = "Campus Portal"
    version: str = "0.1.0"

    db_path: Path = Path("db.json")
    upload_dir: Path = Path("uploads")
    upload_url: str = "/uploads"

    cors_origins: str = "*"
    # Off by default: the portal historically trusts callers on mutating routes.
    require_auth: bool = False

    host: str = "0.0.0.0"
    port: int = Field(default=3000, ge=1, le=65535)

    model_config = SettingsConfigDict(
        env_prefix="PORTAL_",  # PORTAL_DB_PATH, PORTAL_UPLOAD_DIR, ...
        env_file=".env",
        extra="ignore",
    )

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_portal_settings(**kwargs) -> PortalSettings:
    # Only include kwargs that are not None, so defaults in PortalSettings are used
    filtered_kwargs = {k: v for k, v in kwargs.items() if v is not None}
    return PortalSettings(**filtered_kwargs)
