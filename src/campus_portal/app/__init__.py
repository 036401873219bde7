from .core.env import Env, get_env, is_prod, pick
from .core.logging import setup_logging
from .settings import PortalSettings, get_portal_settings

__all__ = [
    "Env",
    "get_env",
    "is_prod",
    "pick",
    "setup_logging",
    "PortalSettings",
    "get_portal_settings",
]
