from __future__ import annotations

import logging

from fastapi_users.password import PasswordHelper
from pwdlib.exceptions import UnknownHashError

logger = logging.getLogger(__name__)

# argon2 first, bcrypt accepted for hashes written by older deployments
_helper = PasswordHelper()


def hash_password(password: str) -> str:
    return _helper.hash(password)


def verify_password(password: str, hashed: str | None) -> bool:
    """Constant-work check: an absent hash still costs one hashing round."""
    if not hashed:
        _helper.hash(password)
        return False
    try:
        verified, _ = _helper.verify_and_update(password, hashed)
    except UnknownHashError:
        logger.warning("Stored password hash has an unrecognized format")
        return False
    return verified


__all__ = ["hash_password", "verify_password"]
