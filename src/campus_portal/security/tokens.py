from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any

import jwt

from campus_portal.exceptions import UnauthenticatedError


@dataclass(frozen=True)
class Identity:
    id: int
    username: str
    claims: dict[str, Any] = field(default_factory=dict)


def issue_token(
    *,
    user_id: int,
    username: str,
    secret: str,
    lifetime_seconds: int = 3600,
    algorithm: str = "HS256",
    now: datetime | None = None,
) -> str:
    issued = now or datetime.now(timezone.utc)
    payload = {
        "id": user_id,
        "username": username,
        "iat": issued,
        "exp": issued + timedelta(seconds=lifetime_seconds),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, *, secret: str, algorithm: str = "HS256") -> Identity:
    """Verify signature and expiry; every failure surfaces as ``UnauthenticatedError``."""
    try:
        claims = jwt.decode(
            token,
            secret,
            algorithms=[algorithm],
            options={"require": ["exp", "iat"]},
        )
    except jwt.ExpiredSignatureError:
        raise UnauthenticatedError("Token expired") from None
    except jwt.PyJWTError:
        raise UnauthenticatedError("Invalid token") from None

    user_id, username = claims.get("id"), claims.get("username")
    if not isinstance(user_id, int) or isinstance(user_id, bool) or not isinstance(username, str):
        raise UnauthenticatedError("Invalid token")
    return Identity(id=user_id, username=username, claims=claims)


__all__ = ["Identity", "issue_token", "decode_token"]
