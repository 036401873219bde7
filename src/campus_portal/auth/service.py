from __future__ import annotations

import logging
from dataclasses import dataclass

from campus_portal.db.repository import CollectionRepository, Record
from campus_portal.exceptions import ConflictError, UnauthorizedError, ValidationError
from campus_portal.security.passwords import hash_password, verify_password
from campus_portal.security.tokens import Identity, decode_token, issue_token

from .settings import AuthSettings, get_auth_settings

logger = logging.getLogger(__name__)

USERS = "users"
# Same message for unknown user and wrong password
INVALID_CREDENTIALS = "Invalid username or password"


@dataclass(frozen=True)
class LoginResult:
    token: str
    user_id: int
    username: str


def public_user(user: Record) -> Record:
    """User record without the password hash."""
    return {k: v for k, v in user.items() if k != "password"}


class AuthService:
    """Registration, login and token verification against the ``users`` collection."""

    def __init__(self, repository: CollectionRepository, settings: AuthSettings | None = None):
        self.repository = repository
        self.settings = settings or get_auth_settings()

    def _find_user(self, username: str) -> Record | None:
        matches = self.repository.list_by(USERS, "username", username)
        return matches[0] if matches else None

    def register(self, username: str | None, password: str | None) -> Record:
        if not username or not password:
            raise ValidationError("Incomplete data")
        if self._find_user(username) is not None:
            raise ConflictError("Username already taken")

        hashed = hash_password(password)
        with self.repository.store.transaction():
            # re-check under the writer lock: hashing above is slow
            if self._find_user(username) is not None:
                raise ConflictError("Username already taken")
            user = self.repository.create(USERS, {"username": username, "password": hashed})
        logger.info("Registered user %s", user["id"], extra={"username": username, "record_id": user["id"]})
        return user

    def login(self, username: str | None, password: str | None) -> LoginResult:
        user = self._find_user(username) if username else None
        if not verify_password(password or "", user.get("password") if user else None):
            logger.info("Failed login attempt", extra={"username": username})
            raise UnauthorizedError(INVALID_CREDENTIALS)

        token = issue_token(
            user_id=user["id"],
            username=user["username"],
            secret=self.settings.jwt_secret.get_secret_value(),
            lifetime_seconds=self.settings.jwt_lifetime_seconds,
            algorithm=self.settings.jwt_algorithm,
        )
        return LoginResult(token=token, user_id=user["id"], username=user["username"])

    def verify(self, token: str | None) -> Identity:
        if not token:
            raise UnauthorizedError("Missing token")
        return decode_token(
            token,
            secret=self.settings.jwt_secret.get_secret_value(),
            algorithm=self.settings.jwt_algorithm,
        )

    def verify_header(self, authorization: str | None) -> Identity:
        """Accept ``Bearer <token>``; anything else counts as a missing token."""
        scheme, _, token = (authorization or "").strip().partition(" ")
        if scheme.lower() != "bearer":
            raise UnauthorizedError("Missing token")
        return self.verify(token.strip())


__all__ = ["AuthService", "LoginResult", "public_user"]
