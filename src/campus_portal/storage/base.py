"""Storage backend contract for uploaded attachments.

Keys are flat file names (``1718030000123456789.png``). Nested paths are not
allowed: every attachment lives directly in the backend's root.
"""

from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

from campus_portal.exceptions import PortalError

MAX_KEY_LENGTH = 255
_KEY_RE = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")


class StorageError(PortalError):
    default_message = "Storage error"


class FileNotFoundError(StorageError):  # noqa: A001 - mirrors the builtin on purpose
    status_code = 404
    default_message = "File not found"


class InvalidKeyError(StorageError):
    status_code = 400
    default_message = "Invalid file name"


def validate_key(key: str) -> str:
    if not key or len(key) > MAX_KEY_LENGTH or ".." in key or not _KEY_RE.match(key):
        raise InvalidKeyError(f"Invalid file name: {key!r}")
    return key


@runtime_checkable
class StorageBackend(Protocol):
    async def put(self, key: str, data: bytes, content_type: str | None = None) -> str:
        """Store ``data`` under ``key`` and return the key."""
        ...

    async def get(self, key: str) -> bytes: ...

    async def delete(self, key: str) -> bool:
        """Remove ``key``; ``False`` when nothing was stored there."""
        ...

    async def exists(self, key: str) -> bool: ...

    async def list_keys(self) -> list[str]: ...

    def url_for(self, key: str) -> str: ...
