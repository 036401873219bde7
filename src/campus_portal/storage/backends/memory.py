from __future__ import annotations

from ..base import FileNotFoundError, validate_key


class MemoryBackend:
    """Dict-backed storage for tests and throwaway runs."""

    def __init__(self, base_url: str = "memory://"):
        self.base_url = base_url
        self._files: dict[str, bytes] = {}

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> str:
        self._files[validate_key(key)] = bytes(data)
        return key

    async def get(self, key: str) -> bytes:
        try:
            return self._files[validate_key(key)]
        except KeyError:
            raise FileNotFoundError(f"File not found: {key}") from None

    async def delete(self, key: str) -> bool:
        return self._files.pop(validate_key(key), None) is not None

    async def exists(self, key: str) -> bool:
        return validate_key(key) in self._files

    async def list_keys(self) -> list[str]:
        return sorted(self._files)

    def url_for(self, key: str) -> str:
        return f"{self.base_url}{validate_key(key)}"
