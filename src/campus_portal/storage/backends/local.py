from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from pathlib import Path

from ..base import FileNotFoundError, validate_key

logger = logging.getLogger(__name__)


class LocalBackend:
    """Attachments as plain files in one directory.

    The directory is served read-only by the HTTP layer under ``base_url``.
    """

    def __init__(self, base_path: str | os.PathLike[str], base_url: str = "/uploads"):
        self.base_path = Path(base_path)
        self.base_url = base_url.rstrip("/")
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _get_file_path(self, key: str) -> Path:
        return self.base_path / validate_key(key)

    def _write(self, path: Path, data: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(data)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    async def put(self, key: str, data: bytes, content_type: str | None = None) -> str:
        path = self._get_file_path(key)
        await asyncio.to_thread(self._write, path, data)
        logger.debug("Wrote %d bytes to %s", len(data), path)
        return key

    async def get(self, key: str) -> bytes:
        path = self._get_file_path(key)
        try:
            return await asyncio.to_thread(path.read_bytes)
        except OSError as exc:
            if not path.exists():
                raise FileNotFoundError(f"File not found: {key}") from exc
            raise

    async def delete(self, key: str) -> bool:
        path = self._get_file_path(key)
        try:
            await asyncio.to_thread(path.unlink)
        except OSError:
            if not path.exists():
                return False
            raise
        return True

    async def exists(self, key: str) -> bool:
        return self._get_file_path(key).is_file()

    async def list_keys(self) -> list[str]:
        return sorted(
            p.name
            for p in self.base_path.iterdir()
            if p.is_file() and not p.name.startswith(".")
        )

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{validate_key(key)}"
