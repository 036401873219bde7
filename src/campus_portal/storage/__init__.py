from .attachments import AttachmentManager
from .backends import LocalBackend, MemoryBackend
from .base import FileNotFoundError, InvalidKeyError, StorageBackend, StorageError

__all__ = [
    "AttachmentManager",
    "LocalBackend",
    "MemoryBackend",
    "StorageBackend",
    "StorageError",
    "FileNotFoundError",
    "InvalidKeyError",
]
