"""Binding uploaded files to record fields.

A record holds at most one attachment per declared field. The manager keeps
storage and the document in step:

1. the new file is written before any reference to it is persisted,
2. the old file is removed once the record no longer points at it.

A crash between the two steps leaves an unreferenced file behind, never a
reference to a missing file; ``sweep()`` removes such leftovers. Files younger
than ``min_age`` are left alone: they may belong to an upload whose reference
is still being saved.

Repository calls run in a worker thread: they take the store lock and write
the whole document, which must not stall the event loop.
"""

from __future__ import annotations

import asyncio
import logging
import re
import time
from pathlib import PurePath
from typing import Any, Mapping

from campus_portal.db.collections import COLLECTIONS, get_spec
from campus_portal.db.repository import CollectionRepository, Record, record_label
from campus_portal.exceptions import NotFoundError, PortalError

from .base import StorageBackend

logger = logging.getLogger(__name__)

_EXT_RE = re.compile(r"^\.[A-Za-z0-9]{1,16}$")
# seconds an unreferenced upload is given to get its reference saved
DEFAULT_SWEEP_MIN_AGE = 300.0


def _extension(filename: str | None) -> str:
    ext = PurePath(filename or "").suffix.lower()
    return ext if _EXT_RE.match(ext) else ""


def _stored_at_ns(handle: str) -> int | None:
    # handles are "<time_ns><ext>"; anything else was not written by store()
    stem = handle.split(".", 1)[0]
    return int(stem) if stem.isdigit() else None


class AttachmentManager:
    def __init__(self, backend: StorageBackend, repository: CollectionRepository):
        self.backend = backend
        self.repository = repository

    def url_for(self, handle: str) -> str:
        return self.backend.url_for(handle)

    async def store(self, filename: str | None, data: bytes, content_type: str | None = None) -> str:
        """Write ``data`` under a fresh ``<time_ns><ext>`` name and return the name."""
        ext = _extension(filename)
        handle = f"{time.time_ns()}{ext}"
        while await self.backend.exists(handle):
            handle = f"{time.time_ns()}{ext}"
        await self.backend.put(handle, data, content_type)
        logger.debug("Stored attachment %s (%d bytes)", handle, len(data), extra={"attachment": handle})
        return handle

    async def discard(self, handle: str | None) -> bool:
        """Best-effort removal of a stored file; failures are logged, never raised."""
        if not handle:
            return False
        try:
            removed = await self.backend.delete(handle)
        except (OSError, PortalError) as exc:
            logger.warning("Could not remove attachment %s: %s", handle, exc, extra={"attachment": handle})
            return False
        if not removed:
            logger.warning("Attachment %s was already gone", handle, extra={"attachment": handle})
        return removed

    def _field(self, collection: str, field: str | None) -> str:
        field = field or get_spec(collection).attachment
        if not field:
            raise ValueError(f"Collection '{collection}' declares no attachment field")
        return field

    async def replace(self, collection: str, record: Mapping[str, Any] | Any, new_handle: str, *, field: str | None = None) -> Record:
        """Point the record's attachment field at ``new_handle``.

        The previous file, if any, is removed after the new reference is saved.
        When the save fails the new file is discarded and the error propagates.
        """
        field = self._field(collection, field)
        record_id = record["id"] if isinstance(record, Mapping) else record
        try:
            previous, updated = await asyncio.to_thread(
                self.repository.set_field, collection, record_id, field, new_handle
            )
        except Exception:
            await self.discard(new_handle)
            raise
        if previous and previous != new_handle:
            await self.discard(previous)
        logger.info("Attached %s to %s/%s.%s", new_handle, collection, record_id, field)
        return updated

    async def attach(self, collection: str, record: Mapping[str, Any] | Any, filename: str | None, data: bytes,
                     content_type: str | None = None, *, field: str | None = None) -> Record:
        """Store an upload and bind it to an existing record in one step."""
        record_id = record["id"] if isinstance(record, Mapping) else record
        if not await asyncio.to_thread(self.repository.exists, collection, record_id):
            raise NotFoundError(f"{record_label(collection)} not found")
        handle = await self.store(filename, data, content_type)
        return await self.replace(collection, record_id, handle, field=field)

    async def clear(self, collection: str, record: Mapping[str, Any] | Any, *, field: str | None = None) -> Record:
        """Null the attachment field, then remove the file it pointed at."""
        field = self._field(collection, field)
        record_id = record["id"] if isinstance(record, Mapping) else record
        previous, updated = await asyncio.to_thread(self.repository.set_field, collection, record_id, field, None)
        await self.discard(previous)
        return updated

    async def release(self, collection: str, record: Mapping[str, Any]) -> bool:
        """Remove the file of a record that has already been deleted."""
        field = get_spec(collection).attachment
        if not field:
            return False
        return await self.discard(record.get(field))

    def referenced(self, document: Mapping[str, Any]) -> set[str]:
        handles: set[str] = set()
        for spec in COLLECTIONS.values():
            if not spec.attachment:
                continue
            for rec in document.get(spec.name, []):
                handle = rec.get(spec.attachment)
                if handle:
                    handles.add(handle)
        return handles

    async def sweep(self, *, dry_run: bool = False, min_age: float = DEFAULT_SWEEP_MIN_AGE) -> list[str]:
        """Delete stored files that no record references. Returns their names.

        Keys are listed before the document is read, and files stored less than
        ``min_age`` seconds ago are kept, so a concurrent upload is never swept.
        """
        keys = await self.backend.list_keys()
        keep = self.referenced(await asyncio.to_thread(self.repository.store.snapshot))
        cutoff = time.time_ns() - int(min_age * 1_000_000_000)
        orphans = []
        for key in keys:
            if key in keep:
                continue
            stored_at = _stored_at_ns(key)
            if stored_at is not None and stored_at > cutoff:
                continue
            orphans.append(key)
        if not dry_run:
            for key in orphans:
                await self.discard(key)
        if orphans:
            logger.info("Swept %d orphaned attachment(s)%s", len(orphans), " (dry run)" if dry_run else "")
        return orphans
