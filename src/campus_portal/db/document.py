from __future__ import annotations

import copy
import json
import logging
import os
import tempfile
import threading
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator

from .collections import COLLECTION_NAMES, empty_document

logger = logging.getLogger(__name__)

Document = dict[str, Any]


class DocumentStore:
    """The whole portal state as one JSON file, guarded by a single-writer lock.

    - ``load()`` reads the file, creating it when absent and resetting it when
      it cannot be parsed (the corruption is logged, the old content is lost).
    - ``save(doc)`` replaces the file atomically (temp file + ``os.replace``).
    - ``transaction()`` is the only way callers should mutate: it holds the
      lock across load-mutate-save so concurrent requests cannot lose updates.
    """

    def __init__(self, path: str | os.PathLike[str]):
        self.path = Path(path)
        self._lock = threading.RLock()
        self._doc: Document | None = None
        self._depth = 0
        self._last_id = 0

    # ------------------------------------------------------------------ disk

    def load(self) -> Document:
        with self._lock:
            if not self.path.exists():
                doc = empty_document()
                self.save(doc)
                logger.info("Created empty document at %s", self.path)
                return self._doc  # type: ignore[return-value]

            try:
                raw = json.loads(self.path.read_text(encoding="utf-8"))
                if not isinstance(raw, dict):
                    raise ValueError(f"top-level JSON value is {type(raw).__name__}, expected object")
            except (ValueError, UnicodeDecodeError) as exc:
                # json.JSONDecodeError is a ValueError
                logger.error("Failed to read %s, resetting to an empty document: %s", self.path, exc)
                doc = empty_document()
                self.save(doc)
                return self._doc  # type: ignore[return-value]

            self._set_cache(self._normalize(raw))
            return self._doc  # type: ignore[return-value]

    def save(self, doc: Document) -> None:
        with self._lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent)
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    json.dump(doc, fh, indent=2, ensure_ascii=False)
                    fh.flush()
                    os.fsync(fh.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
            self._set_cache(doc)

    def reload(self) -> Document:
        with self._lock:
            self._doc = None
            return self.load()

    # ---------------------------------------------------------------- memory

    def document(self) -> Document:
        """Live cached document; load it on first use."""
        with self._lock:
            if self._doc is None:
                return self.load()
            return self._doc

    @contextmanager
    def reading(self) -> Iterator[Document]:
        """Hold the lock over the live document without saving afterwards."""
        with self._lock:
            yield self.document()

    def snapshot(self) -> Document:
        with self._lock:
            return copy.deepcopy(self.document())

    @contextmanager
    def transaction(self) -> Iterator[Document]:
        with self._lock:
            doc = self.document()
            self._depth += 1
            try:
                yield doc
            except BaseException:
                self._depth -= 1
                if self._depth == 0:
                    # drop whatever the failed mutation left behind
                    self._doc = None
                raise
            else:
                self._depth -= 1
                if self._depth == 0:
                    try:
                        self.save(doc)
                    except BaseException:
                        # the cache must not outlive a write that never reached disk
                        self._doc = None
                        raise

    def next_id(self) -> int:
        """Millisecond timestamp, bumped past the last issued id when they collide."""
        with self._lock:
            self.document()
            candidate = time.time_ns() // 1_000_000
            if candidate <= self._last_id:
                candidate = self._last_id + 1
            self._last_id = candidate
            return candidate

    # --------------------------------------------------------------- helpers

    @staticmethod
    def _normalize(raw: dict[str, Any]) -> Document:
        for name in COLLECTION_NAMES:
            if not isinstance(raw.get(name), list):
                raw[name] = []
        return raw

    def _set_cache(self, doc: Document) -> None:
        self._doc = doc
        highest = max(
            (
                rec["id"]
                for name in COLLECTION_NAMES
                for rec in doc.get(name, [])
                if isinstance(rec, dict) and isinstance(rec.get("id"), int)
            ),
            default=0,
        )
        self._last_id = max(self._last_id, highest)
