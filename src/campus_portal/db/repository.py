from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Mapping, Optional

from campus_portal.exceptions import NotFoundError

from .collections import children_of, get_spec, normalize_id
from .document import DocumentStore

logger = logging.getLogger(__name__)

Record = dict[str, Any]
Predicate = Callable[[Record], bool]


def _find(records: list[Record], id: int) -> Optional[int]:
    for idx, rec in enumerate(records):
        if rec.get("id") == id:
            return idx
    return None


class CollectionRepository:
    """Generic CRUD over the named collections of a ``DocumentStore``.

    - Reads return copies so callers cannot mutate the cached document.
    - Writes run inside ``store.transaction()`` and persist the whole document.
    - Ids are normalized to ``int`` before comparison.
    """

    def __init__(self, store: DocumentStore):
        self.store = store

    def list(self, collection: str) -> list[Record]:
        get_spec(collection)
        with self.store.reading() as doc:
            return copy.deepcopy(doc[collection])

    def list_where(self, collection: str, predicate: Predicate) -> list[Record]:
        return [rec for rec in self.list(collection) if predicate(rec)]

    def list_by(self, collection: str, field: str, value: Any) -> list[Record]:
        return self.list_where(collection, lambda rec: rec.get(field) == value)

    def get(self, collection: str, id: Any) -> Record:
        get_spec(collection)
        rid = normalize_id(id)
        with self.store.reading() as doc:
            idx = _find(doc[collection], rid)
            if idx is None:
                raise NotFoundError(f"{record_label(collection)} not found")
            return copy.deepcopy(doc[collection][idx])

    def exists(self, collection: str, id: Any) -> bool:
        get_spec(collection)
        rid = normalize_id(id)
        with self.store.reading() as doc:
            return _find(doc[collection], rid) is not None

    def create(self, collection: str, fields: Mapping[str, Any]) -> Record:
        spec = get_spec(collection)
        body = spec.build(fields)
        with self.store.transaction() as doc:
            for fk in spec.foreign_keys:
                if _find(doc[fk.parent], body[fk.field]) is None:
                    raise NotFoundError(f"{record_label(fk.parent)} not found")
            record = {"id": self.store.next_id(), **body}
            doc[collection].append(record)
        logger.debug("Created %s/%s", collection, record["id"], extra={"collection": collection, "record_id": record["id"]})
        return copy.deepcopy(record)

    def update(self, collection: str, id: Any, fields: Mapping[str, Any]) -> Record:
        spec = get_spec(collection)
        rid = normalize_id(id)
        with self.store.transaction() as doc:
            idx = _find(doc[collection], rid)
            if idx is None:
                raise NotFoundError(f"{record_label(collection)} not found")
            record = spec.merge(doc[collection][idx], fields)
            return copy.deepcopy(record)

    def set_field(self, collection: str, id: Any, field: str, value: Any) -> tuple[Any, Record]:
        """Write one field unconditionally; ``None`` clears it.

        Returns the previous value together with the updated record.
        """
        get_spec(collection)
        rid = normalize_id(id)
        with self.store.transaction() as doc:
            idx = _find(doc[collection], rid)
            if idx is None:
                raise NotFoundError(f"{record_label(collection)} not found")
            previous = doc[collection][idx].get(field)
            doc[collection][idx][field] = value
            return previous, copy.deepcopy(doc[collection][idx])

    def delete(self, collection: str, id: Any) -> bool:
        """Remove the record and any children declared with a cascading key.

        The document is saved even when nothing matched.
        """
        get_spec(collection)
        rid = normalize_id(id)
        with self.store.transaction() as doc:
            before = len(doc[collection])
            doc[collection] = [rec for rec in doc[collection] if rec.get("id") != rid]
            removed = len(doc[collection]) != before
            if removed:
                for child, fk in children_of(collection):
                    if not fk.cascade_delete:
                        continue
                    kept = [rec for rec in doc[child.name] if rec.get(fk.field) != rid]
                    dropped = len(doc[child.name]) - len(kept)
                    doc[child.name] = kept
                    if dropped:
                        logger.info("Cascade removed %d %s of %s/%s", dropped, child.name, collection, rid)
        return removed


def record_label(collection: str) -> str:
    # "questions" -> "Question", "calendar" -> "Calendar"
    name = collection[:-1] if collection.endswith("s") else collection
    return name.capitalize()
