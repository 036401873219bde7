"""Declared shape of every collection held in the portal document.

The document has a fixed set of top-level collections. Each one declares the
fields it accepts on create, the fields a partial update may touch, and any
relations the repository must enforce (foreign keys, cascades, attachments).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Mapping

from campus_portal.exceptions import UnknownCollectionError, ValidationError


def normalize_id(value: Any) -> int:
    """Coerce a record identifier (often a path segment) to ``int``."""
    if isinstance(value, bool):
        raise ValidationError(f"Invalid id: {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid id: {value!r}") from None


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ForeignKey:
    """``field`` on this collection references ``id`` on ``parent``."""

    field: str
    parent: str
    cascade_delete: bool = True


@dataclass(frozen=True)
class CollectionSpec:
    name: str
    required: tuple[str, ...] = ()
    optional: Mapping[str, Any] = field(default_factory=dict)
    updatable: tuple[str, ...] = ()
    coerce: Mapping[str, Callable[[Any], Any]] = field(default_factory=dict)
    auto: Mapping[str, Callable[[], Any]] = field(default_factory=dict)
    attachment: str | None = None
    foreign_keys: tuple[ForeignKey, ...] = ()

    def build(self, fields: Mapping[str, Any]) -> dict[str, Any]:
        """Validate create input and return the record body (without ``id``)."""
        missing = [name for name in self.required if not fields.get(name)]
        if missing:
            raise ValidationError(f"Incomplete data: missing {', '.join(missing)}")

        body: dict[str, Any] = {name: fields[name] for name in self.required}
        for name, default in self.optional.items():
            body[name] = fields.get(name) or default
        for name, factory in self.auto.items():
            body[name] = factory()
        if self.attachment and self.attachment not in body:
            body[self.attachment] = None
        for name, fn in self.coerce.items():
            if body.get(name) is not None:
                body[name] = fn(body[name])
        return body

    def merge(self, record: dict[str, Any], fields: Mapping[str, Any]) -> dict[str, Any]:
        """Overwrite only the updatable fields given a truthy value."""
        for name in self.updatable:
            value = fields.get(name)
            if value:
                record[name] = self.coerce[name](value) if name in self.coerce else value
        return record


COLLECTIONS: dict[str, CollectionSpec] = {
    spec.name: spec
    for spec in (
        CollectionSpec(
            name="users",
            required=("username", "password"),
            updatable=("firstName", "lastName", "email"),
            attachment="photoPath",
        ),
        CollectionSpec(
            name="assignments",
            required=("title", "course", "deadline"),
            updatable=("title", "course", "deadline"),
            attachment="image",
        ),
        CollectionSpec(
            name="schedules",
            required=("title", "date", "time"),
            updatable=("title", "date", "time"),
        ),
        CollectionSpec(
            name="exams",
            required=("title", "course", "date", "time"),
            updatable=("title", "course", "date", "time"),
        ),
        CollectionSpec(
            name="questions",
            required=("exam_id", "question"),
            updatable=("question",),
            coerce={"exam_id": normalize_id},
            foreign_keys=(ForeignKey(field="exam_id", parent="exams"),),
        ),
        CollectionSpec(
            name="courses",
            required=("name", "time", "description", "instructor"),
            updatable=("name", "time", "description", "instructor"),
        ),
        CollectionSpec(
            name="forum",
            required=("content", "user"),
            updatable=("content", "user"),
            auto={"createdAt": utc_now_iso},
        ),
        CollectionSpec(
            name="calendar",
            required=("date", "title", "user"),
            optional={"description": ""},
            updatable=("date", "title", "description", "user"),
        ),
    )
}

COLLECTION_NAMES: tuple[str, ...] = tuple(COLLECTIONS)


def get_spec(name: str) -> CollectionSpec:
    try:
        return COLLECTIONS[name]
    except KeyError:
        raise UnknownCollectionError(f"Unknown collection: {name}") from None


def children_of(parent: str) -> list[tuple[CollectionSpec, ForeignKey]]:
    """Collections holding a foreign key that points at ``parent``."""
    return [
        (spec, fk)
        for spec in COLLECTIONS.values()
        for fk in spec.foreign_keys
        if fk.parent == parent
    ]


def empty_document() -> dict[str, list[dict[str, Any]]]:
    return {name: [] for name in COLLECTION_NAMES}
