from .collections import COLLECTION_NAMES, COLLECTIONS, CollectionSpec, ForeignKey, get_spec, normalize_id
from .document import Document, DocumentStore
from .repository import CollectionRepository, Record

__all__ = [
    "COLLECTION_NAMES",
    "COLLECTIONS",
    "CollectionSpec",
    "ForeignKey",
    "get_spec",
    "normalize_id",
    "Document",
    "DocumentStore",
    "CollectionRepository",
    "Record",
]
