"""Storage collaborator boundary.

docforge does not talk to a database. A class is bound to any object
implementing the Collection protocol; save/remove/reload translate document
state into calls on that collection.
"""

from __future__ import annotations

import copy
import logging
import uuid
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from docforge.core.errors import NoCollectionError

if TYPE_CHECKING:
    from docforge.document import Document

logger = logging.getLogger(__name__)


@runtime_checkable
class Collection(Protocol):
    """Interface a storage collection must implement."""

    def insert(self, values: dict[str, Any]) -> str: ...

    def update(self, id: str, values: dict[str, Any]) -> int: ...

    def remove(self, id: str) -> int: ...

    def find_one(self, id: str) -> dict[str, Any] | None: ...


class MemoryCollection:
    """In-process collection keyed by ``_id``."""

    def __init__(self, name: str = "memory"):
        self.name = name
        self.documents: dict[str, dict[str, Any]] = {}

    def insert(self, values: dict[str, Any]) -> str:
        doc_id = values.get("_id") or uuid.uuid4().hex
        if doc_id in self.documents:
            raise ValueError(f"Duplicate _id '{doc_id}' in collection '{self.name}'")
        stored = copy.deepcopy(values)
        stored["_id"] = doc_id
        self.documents[doc_id] = stored
        return doc_id

    def update(self, id: str, values: dict[str, Any]) -> int:
        if id not in self.documents:
            return 0
        self.documents[id].update(copy.deepcopy(values))
        return 1

    def remove(self, id: str) -> int:
        return 1 if self.documents.pop(id, None) is not None else 0

    def find_one(self, id: str) -> dict[str, Any] | None:
        found = self.documents.get(id)
        return copy.deepcopy(found) if found is not None else None

    def __len__(self) -> int:
        return len(self.documents)


def _require_collection(doc_or_cls: Any, action: str) -> Collection:
    collection = doc_or_cls.schema.get_collection()
    if collection is None:
        raise NoCollectionError(
            f"There is no collection to {action} for class '{doc_or_cls.schema.name}'"
        )
    return collection


def _persistable_fields(doc: Document) -> list[str]:
    return [name for name, f in doc.schema.fields.items() if not f.transient]


def save(doc: Document, validate: bool = True) -> Any:
    """Insert or update a document in its class's collection.

    Returns the new id on insert, the update count on update, or False when
    there is nothing to write or a before-event prevented the save.

    Raises:
        NoCollectionError: If no collection is bound
        ValidationError: If validation fails
    """
    collection = _require_collection(doc, "save to")
    schema = doc.schema
    update = bool(doc._values.get("_id"))

    if validate:
        doc.validate()

    if schema.trigger_event("beforeSave", doc).default_prevented:
        return False
    before = "beforeUpdate" if update else "beforeInsert"
    if schema.trigger_event(before, doc).default_prevented:
        return False

    names = _persistable_fields(doc)
    if update:
        names = [name for name in names if name in doc._modified]
    if update or not doc.get("_id"):
        names = [name for name in names if name != "_id"]
    if not names:
        return False
    values = {name: doc.raw(name) for name in names}

    if update:
        result = collection.update(doc._values["_id"], values)
        logger.debug("Updated %s '%s': %s", schema.name, doc._values["_id"], sorted(values))
    else:
        result = collection.insert(values)
        doc._values["_id"] = result
        logger.debug("Inserted %s '%s'", schema.name, result)

    schema.trigger_event("afterUpdate" if update else "afterInsert", doc)
    schema.trigger_event("afterSave", doc)

    doc._values.update({name: doc.get(name) for name in names})
    doc._values.update(doc._modified)
    doc._modified.clear()
    return result


def remove(doc: Document) -> int:
    """Remove a saved document from its collection.

    Raises:
        NoCollectionError: If no collection is bound
    """
    collection = _require_collection(doc, "remove from")
    doc_id = doc._values.get("_id")
    if not doc_id:
        return 0

    if doc.schema.trigger_event("beforeRemove", doc).default_prevented:
        return 0
    result = collection.remove(doc_id)
    doc.schema.trigger_event("afterRemove", doc)

    doc._values["_id"] = None
    logger.debug("Removed %s '%s'", doc.schema.name, doc_id)
    return result


def reload(doc: Document) -> None:
    """Replace a document's values with the stored state and clear modifications.

    Raises:
        NoCollectionError: If no collection is bound
    """
    collection = _require_collection(doc, "reload from")
    doc_id = doc._values.get("_id")
    if not doc_id:
        return
    stored = collection.find_one(doc_id)
    if stored is not None:
        doc._values = doc._cast_values(stored)
    doc._modified = {}


def find_one(cls: type[Document], id: str) -> Document | None:
    """Load a document by id, honoring ``_type`` for subclasses.

    Raises:
        NoCollectionError: If no collection is bound
    """
    collection = _require_collection(cls, "read from")
    stored = collection.find_one(id)
    if stored is None:
        return None
    registry = cls.schema.registry
    if registry is None:
        return cls(stored)
    return registry.transform(stored, cls)
