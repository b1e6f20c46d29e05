"""Effective schema of one composed document class."""

from __future__ import annotations

import logging
import weakref
from typing import TYPE_CHECKING, Any, Iterator

from docforge.core.config import DocforgeConfig
from docforge.core.types import TypeKind
from docforge.schema.events import Event, EventHandler
from docforge.schema.fields import FieldDefinition
from docforge.validation.types import ValidatorDefinition

if TYPE_CHECKING:
    from docforge.document import Document
    from docforge.modules.indexes import IndexDefinition
    from docforge.registry import ClassRegistry
    from docforge.storage import Collection

logger = logging.getLogger(__name__)


class Schema:
    """Merged fields, validators, behaviors, events, methods and indexes of a class.

    Built by the ClassRegistry pipeline; each module installs its merged
    fragment during apply_definition. ``own_fields`` holds the fields declared
    by this class (plus mandatory ``_id``/``_type``), ``fields`` the effective
    map including inherited fields, ancestors first.
    """

    def __init__(
        self,
        name: str,
        parent: Schema | None = None,
        registry: ClassRegistry | None = None,
        config: DocforgeConfig | None = None,
    ):
        self.name = name
        self.parent = parent
        self.config = config or DocforgeConfig()
        self.cls: type[Document] | None = None
        self._registry = weakref.ref(registry) if registry is not None else None

        self.own_fields: dict[str, FieldDefinition] = {}
        self.fields: dict[str, FieldDefinition] = {}
        self.validators: dict[str, list[ValidatorDefinition]] = {}
        self.behaviors: dict[str, dict[str, Any]] = {}
        self.events: dict[str, list[EventHandler]] = {}
        self.methods: dict[str, Any] = {}
        self.indexes: dict[str, IndexDefinition] = {}
        self.collection: Collection | None = None

        # Module name -> merged fragment, consumed when composing subclasses
        self.fragments: dict[str, Any] = {}

    def __repr__(self) -> str:
        parent = self.parent.name if self.parent else None
        return f"Schema(name={self.name!r}, parent={parent!r})"

    # -------------------------------------------------------------------------
    # Inheritance chain
    # -------------------------------------------------------------------------

    def iter_ancestors(self) -> Iterator[Schema]:
        """Yield this schema, then each parent up to the root."""
        seen: set[int] = set()
        schema: Schema | None = self
        while schema is not None:
            if id(schema) in seen:
                raise ValueError(f"Cyclic parent chain detected at '{schema.name}'")
            seen.add(id(schema))
            yield schema
            schema = schema.parent

    def is_subschema_of(self, other: Schema) -> bool:
        return any(schema is other for schema in self.iter_ancestors())

    @property
    def registry(self) -> ClassRegistry | None:
        if self._registry is None:
            return None
        return self._registry()

    def resolve_class(self, name: str) -> type[Document]:
        """Resolve a class name through the owning registry.

        Raises:
            ValueError: If the schema is detached or the class is unknown
        """
        registry = self.registry
        if registry is None:
            raise ValueError(f"Schema '{self.name}' is not attached to a class registry")
        return registry.get(name)

    # -------------------------------------------------------------------------
    # Fields
    # -------------------------------------------------------------------------

    def get_field(self, name: str) -> FieldDefinition | None:
        """Find a field by name, walking up the parent chain."""
        for schema in self.iter_ancestors():
            field = schema.own_fields.get(name)
            if field is not None:
                return field
        return None

    def has_field(self, name: str) -> bool:
        return self.get_field(name) is not None

    def get_fields(self) -> dict[str, FieldDefinition]:
        return dict(self.fields)

    def get_fields_names(self) -> list[str]:
        return list(self.fields.keys())

    def get_nested_fields(self, kind: TypeKind | None = None) -> dict[str, FieldDefinition]:
        """Fields holding documents (object fields and lists of classes).

        ``kind`` narrows the result to TypeKind.OBJECT or TypeKind.LIST fields.
        """
        return {
            name: f
            for name, f in self.fields.items()
            if f.is_nested and (kind is None or f.type.kind == kind)
        }

    def get_validation_order(self) -> list[str]:
        """Default validation order: inherited fields first, in declaration order."""
        return self.get_fields_names()

    def get_type_field(self) -> str | None:
        """Name of the field that stores the concrete class name, if any."""
        if self.parent is None:
            return None
        return "_type"

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------

    def get_validators(self, name: str | None = None) -> list[ValidatorDefinition]:
        if name is not None:
            return list(self.validators.get(name, []))
        result: list[ValidatorDefinition] = []
        for validators in self.validators.values():
            result.extend(validators)
        return result

    # -------------------------------------------------------------------------
    # Storage
    # -------------------------------------------------------------------------

    def get_collection(self) -> Collection | None:
        """The collection bound to this class or the nearest ancestor."""
        for schema in self.iter_ancestors():
            if schema.collection is not None:
                return schema.collection
        return None

    # -------------------------------------------------------------------------
    # Behaviors, methods, indexes
    # -------------------------------------------------------------------------

    def get_behavior(self, name: str) -> dict[str, Any] | None:
        return self.behaviors.get(name)

    def get_behaviors(self) -> dict[str, dict[str, Any]]:
        return dict(self.behaviors)

    def has_behavior(self, name: str) -> bool:
        return name in self.behaviors

    def get_method(self, name: str) -> Any:
        return self.methods.get(name)

    def get_methods(self) -> dict[str, Any]:
        return dict(self.methods)

    def has_method(self, name: str) -> bool:
        return name in self.methods

    def get_index(self, name: str) -> IndexDefinition | None:
        return self.indexes.get(name)

    def get_indexes(self) -> dict[str, IndexDefinition]:
        return dict(self.indexes)

    def has_index(self, name: str) -> bool:
        return name in self.indexes

    # -------------------------------------------------------------------------
    # Events
    # -------------------------------------------------------------------------

    def get_event(self, name: str) -> list[EventHandler]:
        return list(self.events.get(name, []))

    def get_events(self) -> dict[str, list[EventHandler]]:
        return {name: list(handlers) for name, handlers in self.events.items()}

    def has_event(self, name: str) -> bool:
        return bool(self.events.get(name))

    def trigger_event(self, name: str, doc: Document, **data: Any) -> Event:
        """Run the handlers registered for an event, ancestors' first.

        Returns the Event so callers can check ``default_prevented``.
        """
        event = Event(type=name, doc=doc, data=data)
        for handler in self.events.get(name, []):
            handler(event)
            if event.propagation_stopped:
                logger.debug("Event '%s' on %s stopped propagation", name, self.name)
                break
        return event
