"""Document instances: value resolution, casting on set, dirty tracking."""

from __future__ import annotations

import copy
import logging
from typing import TYPE_CHECKING, Any, ClassVar, Iterable, Mapping

from docforge.core.errors import CastError

if TYPE_CHECKING:
    from docforge.schema.schema import Schema

logger = logging.getLogger(__name__)

_MISSING = object()


class Document:
    """Base class of every composed document class.

    Instances keep two mappings: ``_values`` (last known persisted state) and
    ``_modified`` (pending changes). Reads resolve modified > values > field
    default; writes are cast through the field type and land in ``_modified``.
    """

    schema: ClassVar[Schema]

    def __init__(self, attrs: Mapping[str, Any] | None = None):
        self._values: dict[str, Any] = {}
        self._modified: dict[str, Any] = {}
        self._defaults: dict[str, Any] = {}
        if attrs:
            self._values = self._cast_values(attrs)
        self.schema.trigger_event("afterInit", self)

    def __repr__(self) -> str:
        doc_id = self._values.get("_id") or self._modified.get("_id")
        return f"<{self.schema.name} _id={doc_id!r}>"

    # -------------------------------------------------------------------------
    # Class-level helpers
    # -------------------------------------------------------------------------

    @classmethod
    def inherit(cls, definition: dict[str, Any]) -> type[Document]:
        """Compose a subclass of this class in the same registry."""
        return cls._registry().inherit(cls, definition)

    @classmethod
    def extend(cls, definition: dict[str, Any]) -> type[Document]:
        """Recompose this class with additional declarations."""
        return cls._registry().extend(cls, definition)

    @classmethod
    def find_one(cls, id: str) -> Document | None:
        from docforge.storage import find_one

        return find_one(cls, id)

    @classmethod
    def _registry(cls):
        registry = cls.schema.registry
        if registry is None:
            raise RuntimeError(f"Class '{cls.schema.name}' is not attached to a registry")
        return registry

    # -------------------------------------------------------------------------
    # Reading
    # -------------------------------------------------------------------------

    def get(self, names: str | Iterable[str] | None = None) -> Any:
        """Get one value, a mapping for several names, or all fields.

        ``_id`` yields None (and is left out of mappings) until it is set.
        """
        if names is None:
            names = self.schema.get_fields_names()
        if isinstance(names, str):
            return self._get_one(names)

        values: dict[str, Any] = {}
        for name in names:
            value = self._get_one(name)
            if name == "_id" and not value:
                continue
            values[name] = value
        return values

    def _get_one(self, name: str) -> Any:
        if name == "_id":
            return self._resolve("_id") or None
        return self._resolve(name)

    def _resolve(self, name: str) -> Any:
        if name in self._modified:
            return self._modified[name]
        if name in self._values:
            return self._values[name]
        return self._default(name)

    def _default(self, name: str) -> Any:
        if name in self._defaults:
            return self._defaults[name]
        field = self.schema.get_field(name)
        if field is None:
            return None
        value = field.get_default()
        if callable(field.default) or isinstance(value, (list, dict)):
            # Factories and mutable defaults are evaluated once per instance
            self._defaults[name] = value
        return value

    def raw(self, names: str | Iterable[str] | None = None) -> Any:
        """Persisted representation: nested documents become plain mappings."""
        value = self.get(names)
        return _to_raw(value)

    def to_dict(self) -> dict[str, Any]:
        return self.raw()

    # -------------------------------------------------------------------------
    # Writing
    # -------------------------------------------------------------------------

    def set(self, name: str | Mapping[str, Any], value: Any = _MISSING) -> None:
        """Set one field, or several from a mapping (applied in mapping order).

        Raises:
            CastError: If a value cannot be cast to its field type
        """
        if isinstance(name, Mapping):
            if value is not _MISSING:
                raise TypeError("set() takes a mapping or a name and a value, not both")
            for field_name, field_value in name.items():
                self._set_one(field_name, field_value)
            return
        if value is _MISSING:
            raise TypeError(f"set() missing value for field '{name}'")
        self._set_one(name, value)

    def _set_one(self, name: str, value: Any) -> None:
        if name == "_id" and self._resolve("_id"):
            logger.debug("Ignoring change of _id on %s", self.schema.name)
            return

        field = self.schema.get_field(name)
        if field is not None:
            if field.immutable and self._values.get(name) is not None:
                logger.debug("Ignoring change of immutable field '%s'", name)
                return
            try:
                value = field.cast(value, self.schema.resolve_class)
            except CastError as exc:
                raise exc.for_field(name) from exc

        # A falsy current value never suppresses the write
        current = self._resolve(name)
        if current and _same_value(value, current):
            return

        self._modified[name] = value

    def get_modified(self, old: bool = False) -> dict[str, Any]:
        """Pending changes, or with ``old=True`` the values they replace."""
        if not old:
            return dict(self._modified)

        previous: dict[str, Any] = {}
        for name in self._modified:
            if name in self._values:
                previous[name] = self._values[name]
            else:
                previous[name] = self._default(name)
        return previous

    def is_modified(self, name: str | None = None) -> bool:
        if name is None:
            return bool(self._modified)
        return name in self._modified

    def _cast_values(self, attrs: Mapping[str, Any]) -> dict[str, Any]:
        values: dict[str, Any] = {}
        for name, value in attrs.items():
            field = self.schema.get_field(name)
            if field is not None:
                try:
                    value = field.cast(value, self.schema.resolve_class)
                except CastError as exc:
                    raise exc.for_field(name) from exc
            values[name] = value
        return values

    # -------------------------------------------------------------------------
    # Validation and persistence
    # -------------------------------------------------------------------------

    def validate(
        self,
        fields: list[str] | None = None,
        *,
        stop_on_first_error: bool = True,
        simulation: bool = True,
    ) -> None:
        """Validate this document and its nested documents.

        Raises:
            ValidationError: On the first failure, or once with every failure
                when ``stop_on_first_error`` is False
        """
        from docforge.validation.engine import document_validate

        document_validate(
            self,
            fields=fields,
            stop_on_first_error=stop_on_first_error,
            simulation=simulation,
        )

    def copy(self, attrs: Mapping[str, Any] | None = None) -> Document:
        """Deep copy without ``_id``; ``attrs`` are then set on the copy."""
        cloned = type(self)()
        cloned._values = copy.deepcopy({k: v for k, v in self._values.items() if k != "_id"})
        cloned._modified = copy.deepcopy({k: v for k, v in self._modified.items() if k != "_id"})
        if attrs:
            cloned.set(attrs)
        return cloned

    def save(self, validate: bool = True) -> Any:
        from docforge.storage import save

        return save(self, validate=validate)

    def remove(self) -> int:
        from docforge.storage import remove

        return remove(self)

    def reload(self) -> None:
        from docforge.storage import reload

        reload(self)


def _same_value(new: Any, current: Any) -> bool:
    if isinstance(new, Document) or isinstance(current, Document):
        return new is current
    return type(new) is type(current) and new == current


def _to_raw(value: Any) -> Any:
    if isinstance(value, Document):
        return value.raw()
    if isinstance(value, list):
        return [_to_raw(item) for item in value]
    if isinstance(value, dict):
        return {key: _to_raw(item) for key, item in value.items()}
    return value
