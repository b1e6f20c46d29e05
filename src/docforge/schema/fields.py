"""Field definitions and shorthand parsing."""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from docforge.core.types import (
    STRING,
    ClassResolver,
    TypeDescriptor,
    TypeKind,
    copy_default,
    resolve_type,
)
from docforge.validation.types import ValidationDetail

if TYPE_CHECKING:
    from docforge.document import Document

RESERVED_FIELDS = ("_id", "_type")

FIELD_KEYS = ("type", "default", "optional", "transient", "immutable", "index", "validators")


@dataclass
class FieldDefinition:
    """One declared field.

    Attributes:
        name: Field name, unique within the declaring schema
        type: Type descriptor, None for untyped fields (values pass through)
        default: Static value or zero-argument factory
        optional: Absent values are not validated
        transient: Never validated or persisted
        immutable: Cannot change once persisted
        index: Sort direction for a single-field index (1 or -1), if any
    """

    name: str
    type: TypeDescriptor | None = None
    default: Any = None
    optional: bool = False
    transient: bool = False
    immutable: bool = False
    index: int | None = None

    @property
    def is_nested(self) -> bool:
        """True when the field holds documents (object or list of class)."""
        return self.type is not None and self.type.is_class

    def get_default(self) -> Any:
        if callable(self.default):
            return self.default()
        return copy_default(self.default)

    def cast(self, value: Any, resolve: ClassResolver | None = None) -> Any:
        if self.type is None:
            return value
        return self.type.cast(value, resolve)

    def validate(
        self,
        doc: "Document",
        path: str,
        value: Any,
    ) -> list[ValidationDetail]:
        """Field-level validation: required check, then the type check."""
        if value is None:
            if self.optional:
                return []
            return [
                ValidationDetail(path=path, kind="required", message=f'"{path}" is required')
            ]
        if self.type is None:
            return []
        return self.type.validate(value, path, doc.schema.resolve_class)


def mandatory_id_field() -> FieldDefinition:
    return FieldDefinition(name="_id", type=STRING, default=None, optional=True)


def type_field(class_name: str) -> FieldDefinition:
    return FieldDefinition(name="_type", type=STRING, default=class_name, optional=True)


def parse_field(name: str, spec: Any) -> FieldDefinition:
    """Expand one field declaration into a FieldDefinition.

    The declaration is either a mapping using the keys in FIELD_KEYS or a
    bare type shorthand (see resolve_type).

    Raises:
        ValueError: If the declaration is malformed
    """
    if not isinstance(name, str) or not name:
        raise ValueError(f"Field name must be a non-empty string, got {name!r}")
    if name in RESERVED_FIELDS:
        raise ValueError(f"Field '{name}' is reserved and cannot be declared")
    if "." in name or name == "$":
        raise ValueError(f"Field name '{name}' cannot contain '.' or be '$'")

    if not isinstance(spec, dict):
        return FieldDefinition(name=name, type=resolve_type(spec))

    unknown = set(spec) - set(FIELD_KEYS)
    if unknown:
        raise ValueError(
            f"Field '{name}' has unknown keys: {', '.join(sorted(map(str, unknown)))}"
        )

    field_type = resolve_type(spec.get("type"))
    default = spec.get("default")
    if default is not None and field_type is not None and not callable(default):
        if field_type.kind not in (TypeKind.OBJECT, TypeKind.LIST):
            default = field_type.cast(default)

    index = spec.get("index")
    if index is not None and index not in (1, -1):
        raise ValueError(f"Field '{name}' index must be 1 or -1, got {index!r}")

    return FieldDefinition(
        name=name,
        type=field_type,
        default=default,
        optional=bool(spec.get("optional", False)),
        transient=bool(spec.get("transient", False)),
        immutable=bool(spec.get("immutable", False)),
        index=index,
    )


def parse_fields(spec: Any) -> dict[str, FieldDefinition]:
    """Parse the ``fields`` section of a class definition.

    Accepts a mapping of name to declaration or a list of untyped names.
    """
    if spec is None:
        return {}
    if isinstance(spec, (list, tuple)):
        return {name: parse_field(name, None) for name in spec}
    if isinstance(spec, dict):
        return {name: parse_field(name, field_spec) for name, field_spec in spec.items()}
    raise ValueError(f"'fields' must be a mapping or a list, got {type(spec).__name__}")
