"""Field type descriptors with casting and type-level validation."""

import copy
import math
from dataclasses import dataclass
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any, Callable, Mapping

from docforge.core.errors import CastError
from docforge.validation.types import ValidationDetail

# Resolves a class name to a document class, or raises ValueError
ClassResolver = Callable[[str], type]

TRUE_LITERALS = ("true", "1", "yes", "on")
FALSE_LITERALS = ("false", "0", "no", "off", "")


class TypeKind(Enum):
    """The closed set of field value kinds."""

    BOOLEAN = "boolean"
    DATE = "date"
    NUMBER = "number"
    STRING = "string"
    OBJECT = "object"
    LIST = "list"


@dataclass(frozen=True)
class TypeDescriptor:
    """Caster and type-level validator for one field value kind.

    Attributes:
        kind: The value kind
        class_name: Referenced class name for OBJECT (resolved lazily)
        element: Element descriptor for LIST, None for untyped elements
    """

    kind: TypeKind
    class_name: str | None = None
    element: "TypeDescriptor | None" = None

    @property
    def name(self) -> str:
        return self.kind.value

    @property
    def is_class(self) -> bool:
        """True for OBJECT, and for LIST whose elements are documents."""
        if self.kind == TypeKind.OBJECT:
            return True
        if self.kind == TypeKind.LIST:
            return self.element is not None and self.element.kind == TypeKind.OBJECT
        return False

    @property
    def referenced_class(self) -> str | None:
        """Class name referenced directly or through list elements."""
        if self.kind == TypeKind.OBJECT:
            return self.class_name
        if self.kind == TypeKind.LIST and self.element is not None:
            return self.element.referenced_class
        return None

    def __str__(self) -> str:
        if self.kind == TypeKind.OBJECT:
            return self.class_name or "object"
        if self.kind == TypeKind.LIST:
            return f"[{self.element}]" if self.element else "[]"
        return self.name

    # -------------------------------------------------------------------------
    # Casting
    # -------------------------------------------------------------------------

    def cast(self, value: Any, resolve: ClassResolver | None = None) -> Any:
        """Cast a raw value to this type's canonical representation.

        None passes through unchanged.

        Raises:
            CastError: If the value cannot be converted
        """
        if value is None:
            return None

        if self.kind == TypeKind.BOOLEAN:
            return _cast_boolean(value)
        if self.kind == TypeKind.NUMBER:
            return _cast_number(value)
        if self.kind == TypeKind.STRING:
            return _cast_string(value)
        if self.kind == TypeKind.DATE:
            return _cast_date(value)
        if self.kind == TypeKind.OBJECT:
            return self._cast_object(value, resolve)
        if self.kind == TypeKind.LIST:
            return self._cast_list(value, resolve)
        raise ValueError(f"Unhandled type kind: {self.kind}")

    def _cast_object(self, value: Any, resolve: ClassResolver | None) -> Any:
        cls = self._resolve(resolve)
        if isinstance(value, cls):
            return value
        if isinstance(value, Mapping):
            target = cls
            type_name = value.get("_type")
            if type_name and type_name != cls.schema.name and resolve is not None:
                try:
                    candidate = resolve(type_name)
                except ValueError:
                    candidate = None
                if candidate is not None and issubclass(candidate, cls):
                    target = candidate
            return target(dict(value))
        raise CastError(
            f"Expected {self.class_name} instance or mapping, got {type(value).__name__}",
            value=value,
        )

    def _cast_list(self, value: Any, resolve: ClassResolver | None) -> list:
        if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, (list, tuple)):
            raise CastError(f"Expected a list, got {type(value).__name__}", value=value)
        if self.element is None:
            return list(value)

        result = []
        for index, item in enumerate(value):
            try:
                result.append(self.element.cast(item, resolve))
            except CastError as exc:
                raise CastError(
                    f"Element {index}: {exc}", value=item, index=index
                ) from exc
        return result

    def _resolve(self, resolve: ClassResolver | None) -> type:
        if resolve is None or not self.class_name:
            raise CastError(f"Cannot resolve class '{self.class_name}'")
        try:
            return resolve(self.class_name)
        except ValueError as exc:
            raise CastError(f"Cannot resolve class '{self.class_name}': {exc}") from exc

    # -------------------------------------------------------------------------
    # Type-level validation
    # -------------------------------------------------------------------------

    def validate(
        self, value: Any, path: str, resolve: ClassResolver | None = None
    ) -> list[ValidationDetail]:
        """Check that a present value already has the canonical shape."""
        if self.kind == TypeKind.BOOLEAN:
            ok = isinstance(value, bool)
            expected = "a boolean"
        elif self.kind == TypeKind.NUMBER:
            ok = _is_number(value) and not (isinstance(value, float) and math.isnan(value))
            expected = "a number"
        elif self.kind == TypeKind.STRING:
            ok = isinstance(value, str)
            expected = "a string"
        elif self.kind == TypeKind.DATE:
            ok = isinstance(value, datetime)
            expected = "a date"
        elif self.kind == TypeKind.OBJECT:
            try:
                cls = self._resolve(resolve)
            except CastError as exc:
                return [ValidationDetail(path=path, kind=self.name, message=str(exc))]
            ok = isinstance(value, cls)
            expected = f"an instance of {self.class_name}"
        elif self.kind == TypeKind.LIST:
            if not isinstance(value, list):
                return [self._detail(path, "a list")]
            if self.element is None:
                return []
            errors: list[ValidationDetail] = []
            for index, item in enumerate(value):
                errors.extend(self.element.validate(item, f"{path}.{index}", resolve))
            return errors
        else:
            raise ValueError(f"Unhandled type kind: {self.kind}")

        if ok:
            return []
        return [self._detail(path, expected)]

    def _detail(self, path: str, expected: str) -> ValidationDetail:
        return ValidationDetail(
            path=path, kind=self.name, message=f'"{path}" has to be {expected}'
        )


# =============================================================================
# Primitive casts
# =============================================================================


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _cast_boolean(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    if _is_number(value):
        return bool(value)
    if isinstance(value, str):
        literal = value.strip().lower()
        if literal in TRUE_LITERALS:
            return True
        if literal in FALSE_LITERALS:
            return False
    raise CastError(f"Cannot cast {value!r} to boolean", value=value)


def _cast_number(value: Any) -> int | float | Decimal:
    if _is_number(value):
        return value
    if isinstance(value, str):
        literal = value.strip()
        try:
            return int(literal)
        except ValueError:
            pass
        try:
            number = float(literal)
        except ValueError:
            number = None
        if number is not None and math.isfinite(number):
            return number
    raise CastError(f"Cannot cast {value!r} to number", value=value)


def _cast_string(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if _is_number(value):
        return str(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    raise CastError(f"Cannot cast {type(value).__name__} to string", value=value)


def _cast_date(value: Any) -> datetime:
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if _is_number(value):
        try:
            return datetime.fromtimestamp(float(value) / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as exc:
            raise CastError(f"Cannot cast {value!r} to date", value=value) from exc
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip())
        except ValueError as exc:
            raise CastError(f"Cannot cast {value!r} to date", value=value) from exc
    raise CastError(f"Cannot cast {type(value).__name__} to date", value=value)


# =============================================================================
# Built-in types and shorthand resolution
# =============================================================================


BOOLEAN = TypeDescriptor(TypeKind.BOOLEAN)
DATE = TypeDescriptor(TypeKind.DATE)
NUMBER = TypeDescriptor(TypeKind.NUMBER)
STRING = TypeDescriptor(TypeKind.STRING)

FIELD_TYPES: dict[str, TypeDescriptor] = {
    "boolean": BOOLEAN,
    "date": DATE,
    "number": NUMBER,
    "string": STRING,
}

_PYTHON_TYPES: dict[type, TypeDescriptor] = {
    bool: BOOLEAN,
    int: NUMBER,
    float: NUMBER,
    Decimal: NUMBER,
    str: STRING,
    datetime: DATE,
    date: DATE,
}


def get_field_type(type_name: str) -> TypeDescriptor | None:
    """Get a primitive type descriptor by name."""
    return FIELD_TYPES.get(type_name)


def object_of(class_name: str) -> TypeDescriptor:
    return TypeDescriptor(TypeKind.OBJECT, class_name=class_name)


def list_of(element: TypeDescriptor | None = None) -> TypeDescriptor:
    return TypeDescriptor(TypeKind.LIST, element=element)


def resolve_type(spec: Any) -> TypeDescriptor | None:
    """Expand a type declaration shorthand into a TypeDescriptor.

    Accepts a descriptor, a Python type, a document class, a primitive type
    name, a class name, ``[inner]`` for lists, or None for untyped fields.

    Raises:
        ValueError: If the shorthand is not understood
    """
    if spec is None or isinstance(spec, TypeDescriptor):
        return spec
    if isinstance(spec, list):
        if len(spec) > 1:
            raise ValueError(f"List type takes at most one element type, got {len(spec)}")
        return list_of(resolve_type(spec[0]) if spec else None)
    if isinstance(spec, type):
        if spec in _PYTHON_TYPES:
            return _PYTHON_TYPES[spec]
        schema = getattr(spec, "schema", None)
        if schema is not None:
            return object_of(schema.name)
        raise ValueError(f"Unsupported field type: {spec.__name__}")
    if isinstance(spec, str):
        name = spec.strip()
        if not name:
            raise ValueError("Field type name cannot be empty")
        if name in FIELD_TYPES:
            return FIELD_TYPES[name]
        if name in ("object", "list"):
            raise ValueError(f"Type '{name}' needs a class or element type")
        return object_of(name)
    raise ValueError(f"Unsupported field type declaration: {spec!r}")


def copy_default(value: Any) -> Any:
    """Copy a static default so instances never share mutable state."""
    if isinstance(value, (list, dict, set)):
        return copy.deepcopy(value)
    return value
