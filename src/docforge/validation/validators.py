"""Built-in validators for docforge.

These are ready-to-use validators that can be referenced by kind name in
class definitions.

Available validators:
- required / null / notNull: Presence checks
- string / number / boolean / date: Value type checks
- email: Email address format
- length / minLength / maxLength: Length of strings and lists
- gt / gte / lt / lte: Numeric and date bounds
- equal / equalTo: Equality with a value or another field
- regexp: Regular expression match
- choice: Value is one of the given options
- every: Apply a validator to each element of a list
"""

import re
from datetime import datetime
from decimal import Decimal
from typing import Any

from docforge.validation.registry import ValidatorRegistry
from docforge.validation.types import ValidationDetail, ValidatorCall, ValidatorDefinition

EMAIL_PATTERN = re.compile(r"^[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}$")


def _is_empty(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str) and value.strip() == "":
        return True
    if isinstance(value, (list, dict)) and len(value) == 0:
        return True
    return False


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _size(value: Any) -> int | None:
    if isinstance(value, (str, list, tuple, dict)):
        return len(value)
    return None


# =============================================================================
# Presence
# =============================================================================


def required(call: ValidatorCall) -> list[ValidationDetail]:
    if _is_empty(call.value):
        return call.error(f'"{call.name}" is required')
    return []


def null(call: ValidatorCall) -> list[ValidationDetail]:
    if call.value is not None:
        return call.error(f'"{call.name}" has to be null')
    return []


def not_null(call: ValidatorCall) -> list[ValidationDetail]:
    if call.value is None:
        return call.error(f'"{call.name}" cannot be null')
    return []


# =============================================================================
# Types
# =============================================================================


def string(call: ValidatorCall) -> list[ValidationDetail]:
    if not isinstance(call.value, str):
        return call.error(f'"{call.name}" has to be a string')
    return []


def number(call: ValidatorCall) -> list[ValidationDetail]:
    if not _is_number(call.value):
        return call.error(f'"{call.name}" has to be a number')
    return []


def boolean(call: ValidatorCall) -> list[ValidationDetail]:
    if not isinstance(call.value, bool):
        return call.error(f'"{call.name}" has to be a boolean')
    return []


def date(call: ValidatorCall) -> list[ValidationDetail]:
    if not isinstance(call.value, datetime):
        return call.error(f'"{call.name}" has to be a date')
    return []


def email(call: ValidatorCall) -> list[ValidationDetail]:
    if not isinstance(call.value, str) or not EMAIL_PATTERN.match(call.value):
        return call.error(f'"{call.name}" has to be a valid email address')
    return []


# =============================================================================
# Length
# =============================================================================


def length(call: ValidatorCall) -> list[ValidationDetail]:
    size = _size(call.value)
    if size is None or size != call.param:
        return call.error(f'Length of "{call.name}" has to be {call.param}')
    return []


def min_length(call: ValidatorCall) -> list[ValidationDetail]:
    size = _size(call.value)
    if size is None or size < call.param:
        return call.error(f'Length of "{call.name}" has to be at least {call.param}')
    return []


def max_length(call: ValidatorCall) -> list[ValidationDetail]:
    size = _size(call.value)
    if size is None or size > call.param:
        return call.error(f'Length of "{call.name}" has to be at most {call.param}')
    return []


# =============================================================================
# Bounds
# =============================================================================


def _compare(call: ValidatorCall, op: str, text: str) -> list[ValidationDetail]:
    value = call.value
    try:
        if op == "gt":
            ok = value > call.param
        elif op == "gte":
            ok = value >= call.param
        elif op == "lt":
            ok = value < call.param
        else:
            ok = value <= call.param
    except TypeError:
        ok = False
    if not ok:
        return call.error(f'"{call.name}" has to be {text} {call.param}')
    return []


def gt(call: ValidatorCall) -> list[ValidationDetail]:
    return _compare(call, "gt", "greater than")


def gte(call: ValidatorCall) -> list[ValidationDetail]:
    return _compare(call, "gte", "greater than or equal")


def lt(call: ValidatorCall) -> list[ValidationDetail]:
    return _compare(call, "lt", "less than")


def lte(call: ValidatorCall) -> list[ValidationDetail]:
    return _compare(call, "lte", "less than or equal")


# =============================================================================
# Equality, patterns, choices
# =============================================================================


def equal(call: ValidatorCall) -> list[ValidationDetail]:
    if call.value != call.param:
        return call.error(f'"{call.name}" has to be equal {call.param}')
    return []


def equal_to(call: ValidatorCall) -> list[ValidationDetail]:
    """param: name of another field in the same document."""
    other = call.doc.get(call.param)
    if call.value != other:
        return call.error(f'"{call.name}" has to be equal to "{call.param}"')
    return []


def regexp(call: ValidatorCall) -> list[ValidationDetail]:
    pattern = call.param if isinstance(call.param, re.Pattern) else re.compile(call.param)
    if not isinstance(call.value, str) or not pattern.search(call.value):
        return call.error(f'"{call.name}" does not match the "{pattern.pattern}" pattern')
    return []


def choice(call: ValidatorCall) -> list[ValidationDetail]:
    options = list(call.param or [])
    if call.value not in options:
        choices = ", ".join(str(o) for o in options)
        return call.error(f'"{call.name}" has to be one of: {choices}')
    return []


def every(call: ValidatorCall) -> list[ValidationDetail]:
    """param: validator spec applied to each list element, e.g. {"type": "gt", "param": 0}.

    The element validator is looked up in the registry that owns the document
    class; element failures are reported with the element index in the path.
    """
    if not isinstance(call.value, list):
        return call.error(f'"{call.name}" has to be a list')

    inner = ValidatorDefinition.from_spec(call.nested_name, call.param)
    registry = call.doc.schema.registry
    fn = registry.validators.get(inner.kind)
    for index, element in enumerate(call.value):
        details = fn(
            ValidatorCall(
                doc=call.doc,
                name=f"{call.name}.{index}",
                nested_name=call.nested_name,
                value=element,
                kind=inner.kind,
                param=inner.resolve_param_for(call.doc),
                message=inner.message or call.message,
                resolve_error=inner.resolve_error or call.resolve_error,
            )
        )
        if details:
            return details
    return []


BUILTIN_VALIDATORS = {
    "required": required,
    "null": null,
    "notNull": not_null,
    "string": string,
    "number": number,
    "boolean": boolean,
    "date": date,
    "email": email,
    "length": length,
    "minLength": min_length,
    "maxLength": max_length,
    "gt": gt,
    "gte": gte,
    "lt": lt,
    "lte": lte,
    "equal": equal,
    "equalTo": equal_to,
    "regexp": regexp,
    "choice": choice,
    "every": every,
}


def register_builtin_validators(registry: ValidatorRegistry) -> None:
    """Register all built-in validators with a ValidatorRegistry."""
    for name, fn in BUILTIN_VALIDATORS.items():
        registry.register(name, fn)
