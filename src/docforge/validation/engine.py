"""Recursive document validation.

Walks a document's fields in validation order, running the field-level
check (required + type) and every bound validator, then recursing into
nested documents held by object fields and lists of classes. Failures are
tagged with the field path prefixed by the path of the enclosing documents.

Two error modes:
- stop_on_first_error=True: the first ValidationError propagates at once
- stop_on_first_error=False: every detail is collected and raised together
"""

import logging
from typing import Any, Callable, Iterator

from docforge import context
from docforge.core.errors import NestingDepthError, ValidationError
from docforge.core.types import TypeKind
from docforge.document import Document
from docforge.schema.fields import FieldDefinition
from docforge.validation.types import ValidationDetail, ValidatorCall

logger = logging.getLogger(__name__)

WILDCARD = "$"


# =============================================================================
# Nested field patterns
# =============================================================================


def is_nested_pattern(name: str) -> bool:
    """True for paths addressing a field inside an embedded document."""
    return "." in name


def traverse(doc: Document, pattern: str) -> Iterator[tuple[Document, str, str, FieldDefinition]]:
    """Resolve a nested pattern to its concrete targets.

    Yields ``(nested_doc, nested_name, concrete_prefix, field)`` for every
    target; ``$`` expands to every element of a list. Segments that do not
    lead to a document are skipped.
    """
    segments = pattern.split(".")
    yield from _traverse(doc, segments, "")


def _traverse(
    doc: Document, segments: list[str], prefix: str
) -> Iterator[tuple[Document, str, str, FieldDefinition]]:
    name = segments[0]
    field = doc.schema.get_field(name)
    if field is None:
        return
    if len(segments) == 1:
        yield doc, name, prefix, field
        return
    if field.type is None:
        return

    value = doc.get(name)
    rest = segments[1:]

    if field.type.kind == TypeKind.OBJECT:
        if isinstance(value, Document):
            yield from _traverse(value, rest, f"{prefix}{name}.")
        return

    if field.type.kind == TypeKind.LIST and isinstance(value, list):
        selector, rest = rest[0], rest[1:]
        if not rest:
            return
        if selector == WILDCARD:
            indexes = range(len(value))
        elif selector.isdigit() and int(selector) < len(value):
            indexes = [int(selector)]
        else:
            return
        for index in indexes:
            element = value[index]
            if isinstance(element, Document):
                yield from _traverse(element, rest, f"{prefix}{name}.{index}.")


# =============================================================================
# Cast normalization
# =============================================================================


def cast_nested(doc: Document) -> None:
    """Turn plain mappings held by nested fields into document instances.

    Values are replaced in whichever store holds them, without marking the
    field as modified.
    """
    for name, field in doc.schema.get_nested_fields().items():
        for store in (doc._modified, doc._values):
            if name not in store:
                continue
            value = store[name]
            if _needs_cast(value):
                store[name] = field.cast(value, doc.schema.resolve_class)
            break


def _needs_cast(value: Any) -> bool:
    if isinstance(value, dict):
        return True
    if isinstance(value, (list, tuple)):
        return isinstance(value, tuple) or any(isinstance(item, dict) for item in value)
    return False


# =============================================================================
# Validation
# =============================================================================


def document_validate(
    doc: Document,
    fields: list[str] | None = None,
    prefix: str = "",
    stop_on_first_error: bool = True,
    simulation: bool = True,
    depth: int = 0,
) -> None:
    """Validate a document and its nested documents.

    Args:
        doc: The document to validate
        fields: Field names or nested patterns; defaults to the validation order
        prefix: Path of the enclosing documents, e.g. "address." or "items.2."
        stop_on_first_error: Raise on the first failure instead of collecting
        simulation: When False, only validate inside the trusted context
        depth: Current nesting depth

    Raises:
        ValidationError: If validation fails
        NestingDepthError: If documents nest deeper than the configured limit
    """
    if not simulation and not context.is_trusted():
        return

    max_depth = doc.schema.config.max_nesting_depth
    if depth > max_depth:
        raise NestingDepthError(
            f"Document nesting exceeds {max_depth} levels at '{prefix.rstrip('.')}'"
        )

    cast_nested(doc)

    errors: list[ValidationDetail] = []

    def catch(func: Callable[[], None]) -> None:
        try:
            func()
        except ValidationError as exc:
            if stop_on_first_error:
                raise
            errors.extend(exc.details)

    def recurse(nested: Document, nested_fields: list[str] | None, nested_prefix: str) -> None:
        document_validate(
            nested,
            fields=nested_fields,
            prefix=nested_prefix,
            stop_on_first_error=stop_on_first_error,
            depth=depth + 1,
        )

    if fields is None:
        fields = doc.schema.get_validation_order()

    for name in fields:
        if is_nested_pattern(name):
            for nested_doc, nested_name, nested_prefix, _field in traverse(doc, name):
                catch(lambda: recurse(nested_doc, [nested_name], prefix + nested_prefix))
            continue

        field = doc.schema.get_field(name)
        if field is None or field.transient:
            continue

        value = doc.get(name)
        if field.optional and value is None:
            continue

        catch(lambda: _validate_field(doc, field, name, prefix + name, value))

        if field.type is None:
            continue
        if field.type.kind == TypeKind.OBJECT:
            if isinstance(value, Document):
                catch(lambda: recurse(value, None, f"{prefix}{name}."))
        elif field.type.is_class and isinstance(value, list):
            for index, element in enumerate(value):
                if isinstance(element, Document):
                    catch(lambda: recurse(element, None, f"{prefix}{name}.{index}."))

    if errors:
        raise ValidationError(errors)


def _validate_field(
    doc: Document, field: FieldDefinition, name: str, path: str, value: Any
) -> None:
    """Run the field-level check, then each bound validator.

    Raises a ValidationError carrying every detail this field produced.
    """
    details = field.validate(doc, path, value)
    if details:
        raise ValidationError(details)

    for definition in doc.schema.get_validators(name):
        call = ValidatorCall(
            doc=doc,
            name=path,
            nested_name=name,
            value=value,
            kind=definition.kind,
            param=definition.resolve_param_for(doc),
            message=definition.message,
            resolve_error=definition.resolve_error,
        )
        details = definition.function(call)
        if details:
            logger.debug("Validator '%s' failed for '%s'", definition.kind, path)
            raise ValidationError(details)
