"""Fields module: declares fields, mandatory _id/_type, and field accessors."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from docforge.core.errors import CompositionError
from docforge.modules.base import BaseModule, MergedFragment
from docforge.schema.fields import FieldDefinition, mandatory_id_field, parse_fields, type_field

if TYPE_CHECKING:
    from docforge.document import Document
    from docforge.schema.schema import Schema

logger = logging.getLogger(__name__)


def _field_property(name: str) -> property:
    def getter(self: Document) -> Any:
        return self.get(name)

    def setter(self: Document, value: Any) -> None:
        self.set(name, value)

    return property(getter, setter, doc=f"Value of the '{name}' field.")


class FieldsModule(BaseModule):
    name = "fields"

    def init_schema(self, schema: Schema, definition: dict[str, Any]) -> dict[str, FieldDefinition]:
        # _id lives on the root schema only; subclasses inherit it and add _type
        if schema.parent is None:
            return {"_id": mandatory_id_field()}
        return {"_type": type_field(schema.name)}

    def parse_definition(
        self, definition: dict[str, Any], seed: dict[str, FieldDefinition]
    ) -> dict[str, FieldDefinition]:
        fields = dict(seed)
        fields.update(parse_fields(definition.get("fields")))
        return fields

    def apply_definition(
        self, cls: type[Document], schema: Schema, merged: MergedFragment
    ) -> None:
        from docforge.document import Document

        schema.own_fields = dict(merged.own)
        schema.fields = dict(merged.effective)

        for name in merged.own:
            existing = cls.__dict__.get(name)
            if hasattr(Document, name) or (existing is not None and not isinstance(existing, property)):
                logger.warning(
                    "Field '%s' of class '%s' shadows an existing attribute; "
                    "no accessor installed, use get()/set()",
                    name,
                    schema.name,
                )
                continue
            setattr(cls, name, _field_property(name))

    def init_class(self, cls: type[Document], schema: Schema) -> None:
        for field in schema.own_fields.values():
            class_name = field.type.referenced_class if field.type else None
            if not class_name or class_name == schema.name:
                continue
            registry = schema.registry
            if registry is not None and registry.has(class_name):
                continue
            if schema.config.strict_class_refs:
                raise CompositionError(
                    f"Field '{field.name}' of class '{schema.name}' references "
                    f"unknown class '{class_name}'",
                    class_name=schema.name,
                )
            logger.debug(
                "Class '%s' field '%s' references '%s', resolved on first use",
                schema.name,
                field.name,
                class_name,
            )
