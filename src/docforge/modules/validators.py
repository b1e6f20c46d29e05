"""Validators module: binds declared validators to registered functions."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING, Any

from docforge.core.errors import CompositionError
from docforge.modules.base import BaseModule, MergedFragment
from docforge.validation.registry import ValidatorRegistry
from docforge.validation.types import ValidatorDefinition

if TYPE_CHECKING:
    from docforge.document import Document
    from docforge.schema.schema import Schema


class ValidatorsModule(BaseModule):
    """Collects validators from field declarations and the ``validators`` section.

    Field-level validators come first, followed by class-level ones for the
    same field. Every kind must be registered in the ValidatorRegistry at
    composition time.
    """

    name = "validators"

    def __init__(self, registry: ValidatorRegistry):
        self.registry = registry

    def parse_definition(
        self, definition: dict[str, Any], seed: Any
    ) -> dict[str, list[ValidatorDefinition]]:
        result: dict[str, list[ValidatorDefinition]] = {}

        fields = definition.get("fields")
        if isinstance(fields, dict):
            for field_name, field_spec in fields.items():
                if isinstance(field_spec, dict) and field_spec.get("validators"):
                    result.setdefault(field_name, []).extend(
                        self._parse_list(field_name, field_spec["validators"])
                    )

        section = definition.get("validators") or {}
        if not isinstance(section, dict):
            raise ValueError("'validators' must be a mapping of field name to validators")
        for field_name, specs in section.items():
            result.setdefault(field_name, []).extend(self._parse_list(field_name, specs))

        return result

    def _parse_list(self, field_name: str, specs: Any) -> list[ValidatorDefinition]:
        if not isinstance(specs, list):
            specs = [specs]
        definitions = []
        for spec in specs:
            definition = ValidatorDefinition.from_spec(field_name, spec)
            self._bind(definition)
            definitions.append(definition)
        return definitions

    def _bind(self, definition: ValidatorDefinition) -> None:
        definition.function = self.registry.get(definition.kind)
        if definition.param is None:
            return
        if definition.kind == "every":
            # Element validator kinds must be registered as well.
            self._bind(ValidatorDefinition.from_spec(definition.field, definition.param))
        elif definition.kind == "regexp" and isinstance(definition.param, str):
            definition.param = re.compile(definition.param)

    def apply_definition(
        self, cls: type[Document], schema: Schema, merged: MergedFragment
    ) -> None:
        schema.validators = dict(merged.effective)

    def init_class(self, cls: type[Document], schema: Schema) -> None:
        for field_name in schema.validators:
            if not schema.has_field(field_name):
                raise CompositionError(
                    f"Validators declared for unknown field '{field_name}' "
                    f"in class '{schema.name}'",
                    class_name=schema.name,
                )
