"""Indexes module: index declarations handed to the storage collaborator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from docforge.core.errors import CompositionError
from docforge.modules.base import BaseModule, MergedFragment

if TYPE_CHECKING:
    from docforge.document import Document
    from docforge.schema.schema import Schema


@dataclass
class IndexDefinition:
    """A declared index.

    Attributes:
        name: Index name
        fields: Field path -> sort direction (1 or -1)
        options: Storage-specific options (e.g., {"unique": True})
    """

    name: str
    fields: dict[str, int]
    options: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, name: str, data: dict[str, Any]) -> IndexDefinition:
        fields = data.get("fields")
        if not isinstance(fields, dict) or not fields:
            raise ValueError(f"Index '{name}' needs a non-empty 'fields' mapping")
        return cls(name=name, fields=dict(fields), options=dict(data.get("options") or {}))


class IndexesModule(BaseModule):
    name = "indexes"

    def parse_definition(
        self, definition: dict[str, Any], seed: Any
    ) -> dict[str, IndexDefinition]:
        indexes: dict[str, IndexDefinition] = {}

        # Field shorthand: {"email": {"type": "string", "index": 1}}
        fields = definition.get("fields")
        if isinstance(fields, dict):
            for field_name, field_spec in fields.items():
                if isinstance(field_spec, dict) and field_spec.get("index") is not None:
                    indexes[field_name] = IndexDefinition(
                        name=field_name, fields={field_name: field_spec["index"]}
                    )

        section = definition.get("indexes") or {}
        if not isinstance(section, dict):
            raise ValueError("'indexes' must be a mapping of index name to definition")
        for index_name, data in section.items():
            indexes[index_name] = IndexDefinition.from_dict(index_name, data)

        return indexes

    def apply_definition(
        self, cls: type[Document], schema: Schema, merged: MergedFragment
    ) -> None:
        schema.indexes = dict(merged.effective)

    def init_class(self, cls: type[Document], schema: Schema) -> None:
        for index in schema.indexes.values():
            for path in index.fields:
                if not schema.has_field(path.split(".", 1)[0]):
                    raise CompositionError(
                        f"Index '{index.name}' of class '{schema.name}' "
                        f"references unknown field '{path}'",
                        class_name=schema.name,
                    )
