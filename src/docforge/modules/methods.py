"""Methods module: installs declared functions as document methods."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Callable

from docforge.core.errors import CompositionError
from docforge.modules.base import BaseModule, MergedFragment

if TYPE_CHECKING:
    from docforge.document import Document
    from docforge.schema.schema import Schema


class MethodsModule(BaseModule):
    name = "methods"

    def parse_definition(self, definition: dict[str, Any], seed: Any) -> dict[str, Callable]:
        section = definition.get("methods") or {}
        if not isinstance(section, dict):
            raise ValueError("'methods' must be a mapping of name to function")
        for method_name, fn in section.items():
            if not callable(fn):
                raise ValueError(f"Method '{method_name}' is not callable")
        return dict(section)

    def apply_definition(
        self, cls: type[Document], schema: Schema, merged: MergedFragment
    ) -> None:
        from docforge.document import Document

        for method_name, fn in merged.own.items():
            if hasattr(Document, method_name):
                raise CompositionError(
                    f"Method '{method_name}' of class '{schema.name}' would override "
                    "a built-in document method",
                    class_name=schema.name,
                )
            setattr(cls, method_name, fn)
        schema.methods = dict(merged.effective)

    def init_class(self, cls: type[Document], schema: Schema) -> None:
        for method_name in schema.methods:
            if schema.has_field(method_name):
                raise CompositionError(
                    f"Method '{method_name}' of class '{schema.name}' collides with a field",
                    class_name=schema.name,
                )
