"""Storage module: binds a class to its collection."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from docforge.modules.base import BaseModule, MergedFragment
from docforge.storage import Collection

if TYPE_CHECKING:
    from docforge.document import Document
    from docforge.schema.schema import Schema


class StorageModule(BaseModule):
    """The ``collection`` key; subclasses without one share the parent's."""

    name = "storage"

    def parse_definition(self, definition: dict[str, Any], seed: Any) -> Collection | None:
        collection = definition.get("collection")
        if collection is not None and not isinstance(collection, Collection):
            raise ValueError(
                f"'collection' must implement the Collection protocol, "
                f"got {type(collection).__name__}"
            )
        return collection

    def merge_definitions(
        self, parent: MergedFragment | None, parsed: Collection | None
    ) -> MergedFragment:
        effective = parsed
        if effective is None and parent is not None:
            effective = parent.effective
        return MergedFragment(own=parsed, effective=effective)

    def apply_definition(
        self, cls: type[Document], schema: Schema, merged: MergedFragment
    ) -> None:
        schema.collection = merged.own
