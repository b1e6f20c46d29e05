"""Loads class definitions from YAML files into a ClassRegistry.

File format:

    class: Customer
    parent: Person            # optional, another loaded or registered class
    collection: customers     # optional, key into the ``collections`` mapping
    behaviors: [timestamp]
    fields:
      email:
        type: string
        index: 1
        validators: [email]
      tags: [string]
    validators:
      email: [{type: maxLength, param: 120}]
    indexes:
      byName: {fields: {lastName: 1, firstName: 1}}
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Mapping

import yaml

from docforge.core.errors import CompositionError
from docforge.document import Document
from docforge.registry import ClassRegistry, default_registry
from docforge.storage import Collection

logger = logging.getLogger(__name__)

# YAML key -> class definition key; "class" becomes "name"
DEFINITION_KEYS = ("parent", "fields", "validators", "indexes", "behaviors")


class ClassLoader:
    """Loads every ``*.yaml`` class definition under a directory."""

    def __init__(
        self,
        path: Path,
        registry: ClassRegistry | None = None,
        collections: Mapping[str, Collection] | None = None,
    ):
        self.path = Path(path)
        self.registry = registry if registry is not None else default_registry
        self.collections = dict(collections or {})
        self.definitions: dict[str, dict[str, Any]] = {}

    def load_all(self) -> dict[str, type[Document]]:
        """Read and compose every definition, parents before children.

        Returns:
            Composed classes by name, in composition order

        Raises:
            CompositionError: If a definition is malformed, its parent is
                unknown, parents form a cycle, or composition fails
        """
        self._read_files()

        composed: dict[str, type[Document]] = {}
        for name in self._composition_order():
            composed[name] = self.registry.create_class(self._to_definition(name))
        logger.info("Loaded %d class(es) from %s", len(composed), self.path)
        return composed

    def _read_files(self) -> None:
        self.definitions = {}
        if not self.path.is_dir():
            raise CompositionError(f"Definitions directory does not exist: {self.path}")

        for yaml_file in sorted(self.path.glob("*.yaml")):
            with open(yaml_file) as f:
                data = yaml.safe_load(f)
            if not data:
                logger.debug("Skipping empty definition file %s", yaml_file)
                continue
            if not isinstance(data, dict) or "class" not in data:
                raise CompositionError(f"{yaml_file}: expected a mapping with a 'class' key")

            name = data["class"]
            if name in self.definitions:
                raise CompositionError(
                    f"{yaml_file}: class '{name}' is defined more than once", class_name=name
                )
            self.definitions[name] = data

    def _composition_order(self) -> list[str]:
        order: list[str] = []
        visiting: set[str] = set()

        def visit(name: str) -> None:
            if name in order:
                return
            if name in visiting:
                raise CompositionError(
                    f"Cyclic parent chain detected at class '{name}'", class_name=name
                )
            visiting.add(name)
            parent = self.definitions[name].get("parent")
            if parent is not None:
                if parent in self.definitions:
                    visit(parent)
                elif not self.registry.has(parent):
                    raise CompositionError(
                        f"Parent class '{parent}' of '{name}' is neither loaded nor registered",
                        class_name=name,
                    )
            visiting.discard(name)
            order.append(name)

        for name in self.definitions:
            visit(name)
        return order

    def _to_definition(self, name: str) -> dict[str, Any]:
        data = self.definitions[name]
        definition: dict[str, Any] = {"name": name}
        for key in DEFINITION_KEYS:
            if data.get(key) is not None:
                definition[key] = data[key]

        collection_name = data.get("collection")
        if collection_name is not None:
            if collection_name not in self.collections:
                raise CompositionError(
                    f"Class '{name}' uses unknown collection '{collection_name}'",
                    class_name=name,
                )
            definition["collection"] = self.collections[collection_name]
        return definition
