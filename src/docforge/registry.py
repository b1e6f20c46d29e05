"""Class registry: composes class definitions into document classes.

Composition runs every module through six phases. Each phase runs across
all modules, in module registration order, before the next phase starts,
so a phase may rely on every sibling module's earlier output. Any failure
aborts composition with a CompositionError and nothing is published.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping

from docforge.core.config import DocforgeConfig
from docforge.core.errors import CompositionError
from docforge.document import Document
from docforge.modules import BehaviorRegistry, ModuleHook, default_modules, register_builtin_behaviors
from docforge.modules.base import MergedFragment
from docforge.schema.schema import Schema
from docforge.validation.registry import ValidatorRegistry
from docforge.validation.validators import register_builtin_validators

logger = logging.getLogger(__name__)


def default_validator_registry() -> ValidatorRegistry:
    registry = ValidatorRegistry()
    register_builtin_validators(registry)
    return registry


def default_behavior_registry() -> BehaviorRegistry:
    registry = BehaviorRegistry()
    register_builtin_behaviors(registry)
    return registry


def merge_raw_definitions(base: Mapping[str, Any], extra: Mapping[str, Any]) -> dict[str, Any]:
    """Combine two raw class definitions for re-extension.

    Mapping sections merge by key (``extra`` wins); event handlers append.
    """
    result = dict(base)
    for key, value in extra.items():
        if key in ("name", "parent"):
            continue
        current = result.get(key)
        if key == "events" and isinstance(current, dict) and isinstance(value, dict):
            events = {name: _as_list(handlers) for name, handlers in current.items()}
            for name, handlers in value.items():
                events.setdefault(name, []).extend(_as_list(handlers))
            result[key] = events
        elif isinstance(current, dict) and isinstance(value, dict):
            result[key] = {**current, **value}
        elif isinstance(current, list) and isinstance(value, list):
            result[key] = current + [v for v in value if v not in current]
        else:
            result[key] = value
    return result


def _as_list(handlers: Any) -> list:
    if isinstance(handlers, (list, tuple)):
        return list(handlers)
    return [handlers]


def _restore_attributes(cls: type, snapshot: dict[str, Any]) -> None:
    """Put the class namespace back to ``snapshot`` after a failed recomposition."""
    for key in set(cls.__dict__) - set(snapshot):
        delattr(cls, key)
    for key, value in snapshot.items():
        if cls.__dict__.get(key) is not value:
            setattr(cls, key, value)


class ClassRegistry:
    """Composes and owns document classes.

    Example:
        registry = ClassRegistry()
        User = registry.create_class({
            "name": "User",
            "fields": {"email": {"type": "string", "validators": ["email"]}},
        })
        Admin = User.inherit({"name": "Admin", "fields": {"level": "number"}})
    """

    def __init__(
        self,
        modules: Iterable[ModuleHook] | None = None,
        validators: ValidatorRegistry | None = None,
        behaviors: BehaviorRegistry | None = None,
        config: DocforgeConfig | None = None,
    ):
        self.validators = validators if validators is not None else default_validator_registry()
        self.behaviors = behaviors if behaviors is not None else default_behavior_registry()
        self.config = config or DocforgeConfig.from_env()
        if modules is None:
            modules = default_modules(self.validators, self.behaviors)
        self.modules: list[ModuleHook] = list(modules)
        self._classes: dict[str, type[Document]] = {}
        self._definitions: dict[str, dict[str, Any]] = {}

        names = [m.name for m in self.modules]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate module names: {names}")

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def get(self, name: str) -> type[Document]:
        """Get a composed class by name.

        Raises:
            ValueError: If no class with that name is registered
        """
        if name not in self._classes:
            raise ValueError(f"Class '{name}' is not registered.")
        return self._classes[name]

    def has(self, name: str) -> bool:
        return name in self._classes

    def names(self) -> list[str]:
        return list(self._classes.keys())

    def subclasses(self, cls: type[Document]) -> list[type[Document]]:
        """Registered classes whose schema descends from ``cls``."""
        return [
            other
            for other in self._classes.values()
            if other is not cls and other.schema.is_subschema_of(cls.schema)
        ]

    def remove(self, name: str) -> None:
        """Unregister a class without subclasses. Primarily for testing."""
        cls = self.get(name)
        if self.subclasses(cls):
            raise ValueError(f"Class '{name}' has subclasses and cannot be removed")
        del self._classes[name]
        del self._definitions[name]

    def clear(self) -> None:
        """Unregister all classes. Primarily for testing."""
        self._classes.clear()
        self._definitions.clear()

    # -------------------------------------------------------------------------
    # Composition
    # -------------------------------------------------------------------------

    def create_class(self, definition: Mapping[str, Any]) -> type[Document]:
        """Compose and publish a new class.

        Raises:
            CompositionError: If the definition cannot be composed
        """
        if not isinstance(definition, Mapping):
            raise CompositionError("Class definition must be a mapping")
        name = definition.get("name")
        if not isinstance(name, str) or not name:
            raise CompositionError("Class definition needs a non-empty 'name'")
        if name in self._classes:
            raise CompositionError(f"Class '{name}' is already registered", class_name=name)

        parent = self._resolve_parent(name, definition.get("parent"))
        cls = self._compose(name, parent, dict(definition))
        self._classes[name] = cls
        self._definitions[name] = dict(definition)
        logger.info(
            "Composed class '%s'%s",
            name,
            f" (parent '{parent.schema.name}')" if parent else "",
        )
        return cls

    def inherit(self, parent: type[Document] | str, definition: Mapping[str, Any]) -> type[Document]:
        """Compose a subclass of ``parent``."""
        return self.create_class({**definition, "parent": parent})

    def extend(self, cls: type[Document], definition: Mapping[str, Any]) -> type[Document]:
        """Recompose an existing class with additional declarations.

        The class object is kept; its schema is replaced only if composition
        succeeds. Classes that already have subclasses cannot be extended.

        Raises:
            CompositionError: If the class cannot be extended
        """
        name = cls.schema.name
        if self._classes.get(name) is not cls:
            raise CompositionError(f"Class '{name}' is not registered here", class_name=name)
        if self.subclasses(cls):
            raise CompositionError(
                f"Class '{name}' has subclasses and cannot be extended", class_name=name
            )

        combined = merge_raw_definitions(self._definitions[name], definition)
        parent = cls.schema.parent.cls if cls.schema.parent else None
        self._compose(name, parent, dict(combined), existing=cls)
        self._definitions[name] = combined
        logger.info("Extended class '%s'", name)
        return cls

    def _resolve_parent(self, name: str, parent: Any) -> type[Document] | None:
        if parent is None:
            return None
        if isinstance(parent, str):
            if parent not in self._classes:
                raise CompositionError(
                    f"Parent class '{parent}' of '{name}' is not registered", class_name=name
                )
            return self._classes[parent]
        if isinstance(parent, type) and issubclass(parent, Document):
            if self._classes.get(parent.schema.name) is not parent:
                raise CompositionError(
                    f"Parent class '{parent.schema.name}' of '{name}' belongs to another registry",
                    class_name=name,
                )
            return parent
        raise CompositionError(f"Invalid parent for class '{name}': {parent!r}", class_name=name)

    def _compose(
        self,
        name: str,
        parent: type[Document] | None,
        definition: dict[str, Any],
        existing: type[Document] | None = None,
    ) -> type[Document]:
        parent_schema = parent.schema if parent is not None else None
        schema = Schema(name, parent=parent_schema, registry=self, config=self.config)

        phase = "init_schema"
        module_name = ""
        snapshot = dict(existing.__dict__) if existing is not None else None
        try:
            list(schema.iter_ancestors())

            seeds: dict[str, Any] = {}
            for module in self.modules:
                module_name = module.name
                seeds[module.name] = module.init_schema(schema, definition)

            phase = "init_definition"
            for module in self.modules:
                module_name = module.name
                definition = module.init_definition(definition)

            phase = "parse_definition"
            parsed: dict[str, Any] = {}
            for module in self.modules:
                module_name = module.name
                parsed[module.name] = module.parse_definition(definition, seeds[module.name])

            phase = "merge_definitions"
            merged: dict[str, MergedFragment] = {}
            for module in self.modules:
                module_name = module.name
                parent_fragment = (
                    parent_schema.fragments.get(module.name) if parent_schema else None
                )
                merged[module.name] = module.merge_definitions(parent_fragment, parsed[module.name])

            cls = existing or type(name, (parent or Document,), {"schema": schema})
            schema.cls = cls
            schema.fragments = merged

            phase = "apply_definition"
            for module in self.modules:
                module_name = module.name
                module.apply_definition(cls, schema, merged[module.name])

            phase = "init_class"
            for module in self.modules:
                module_name = module.name
                module.init_class(cls, schema)
        except CompositionError:
            if snapshot is not None:
                _restore_attributes(existing, snapshot)
            raise
        except Exception as exc:
            if snapshot is not None:
                _restore_attributes(existing, snapshot)
            raise CompositionError(
                f"Cannot compose class '{name}': {phase} of module '{module_name}' failed: {exc}",
                class_name=name,
            ) from exc

        logger.debug("Class '%s' composed through %d modules", name, len(self.modules))
        if existing is not None:
            existing.schema = schema
        return cls

    # -------------------------------------------------------------------------
    # Read-back
    # -------------------------------------------------------------------------

    def transform(
        self, data: Mapping[str, Any], base: type[Document] | None = None
    ) -> Document:
        """Instantiate persisted data, choosing the subclass named by ``_type``.

        Raises:
            ValueError: If no class can be determined
        """
        cls = base
        type_name = data.get("_type")
        if type_name and type_name in self._classes:
            candidate = self._classes[type_name]
            if base is None or issubclass(candidate, base):
                cls = candidate
        if cls is None:
            raise ValueError(f"Cannot determine class for data with _type={type_name!r}")
        return cls(data)


default_registry = ClassRegistry()


def create_class(definition: Mapping[str, Any]) -> type[Document]:
    """Compose a class in the default registry."""
    return default_registry.create_class(definition)
