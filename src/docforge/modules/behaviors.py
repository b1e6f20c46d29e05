"""Behaviors module: reusable definition fragments applied by name.

A behavior factory takes the options given in a class definition and returns
a definition fragment (``fields``, ``events``, ``methods``, ``indexes``) that
is folded into the class definition during init_definition. Declarations made
by the class itself win over the behavior's.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any, Callable

from docforge.modules.base import BaseModule, MergedFragment
from docforge.schema.events import Event

if TYPE_CHECKING:
    from docforge.document import Document
    from docforge.schema.schema import Schema

BehaviorFactory = Callable[[dict[str, Any]], dict[str, Any]]


class BehaviorRegistry:
    """Registry of behavior factories.

    Example:
        registry = BehaviorRegistry()
        registry.register("timestamp", timestamp_behavior)
    """

    def __init__(self) -> None:
        self._behaviors: dict[str, BehaviorFactory] = {}

    def register(self, name: str, factory: BehaviorFactory) -> None:
        """Register a behavior factory by name. Idempotent."""
        if name in self._behaviors:
            return
        self._behaviors[name] = factory

    def get(self, name: str) -> BehaviorFactory:
        """Get a registered behavior factory.

        Raises:
            ValueError: If behavior is not registered
        """
        if name not in self._behaviors:
            raise ValueError(f"Behavior '{name}' is not registered.")
        return self._behaviors[name]

    def is_registered(self, name: str) -> bool:
        return name in self._behaviors

    def list_registered(self) -> list[str]:
        return sorted(self._behaviors.keys())

    def clear(self) -> None:
        """Clear all registrations. Primarily for testing."""
        self._behaviors.clear()


def normalize_behaviors(spec: Any) -> dict[str, dict[str, Any]]:
    """Accept a list of names or a mapping of name to options."""
    if spec is None:
        return {}
    if isinstance(spec, str):
        return {spec: {}}
    if isinstance(spec, (list, tuple)):
        return {name: {} for name in spec}
    if isinstance(spec, dict):
        return {name: dict(options or {}) for name, options in spec.items()}
    raise ValueError("'behaviors' must be a name, a list of names or a mapping")


def apply_fragment(definition: dict[str, Any], fragment: dict[str, Any]) -> dict[str, Any]:
    """Fold a behavior fragment into a class definition, class declarations winning."""
    result = dict(definition)

    for key in ("fields", "methods", "indexes"):
        if fragment.get(key):
            own = definition.get(key) or {}
            if not isinstance(own, dict):
                own = {name: None for name in own}
            result[key] = {**fragment[key], **own}

    if fragment.get("events"):
        events = {name: _as_list(handlers) for name, handlers in fragment["events"].items()}
        for name, handlers in (definition.get("events") or {}).items():
            events.setdefault(name, []).extend(_as_list(handlers))
        result["events"] = events

    return result


def _as_list(handlers: Any) -> list:
    if isinstance(handlers, (list, tuple)):
        return list(handlers)
    return [handlers]


class BehaviorsModule(BaseModule):
    name = "behaviors"

    def __init__(self, registry: BehaviorRegistry):
        self.registry = registry

    def init_definition(self, definition: dict[str, Any]) -> dict[str, Any]:
        behaviors = normalize_behaviors(definition.get("behaviors"))
        result = dict(definition)
        result["behaviors"] = behaviors
        for behavior_name, options in behaviors.items():
            factory = self.registry.get(behavior_name)
            result = apply_fragment(result, factory(options))
        return result

    def parse_definition(self, definition: dict[str, Any], seed: Any) -> dict[str, dict[str, Any]]:
        return dict(definition.get("behaviors") or {})

    def apply_definition(
        self, cls: type[Document], schema: Schema, merged: MergedFragment
    ) -> None:
        schema.behaviors = dict(merged.effective)


# =============================================================================
# Built-in behaviors
# =============================================================================

TIMESTAMP_DEFAULTS = {
    "hasCreatedField": True,
    "createdFieldName": "createdAt",
    "hasUpdatedField": True,
    "updatedFieldName": "updatedAt",
}


def timestamp_behavior(options: dict[str, Any]) -> dict[str, Any]:
    """Adds created/updated date fields maintained on insert and update."""
    opts = {**TIMESTAMP_DEFAULTS, **(options or {})}
    created = opts["createdFieldName"] if opts["hasCreatedField"] else None
    updated = opts["updatedFieldName"] if opts["hasUpdatedField"] else None

    fields = {}
    for name in (created, updated):
        if name:
            fields[name] = {"type": "date", "optional": True}

    def before_insert(event: Event) -> None:
        now = datetime.now(timezone.utc)
        if created:
            event.doc.set(created, now)
        if updated:
            event.doc.set(updated, now)

    def before_update(event: Event) -> None:
        if updated:
            event.doc.set(updated, datetime.now(timezone.utc))

    return {
        "fields": fields,
        "events": {"beforeInsert": [before_insert], "beforeUpdate": [before_update]},
    }


def register_builtin_behaviors(registry: BehaviorRegistry) -> None:
    """Register all built-in behaviors with a BehaviorRegistry."""
    registry.register("timestamp", timestamp_behavior)
