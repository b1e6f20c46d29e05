"""Composition modules.

Each module handles one slice of a class definition. The order returned by
default_modules() is the order in which modules run within every phase.
"""

from docforge.modules.base import PHASES, BaseModule, MergedFragment, ModuleHook
from docforge.modules.behaviors import (
    BehaviorRegistry,
    BehaviorsModule,
    register_builtin_behaviors,
    timestamp_behavior,
)
from docforge.modules.events import EventsModule
from docforge.modules.fields import FieldsModule
from docforge.modules.indexes import IndexDefinition, IndexesModule
from docforge.modules.methods import MethodsModule
from docforge.modules.storage import StorageModule
from docforge.modules.validators import ValidatorsModule
from docforge.validation.registry import ValidatorRegistry


def default_modules(
    validators: ValidatorRegistry,
    behaviors: BehaviorRegistry,
) -> list[ModuleHook]:
    """The built-in modules in registration order."""
    return [
        StorageModule(),
        BehaviorsModule(behaviors),
        EventsModule(),
        MethodsModule(),
        FieldsModule(),
        IndexesModule(),
        ValidatorsModule(validators),
    ]


__all__ = [
    "PHASES",
    "BaseModule",
    "BehaviorRegistry",
    "BehaviorsModule",
    "EventsModule",
    "FieldsModule",
    "IndexDefinition",
    "IndexesModule",
    "MergedFragment",
    "MethodsModule",
    "ModuleHook",
    "StorageModule",
    "ValidatorsModule",
    "default_modules",
    "register_builtin_behaviors",
    "timestamp_behavior",
]
