"""docforge: composable document classes with cascading validation.

Usage:
    from docforge import ClassRegistry, MemoryCollection

    registry = ClassRegistry()
    Address = registry.create_class({
        "name": "Address",
        "fields": {"city": "string"},
    })
    User = registry.create_class({
        "name": "User",
        "collection": MemoryCollection("users"),
        "fields": {
            "email": {"type": "string", "validators": ["email"]},
            "address": "Address",
        },
    })

    user = User({"email": "jane@example.com", "address": {"city": "Oslo"}})
    user.validate()
    user.save()
"""

from docforge.core.config import DocforgeConfig
from docforge.core.errors import (
    CastError,
    CompositionError,
    DocforgeError,
    NestingDepthError,
    NoCollectionError,
    ValidationError,
)
from docforge.core.types import TypeDescriptor, TypeKind, list_of, object_of
from docforge.document import Document
from docforge.modules import BaseModule, BehaviorRegistry, MergedFragment, ModuleHook
from docforge.registry import ClassRegistry, create_class, default_registry
from docforge.schema.events import Event
from docforge.schema.fields import FieldDefinition
from docforge.schema.schema import Schema
from docforge.storage import Collection, MemoryCollection
from docforge.validation import ValidationDetail, ValidatorCall, ValidatorRegistry

__version__ = "0.1.0"

__all__ = [
    # Composition
    "BaseModule",
    "BehaviorRegistry",
    "ClassRegistry",
    "MergedFragment",
    "ModuleHook",
    "Schema",
    "create_class",
    "default_registry",
    # Documents
    "Document",
    "Event",
    "FieldDefinition",
    "TypeDescriptor",
    "TypeKind",
    "list_of",
    "object_of",
    # Validation
    "ValidationDetail",
    "ValidatorCall",
    "ValidatorRegistry",
    # Storage
    "Collection",
    "MemoryCollection",
    # Config and errors
    "CastError",
    "CompositionError",
    "DocforgeConfig",
    "DocforgeError",
    "NestingDepthError",
    "NoCollectionError",
    "ValidationError",
]
