"""docforge validation system.

Validators are plain functions registered by kind name in a
ValidatorRegistry and bound to fields when a class is composed:

Usage:
    from docforge.validation import ValidatorRegistry, ValidatorCall

    registry = ValidatorRegistry()

    @registry.validator("even")
    def even(call: ValidatorCall):
        if call.value % 2:
            return call.error(f'"{call.name}" has to be even')
        return []

The recursive engine lives in docforge.validation.engine and the built-in
validators in docforge.validation.validators.
"""

from docforge.validation.messages import MessageInterpolator
from docforge.validation.registry import ValidatorRegistry
from docforge.validation.types import (
    ValidationDetail,
    ValidatorCall,
    ValidatorDefinition,
    ValidatorFn,
)

__all__ = [
    # Types
    "ValidationDetail",
    "ValidatorCall",
    "ValidatorDefinition",
    "ValidatorFn",
    # Registry
    "ValidatorRegistry",
    # Messages
    "MessageInterpolator",
]
