"""Validator registry for docforge.

Maps validator kind names to validator functions. A registry is owned by a
ClassRegistry and must be fully populated before any class declaring those
validators is composed; composition fails on an unregistered kind.
"""

from typing import Callable

from docforge.validation.types import ValidatorFn


class ValidatorRegistry:
    """Registry of validator functions.

    Example:
        registry = ValidatorRegistry()
        registry.register("even", check_even)

        fn = registry.get("even")
    """

    def __init__(self) -> None:
        self._validators: dict[str, ValidatorFn] = {}

    def register(self, name: str, fn: ValidatorFn) -> None:
        """Register a validator function by name.

        Idempotent - re-registering the same name is a no-op.

        Args:
            name: Validator kind used in class definitions (e.g., "minLength")
            fn: Function taking a ValidatorCall and returning a list of details
        """
        if name in self._validators:
            return
        self._validators[name] = fn

    def get(self, name: str) -> ValidatorFn:
        """Get a registered validator function by name.

        Raises:
            ValueError: If validator is not registered
        """
        if name not in self._validators:
            raise ValueError(
                f"Validator '{name}' is not registered. "
                "Validators must be registered before classes using them are composed."
            )
        return self._validators[name]

    def is_registered(self, name: str) -> bool:
        """Check if a validator is registered."""
        return name in self._validators

    def list_registered(self) -> list[str]:
        """List all registered validator names."""
        return sorted(self._validators.keys())

    def clear(self) -> None:
        """Clear all registrations. Primarily for testing."""
        self._validators.clear()

    def validator(self, name: str) -> Callable[[ValidatorFn], ValidatorFn]:
        """Decorator to register a validator function.

        Usage:
            @registry.validator("even")
            def check_even(call: ValidatorCall) -> list[ValidationDetail]:
                ...
        """

        def decorator(fn: ValidatorFn) -> ValidatorFn:
            self.register(name, fn)
            return fn

        return decorator
