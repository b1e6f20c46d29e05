"""Error taxonomy for docforge.

- CompositionError: a class could not be composed (fatal, nothing published)
- CastError: a value could not be coerced to a field's canonical type
- ValidationError: one or more field-level validation failures
- NoCollectionError: persistence attempted on a class with no collection
- NestingDepthError: a document nests deeper than the configured limit
"""

from typing import Any

from docforge.validation.types import ValidationDetail


class DocforgeError(Exception):
    """Base class for all docforge errors."""


class CompositionError(DocforgeError):
    """Raised when a class definition cannot be composed into a Schema."""

    def __init__(self, message: str, class_name: str | None = None):
        super().__init__(message)
        self.class_name = class_name


class CastError(DocforgeError, ValueError):
    """Raised when a value cannot be cast to a field's type.

    Attributes:
        field: Field name being cast, when known
        value: The offending input value
        index: Element index for list casts, None otherwise
    """

    def __init__(
        self,
        message: str,
        value: Any = None,
        field: str | None = None,
        index: int | None = None,
    ):
        super().__init__(message)
        self.value = value
        self.field = field
        self.index = index

    def for_field(self, field: str) -> "CastError":
        """Return a copy of this error attributed to a field."""
        label = f"{field}.{self.index}" if self.index is not None else field
        return CastError(
            f'Cannot cast "{label}": {self}',
            value=self.value,
            field=field,
            index=self.index,
        )


class ValidationError(DocforgeError):
    """One or more validation failures.

    Attributes:
        details: Ordered list of ValidationDetail entries
    """

    def __init__(self, details: list[ValidationDetail], message: str | None = None):
        if not details:
            raise ValueError("ValidationError requires at least one detail")
        super().__init__(message or details[0].message)
        self.details = list(details)

    @property
    def paths(self) -> list[str]:
        return [d.path for d in self.details]

    def to_dict(self) -> dict[str, Any]:
        return {
            "message": str(self),
            "details": [d.to_dict() for d in self.details],
        }


class NoCollectionError(DocforgeError):
    """Raised when save/remove/reload is attempted without a bound collection."""


class NestingDepthError(DocforgeError):
    """Raised when validation recurses deeper than the configured limit."""
