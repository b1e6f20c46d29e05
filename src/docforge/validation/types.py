"""Core types for the docforge validation system.

- ValidationDetail: one failure entry {path, kind, message}
- ValidatorDefinition: a named validation rule bound to a field
- ValidatorCall: runtime arguments passed to a validator function
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable

if TYPE_CHECKING:
    from docforge.document import Document


@dataclass(frozen=True)
class ValidationDetail:
    """A single validation failure.

    Attributes:
        path: Field path, prefixed for nested documents (e.g. "address.city")
        kind: Validator kind that produced the failure (e.g. "required")
        message: Human-readable message
    """

    path: str
    kind: str
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "kind": self.kind,
            "message": self.message,
        }


@dataclass
class ValidatorCall:
    """Arguments passed to a validator function for one field value.

    Attributes:
        doc: The document being validated
        name: Prefixed field path used in error entries
        nested_name: Field name within ``doc`` (no prefix)
        value: Current resolved value of the field
        kind: Validator kind being executed
        param: Resolved parameter (static or computed against ``doc``)
        message: Optional message template from the definition
        resolve_error: Optional callable producing the message from this call
    """

    doc: "Document"
    name: str
    nested_name: str
    value: Any
    kind: str
    param: Any = None
    message: str | None = None
    resolve_error: Callable[["ValidatorCall"], str] | None = None

    def error(self, default_message: str) -> list[ValidationDetail]:
        """Build the single-entry error list for a failed check."""
        from docforge.validation.messages import MessageInterpolator

        if self.resolve_error is not None:
            message = self.resolve_error(self)
        elif self.message:
            message = MessageInterpolator().interpolate(self.message, self)
        else:
            message = default_message
        return [ValidationDetail(path=self.name, kind=self.kind, message=message)]


ValidatorFn = Callable[[ValidatorCall], list[ValidationDetail]]


@dataclass
class ValidatorDefinition:
    """Declarative validator bound to a field.

    Attributes:
        field: Field name the validator applies to
        kind: Registered validator name ("required", "minLength", ...)
        param: Static parameter
        resolve_param: Callable computing the parameter from the document
        message: Message template (supports {name}, {param}, {value})
        resolve_error: Callable building the message from a ValidatorCall
        function: Validator function, bound at composition time
    """

    field: str
    kind: str
    param: Any = None
    resolve_param: Callable[["Document"], Any] | None = None
    message: str | None = None
    resolve_error: Callable[[ValidatorCall], str] | None = None
    function: ValidatorFn | None = None

    @classmethod
    def from_spec(cls, field: str, spec: Any) -> "ValidatorDefinition":
        """Create a ValidatorDefinition from shorthand or a dict.

        Accepts a bare kind name ("required") or a mapping with ``type``
        plus optional ``param``, ``resolveParam``, ``message`` and
        ``resolveError`` (snake_case spellings are accepted as well).
        """
        if isinstance(spec, str):
            return cls(field=field, kind=spec)
        if not isinstance(spec, dict) or "type" not in spec:
            raise ValueError(
                f"Validator for field '{field}' must be a name or a mapping with 'type'"
            )
        return cls(
            field=field,
            kind=spec["type"],
            param=spec.get("param"),
            resolve_param=spec.get("resolveParam") or spec.get("resolve_param"),
            message=spec.get("message"),
            resolve_error=spec.get("resolveError") or spec.get("resolve_error"),
        )

    def resolve_param_for(self, doc: "Document") -> Any:
        if self.resolve_param is not None:
            return self.resolve_param(doc)
        return self.param
