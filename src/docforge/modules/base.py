"""Module hook protocol for the class composition pipeline.

A module contributes one slice of a class definition (fields, validators,
events, ...) through six phases. The ClassRegistry runs each phase across
every registered module before moving on to the next phase, passing each
module's phase output to its next phase explicitly:

1. init_schema(schema, definition) -> seed
2. init_definition(definition) -> definition
3. parse_definition(definition, seed) -> parsed
4. merge_definitions(parent, parsed) -> MergedFragment
5. apply_definition(cls, schema, merged)
6. init_class(cls, schema)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Generic, Protocol, TypeVar, runtime_checkable

if TYPE_CHECKING:
    from docforge.document import Document
    from docforge.schema.schema import Schema

T = TypeVar("T")

PHASES = (
    "init_schema",
    "init_definition",
    "parse_definition",
    "merge_definitions",
    "apply_definition",
    "init_class",
)


@dataclass
class MergedFragment(Generic[T]):
    """Output of merge_definitions.

    Attributes:
        own: What this class declares itself
        effective: Own declarations merged over the parent's effective fragment
    """

    own: T
    effective: T


@runtime_checkable
class ModuleHook(Protocol):
    """Interface every composition module implements."""

    name: str

    def init_schema(self, schema: Schema, definition: dict[str, Any]) -> Any: ...

    def init_definition(self, definition: dict[str, Any]) -> dict[str, Any]: ...

    def parse_definition(self, definition: dict[str, Any], seed: Any) -> Any: ...

    def merge_definitions(self, parent: MergedFragment | None, parsed: Any) -> MergedFragment: ...

    def apply_definition(
        self, cls: type[Document], schema: Schema, merged: MergedFragment
    ) -> None: ...

    def init_class(self, cls: type[Document], schema: Schema) -> None: ...


class BaseModule:
    """No-op implementation of every phase.

    Subclasses override only the phases they need. The default merge is
    "child replaces by key, parent provides the rest" over dict fragments.
    """

    name = "base"

    def init_schema(self, schema: Schema, definition: dict[str, Any]) -> Any:
        return None

    def init_definition(self, definition: dict[str, Any]) -> dict[str, Any]:
        return definition

    def parse_definition(self, definition: dict[str, Any], seed: Any) -> Any:
        return {}

    def merge_definitions(self, parent: MergedFragment | None, parsed: Any) -> MergedFragment:
        effective = dict(parent.effective) if parent is not None else {}
        effective.update(parsed)
        return MergedFragment(own=parsed, effective=effective)

    def apply_definition(
        self, cls: type[Document], schema: Schema, merged: MergedFragment
    ) -> None:
        pass

    def init_class(self, cls: type[Document], schema: Schema) -> None:
        pass
