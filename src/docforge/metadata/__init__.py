"""YAML class definitions: loading into a ClassRegistry and schema checks."""

from docforge.metadata.loader import ClassLoader
from docforge.metadata.validator import (
    DefinitionIssue,
    validate_definition_dir,
    validate_definition_file,
)

__all__ = [
    "ClassLoader",
    "DefinitionIssue",
    "validate_definition_dir",
    "validate_definition_file",
]
