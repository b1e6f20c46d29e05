"""
metadata/validator.py: JSON Schema validation for docforge YAML class files.

Usage:
    from docforge.metadata.validator import validate_definition_dir

    issues = validate_definition_dir(Path("classes"))
    for issue in issues:
        print(issue)

Only the shape of each file is checked here. Whether a definition composes
(known parent, registered validators, resolvable class references) is
decided by the ClassRegistry when the file is loaded.
"""
from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

logger = logging.getLogger(__name__)

_SCHEMAS_DIR = Path(__file__).parent / "schemas"
CLASS_SCHEMA = "class.schema.json"


@dataclass
class DefinitionIssue:
    """A single validation finding for a class definition file."""

    file: Path
    message: str
    path: str = ""  # location within the document, e.g. "fields/email/index"

    def __str__(self) -> str:
        loc = f" at {self.path}" if self.path else ""
        return f"[ERROR] {self.file}{loc}: {self.message}"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _load_schema(name: str = CLASS_SCHEMA) -> dict[str, Any]:
    schema_path = _SCHEMAS_DIR / name
    with schema_path.open() as fh:
        return json.load(fh)


def _json_path(error: ValidationError) -> str:
    """Convert a jsonschema ValidationError path to a readable string."""
    parts = []
    for p in error.absolute_path:
        if isinstance(p, int):
            parts.append(f"[{p}]")
        else:
            parts.append(str(p))
    return "/".join(parts).replace("/[", "[")


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------


def validate_definition_file(
    yaml_path: Path,
    *,
    validator: Draft202012Validator | None = None,
) -> list[DefinitionIssue]:
    """
    Validate a single YAML class definition file.

    Args:
        yaml_path: Path to the YAML file to validate.
        validator: Pre-built schema validator.  Built automatically if omitted.

    Returns:
        A list of :class:`DefinitionIssue` objects (empty on success).
    """
    try:
        with yaml_path.open() as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        return [DefinitionIssue(file=yaml_path, message=f"YAML parse error: {exc}")]

    if raw is None:
        return [
            DefinitionIssue(file=yaml_path, message="File is empty or contains only whitespace")
        ]

    if validator is None:
        validator = Draft202012Validator(_load_schema())

    issues = [
        DefinitionIssue(file=yaml_path, message=error.message, path=_json_path(error))
        for error in sorted(validator.iter_errors(raw), key=lambda e: list(map(str, e.path)))
    ]
    if issues:
        logger.debug("%s: %d schema issue(s)", yaml_path, len(issues))
    return issues


def validate_definition_dir(definitions_dir: Path) -> list[DefinitionIssue]:
    """
    Validate every ``*.yaml`` file directly under *definitions_dir*.

    Returns:
        A flat list of :class:`DefinitionIssue` objects across all files.
        Empty list means all files are valid.
    """
    if not definitions_dir.is_dir():
        return [
            DefinitionIssue(
                file=definitions_dir,
                message=f"Definitions directory does not exist: {definitions_dir}",
            )
        ]

    try:
        validator = Draft202012Validator(_load_schema())
    except (FileNotFoundError, json.JSONDecodeError) as exc:
        return [
            DefinitionIssue(
                file=_SCHEMAS_DIR,
                message=f"Failed to load JSON Schema file: {exc}",
            )
        ]

    all_issues: list[DefinitionIssue] = []
    for yaml_file in sorted(definitions_dir.glob("*.yaml")):
        all_issues.extend(validate_definition_file(yaml_file, validator=validator))
    return all_issues
