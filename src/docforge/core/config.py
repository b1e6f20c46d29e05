"""Runtime configuration for docforge."""

from __future__ import annotations

import os
from dataclasses import dataclass

DEFAULT_MAX_NESTING_DEPTH = 32


@dataclass
class DocforgeConfig:
    """Class composition and validation settings.

    Attributes:
        max_nesting_depth: Deepest nested document the validator will walk
        strict_class_refs: Fail composition when an object/list field names a
            class that is not registered once every module has run
    """

    max_nesting_depth: int = DEFAULT_MAX_NESTING_DEPTH
    strict_class_refs: bool = False

    @classmethod
    def from_env(cls) -> DocforgeConfig:
        """Create config from environment variables.

        - DOCFORGE_MAX_DEPTH: integer nesting limit (default 32)
        - DOCFORGE_STRICT_CLASS_REFS: "1"/"true"/"yes" enables strict refs
        """
        depth = os.environ.get("DOCFORGE_MAX_DEPTH")
        strict = os.environ.get("DOCFORGE_STRICT_CLASS_REFS", "")

        max_depth = DEFAULT_MAX_NESTING_DEPTH
        if depth:
            try:
                max_depth = int(depth)
            except ValueError:
                raise ValueError(f"DOCFORGE_MAX_DEPTH must be an integer, got {depth!r}") from None
            if max_depth < 1:
                raise ValueError("DOCFORGE_MAX_DEPTH must be at least 1")

        return cls(
            max_nesting_depth=max_depth,
            strict_class_refs=strict.strip().lower() in ("1", "true", "yes"),
        )
